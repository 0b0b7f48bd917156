"""
Ricerca globale - SearchRegistry

Ogni app registra i propri model ricercabili nel metodo ready() di apps.py.
"""

import logging

logger = logging.getLogger(__name__)


class SearchRegistry:
    """
    Registry centrale dei model ricercabili del portale.

    Esempio:
        # eventi/apps.py
        def ready(self):
            from core.search import SearchRegistry
            from .models import Evento

            SearchRegistry.register(
                model=Evento,
                category='Eventi',
                icon='bi-calendar-event',
                priority=8
            )

    I model registrati devono esporre search(query) (vedi SearchableMixin),
    get_search_result_display() e get_absolute_url().
    """

    _registry = {}

    @staticmethod
    def _key(model):
        return f"{model._meta.app_label}.{model._meta.model_name}"

    @classmethod
    def register(cls, model, category, icon="bi-file-earmark", priority=5):
        cls._registry[cls._key(model)] = {
            "model": model,
            "category": category,
            "icon": icon,
            "priority": priority,
            "verbose_name": model._meta.verbose_name,
            "verbose_name_plural": model._meta.verbose_name_plural,
        }

    @classmethod
    def unregister(cls, model):
        cls._registry.pop(cls._key(model), None)

    @classmethod
    def is_registered(cls, model):
        return cls._key(model) in cls._registry

    @classmethod
    def get_all_models(cls):
        return [entry["model"] for entry in cls._registry.values()]

    @classmethod
    def search_all(cls, query, max_results_per_model=5):
        """
        Esegue la ricerca in tutti i model registrati.

        Returns:
            list: [{'category': ..., 'items': [...]}] ordinata per categoria
        """
        if not query or not query.strip():
            return []

        results_by_category = {}

        for model_key, model_info in cls._registry.items():
            model = model_info["model"]
            try:
                model_results = list(model.search(query))
            except Exception as e:
                # Un model in errore non blocca la ricerca negli altri
                logger.error(f"Errore ricerca in {model_key}: {e}")
                continue

            for obj in model_results:
                results_by_category.setdefault(model_info["category"], []).append(
                    {
                        "id": str(obj.pk),
                        "title": obj.get_search_result_display(),
                        "subtitle": str(model._meta.verbose_name),
                        "url": obj.get_absolute_url(),
                        "icon": model_info["icon"],
                        "priority": model_info["priority"],
                    }
                )

        results = []
        for category, items in results_by_category.items():
            items.sort(key=lambda x: x["priority"], reverse=True)
            results.append({"category": category, "items": items[:max_results_per_model]})

        results.sort(key=lambda x: x["category"])
        return results

    @classmethod
    def clear(cls):
        """Svuota il registry (usato nei test)."""
        cls._registry = {}
