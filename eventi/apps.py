"""
Config app eventi.
"""

from django.apps import AppConfig


class EventiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'eventi'
    verbose_name = 'Eventi'

    def ready(self):
        """
        Registra i model nel SearchRegistry per la ricerca globale.
        """
        from core.search import SearchRegistry
        from .models import Evento, ListaSpesa

        SearchRegistry.register(
            model=Evento,
            category='Eventi',
            icon='bi-calendar-event',
            priority=8
        )

        SearchRegistry.register(
            model=ListaSpesa,
            category='Liste spesa',
            icon='bi-basket',
            priority=4
        )
