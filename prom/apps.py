"""
Config app prom.
"""

from django.apps import AppConfig


class PromConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'prom'
    verbose_name = 'Prom'

    def ready(self):
        from core.search import SearchRegistry
        from .models import EventoProm, PreventivoFornitore

        SearchRegistry.register(
            model=EventoProm,
            category='Prom',
            icon='bi-stars',
            priority=6
        )
        SearchRegistry.register(
            model=PreventivoFornitore,
            category='Preventivi',
            icon='bi-receipt',
            priority=3
        )
