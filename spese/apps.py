"""
Config app spese.
"""

from django.apps import AppConfig


class SpeseConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'spese'
    verbose_name = 'Spese'

    def ready(self):
        from core.search import SearchRegistry
        from .models import Spesa

        SearchRegistry.register(
            model=Spesa,
            category='Spese',
            icon='bi-cash-coin',
            priority=5
        )
