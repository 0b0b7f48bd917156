"""
Config app attivita.
"""

from django.apps import AppConfig


class AttivitaConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'attivita'
    verbose_name = 'Attività'

    def ready(self):
        from core.search import SearchRegistry
        from .models import Attivita

        SearchRegistry.register(
            model=Attivita,
            category='Attività',
            icon='bi-list-check',
            priority=8
        )
