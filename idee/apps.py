"""
Config app idee.
"""

from django.apps import AppConfig


class IdeeConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'idee'
    verbose_name = 'Idee e riunioni'

    def ready(self):
        from core.search import SearchRegistry
        from .models import Idea

        SearchRegistry.register(
            model=Idea,
            category='Idee',
            icon='bi-lightbulb',
            priority=9
        )
