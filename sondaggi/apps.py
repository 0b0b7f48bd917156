"""
Config app sondaggi.
"""

from django.apps import AppConfig


class SondaggiConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'sondaggi'
    verbose_name = 'Sondaggi'

    def ready(self):
        from core.search import SearchRegistry
        from .models import RispostaCompetenze

        SearchRegistry.register(
            model=RispostaCompetenze,
            category='Sondaggio competenze',
            icon='bi-person-badge',
            priority=10
        )
