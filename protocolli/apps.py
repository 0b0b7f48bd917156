"""
Config app protocolli.
"""

from django.apps import AppConfig


class ProtocolliConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'protocolli'
    verbose_name = 'Protocolli'

    def ready(self):
        from core.search import SearchRegistry
        from .models import Protocollo

        SearchRegistry.register(
            model=Protocollo,
            category='Protocolli',
            icon='bi-journal-text',
            priority=7
        )
