from django.apps import AppConfig


class UsersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "users"
    verbose_name = "Users - Gestione Utenti"

    def ready(self):
        """
        Registra model User nel SearchRegistry per ricerca globale.
        """
        from core.search import SearchRegistry
        from .models import User

        SearchRegistry.register(
            model=User, category="Utenti", icon="bi-person-circle", priority=3
        )
