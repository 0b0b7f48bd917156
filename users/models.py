"""
Models per l'app users.

User personalizzato con telefono e ruolo nel comitato.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.urls import reverse

from core.models import SearchableMixin


class User(SearchableMixin, AbstractUser):
    """
    Utente del pannello di amministrazione del comitato.

    - admin: accesso completo (impostazioni, dati riservati fornitori, voti)
    - editor: gestione contenuti
    """

    RUOLO_CHOICES = [
        ("admin", "Amministratore"),
        ("editor", "Editor"),
    ]

    telefono = models.CharField("Telefono", max_length=20, blank=True)
    ruolo = models.CharField(
        "Ruolo", max_length=10, choices=RUOLO_CHOICES, default="editor"
    )

    class Meta:
        verbose_name = "Utente"
        verbose_name_plural = "Utenti"
        ordering = ["username"]

    def __str__(self):
        return self.get_full_name() or self.username

    def get_absolute_url(self):
        return reverse("admin:users_user_change", args=[self.pk])

    @classmethod
    def get_search_fields(cls):
        return ["username", "first_name", "last_name", "email", "telefono"]

    def get_search_result_display(self):
        return f"{self} ({self.get_ruolo_display()})"

    @property
    def is_portal_admin(self):
        return self.is_superuser or self.ruolo == "admin"

    # Permessi per ruolo: i modelli elencati in MODELLI_SOLO_ADMIN restano
    # agli amministratori, il resto delle app contenuto è aperto agli editor.
    APP_CONTENUTI = {
        "attivita", "comunicazioni", "eventi", "idee",
        "prom", "protocolli", "sondaggi", "spese",
    }
    MODELLI_SOLO_ADMIN = {
        "comunicazioni.impostazioniapp",
        "prom.preventivofornitore",
        "prom.voto",
        "sondaggi.rispostacompetenze",
    }

    def _permesso_da_ruolo(self, perm):
        if not self.is_active:
            return False
        if self.ruolo == "admin":
            return True
        app_label, _, codename = perm.partition(".")
        modello = codename.partition("_")[2]
        return (
            app_label in self.APP_CONTENUTI
            and f"{app_label}.{modello}" not in self.MODELLI_SOLO_ADMIN
        )

    def has_perm(self, perm, obj=None):
        if self._permesso_da_ruolo(perm):
            return True
        return super().has_perm(perm, obj)

    def has_module_perms(self, app_label):
        if self.is_active and (self.ruolo == "admin" or app_label in self.APP_CONTENUTI):
            return True
        return super().has_module_perms(app_label)
