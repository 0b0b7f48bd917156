"""
Base Models del Portale Comitato

Tutti i models delle app ereditano da BaseModel per avere
chiave UUID, timestamp, tracking utente e soft delete.
"""

from django.db import models
from django.conf import settings
from django.utils import timezone
import uuid


class BaseModel(models.Model):
    """
    Abstract base model per tutti i models del portale.

    Fornisce:
    - UUID come primary key
    - Timestamp di creazione e modifica
    - Tracking utente creatore e modificatore
    - Soft delete capabilities

    Usage:
        class Spesa(BaseModel):
            titolo = models.CharField(max_length=200)
    """

    id = models.UUIDField(
        primary_key=True, default=uuid.uuid4, editable=False, verbose_name="ID"
    )

    # Timestamp automatici
    created_at = models.DateTimeField(
        "Data creazione", auto_now_add=True, db_index=True
    )
    updated_at = models.DateTimeField("Data modifica", auto_now=True)

    # Tracking utenti
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(class)s_created",
        verbose_name="Creato da",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(class)s_updated",
        verbose_name="Modificato da",
    )

    # Soft delete
    is_active = models.BooleanField("Attivo", default=True, db_index=True)
    deleted_at = models.DateTimeField("Data cancellazione", null=True, blank=True)

    class Meta:
        abstract = True
        get_latest_by = "created_at"
        ordering = ["-created_at"]

    def soft_delete(self, user=None):
        """
        Esegue soft delete del record.

        Args:
            user: Utente che esegue la cancellazione
        """
        self.is_active = False
        self.deleted_at = timezone.now()
        if user:
            self.updated_by = user
        self.save()

    def restore(self, user=None):
        """Ripristina un record cancellato."""
        self.is_active = True
        self.deleted_at = None
        if user:
            self.updated_by = user
        self.save()


class BaseModelWithCode(BaseModel):
    """
    Abstract model con codice univoco automatico (PREFIX-YYYYMMDD-NNNN).

    Usage:
        class Protocollo(BaseModelWithCode):
            CODE_PREFIX = "PRT"
    """

    CODE_PREFIX = ""
    CODE_LENGTH = 4

    codice = models.CharField(
        "Codice", max_length=50, unique=True, db_index=True, editable=False
    )

    class Meta:
        abstract = True

    def generate_code(self):
        """
        Genera il prossimo codice del giorno.

        Returns:
            str: Codice generato
        """
        today = timezone.now().strftime("%Y%m%d")
        prefix = f"{self.CODE_PREFIX}-{today}-"

        last_obj = (
            self.__class__.objects.filter(codice__startswith=prefix)
            .order_by("-codice")
            .first()
        )

        if last_obj:
            new_number = int(last_obj.codice.split("-")[-1]) + 1
        else:
            new_number = 1

        return f"{prefix}{str(new_number).zfill(self.CODE_LENGTH)}"

    def save(self, *args, **kwargs):
        if not self.codice:
            self.codice = self.generate_code()
        super().save(*args, **kwargs)


class BaseModelSimple(models.Model):
    """
    Versione semplificata di BaseModel: PK intera e soli timestamp.

    Usata per tabelle di configurazione (impostazioni, gruppi classe).
    """

    created_at = models.DateTimeField(
        "Data creazione", auto_now_add=True, db_index=True
    )
    updated_at = models.DateTimeField("Data modifica", auto_now=True)

    class Meta:
        abstract = True
        get_latest_by = "created_at"
        ordering = ["-created_at"]


class SearchableMixin:
    """
    Rende un model ricercabile dalla ricerca globale (SearchRegistry).

    Le subclassi definiscono get_search_fields() e, se serve,
    get_search_result_display().
    """

    @classmethod
    def get_search_fields(cls):
        raise NotImplementedError(
            f"{cls.__name__} deve implementare il metodo get_search_fields()"
        )

    @classmethod
    def search(cls, query):
        """
        Cerca query (icontains) nei campi di get_search_fields().

        Returns:
            QuerySet: primi 5 risultati
        """
        if not query or not query.strip():
            return cls.objects.none()

        q_objects = models.Q()
        for field in cls.get_search_fields():
            q_objects |= models.Q(**{f"{field}__icontains": query.strip()})

        return cls.objects.filter(q_objects)[:5]

    def get_search_result_display(self):
        return str(self)
