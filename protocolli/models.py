"""
Models per app protocolli (verbali delle riunioni del comitato).

ARCHITETTURA:
- Protocollo: verbale con partecipanti, ordine del giorno, decisioni
  e azioni da svolgere
- Le azioni ({task, owner, due}) possono diventare attività
  (attivita.Attivita) con un click
"""

import logging

from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models
from django.urls import reverse
from django.utils import timezone

from core.models import BaseModelWithCode, SearchableMixin

logger = logging.getLogger(__name__)


def _valida_partecipanti(valore):
    if not isinstance(valore, list) or not [p for p in valore if str(p).strip()]:
        raise ValidationError("Indicare almeno un partecipante")


def _valida_azioni(valore):
    if not isinstance(valore, list):
        raise ValidationError("Le azioni devono essere una lista")
    for azione in valore:
        if not isinstance(azione, dict) or not str(azione.get('task') or '').strip():
            raise ValidationError("Ogni azione deve avere una descrizione (task)")


class Protocollo(SearchableMixin, BaseModelWithCode):
    """
    Verbale di una riunione del comitato.

    I protocolli non pubblici sono visibili solo agli utenti autenticati.
    """

    CODE_PREFIX = "PRT"

    TIPO_CHOICES = [
        ('regular', 'Ordinaria'),
        ('special', 'Straordinaria'),
        ('annual', 'Annuale'),
        ('emergency', 'Urgente'),
    ]

    numero_protocollo = models.CharField("Numero protocollo", max_length=50, blank=True)
    titolo = models.CharField("Titolo", max_length=200, validators=[MinLengthValidator(2)])
    data_protocollo = models.DateField("Data riunione", default=timezone.localdate)
    tipo = models.CharField("Tipo", max_length=20, choices=TIPO_CHOICES, default='regular')

    partecipanti = models.JSONField("Partecipanti", default=list, validators=[_valida_partecipanti])
    ordine_del_giorno = models.TextField("Ordine del giorno", blank=True)
    decisioni = models.TextField("Decisioni", blank=True)
    azioni = models.JSONField(
        "Azioni", default=list, blank=True, validators=[_valida_azioni],
        help_text="Lista di {task, owner, due}"
    )

    # ========== DOCUMENTI ==========
    documento_url = models.URLField("Documento", max_length=500, blank=True)
    allegati_url = models.JSONField("Allegati", default=list, blank=True)

    # ========== VISIBILITA / APPROVAZIONE ==========
    pubblico = models.BooleanField("Pubblico", default=True)
    approvato = models.BooleanField("Approvato", default=False)
    approvato_at = models.DateTimeField("Approvato il", null=True, blank=True)

    class Meta:
        verbose_name = "Protocollo"
        verbose_name_plural = "Protocolli"
        ordering = ['-data_protocollo', '-created_at']
        indexes = [
            models.Index(fields=['data_protocollo']),
            models.Index(fields=['tipo', 'approvato']),
        ]

    def __str__(self):
        return f"{self.codice} - {self.titolo}"

    def get_absolute_url(self):
        return reverse('protocolli:protocollo_detail', kwargs={'pk': self.pk})

    @classmethod
    def get_search_fields(cls):
        return ['codice', 'numero_protocollo', 'titolo', 'decisioni']

    @property
    def stato_badge_color(self):
        return 'success' if self.approvato else 'warning'

    @property
    def numero_azioni(self):
        return len(self.azioni or [])

    def approva(self, user=None):
        """
        Approva il verbale.

        Raises:
            ValidationError: se già approvato
        """
        if self.approvato:
            raise ValidationError("Il protocollo è già approvato")

        self.approvato = True
        self.approvato_at = timezone.now()
        if user:
            self.updated_by = user
        self.save(update_fields=['approvato', 'approvato_at', 'updated_by', 'updated_at'])
        logger.info(f"Protocollo {self.codice} approvato da {user}")

    def to_dict(self):
        return {
            'id': str(self.pk),
            'codice': self.codice,
            'numero_protocollo': self.numero_protocollo,
            'titolo': self.titolo,
            'data_protocollo': self.data_protocollo.isoformat() if self.data_protocollo else None,
            'tipo': self.tipo,
            'partecipanti': self.partecipanti,
            'ordine_del_giorno': self.ordine_del_giorno,
            'decisioni': self.decisioni,
            'azioni': self.azioni,
            'documento_url': self.documento_url,
            'allegati_url': self.allegati_url,
            'pubblico': self.pubblico,
            'approvato': self.approvato,
            'approvato_at': self.approvato_at.isoformat() if self.approvato_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
