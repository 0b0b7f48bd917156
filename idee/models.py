"""
Models per app idee.

ARCHITETTURA:
- Idea: proposta di miglioramento inviata dai genitori (anche anonima),
  gestita dagli admin con stato e risposta
- Riunione: riunione del comitato con una bacheca di idee aperta ai genitori
- IdeaRiunione: idea lasciata sulla bacheca di una riunione
"""

import logging

from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models
from django.urls import reverse
from django.utils import timezone

from core.models import BaseModel, SearchableMixin

logger = logging.getLogger(__name__)


LINGUA_CHOICES = [
    ('he', 'Ebraico'),
    ('ru', 'Russo'),
]


# ============================================================================
# IDEE
# ============================================================================

class Idea(SearchableMixin, BaseModel):

    CATEGORIA_CHOICES = [
        ('improvement', 'Miglioramento'),
        ('feature', 'Nuova funzione'),
        ('process', 'Processo'),
        ('other', 'Altro'),
    ]

    STATO_CHOICES = [
        ('new', 'Nuova'),
        ('reviewed', 'Esaminata'),
        ('approved', 'Approvata'),
        ('implemented', 'Realizzata'),
        ('rejected', 'Respinta'),
    ]

    categoria = models.CharField("Categoria", max_length=20, choices=CATEGORIA_CHOICES)
    titolo = models.CharField("Titolo", max_length=100, validators=[MinLengthValidator(2)])
    descrizione = models.TextField("Descrizione", validators=[MinLengthValidator(10)])

    anonima = models.BooleanField("Anonima", default=True)
    nome_proponente = models.CharField("Nome proponente", max_length=100, blank=True)
    email_contatto = models.CharField("Contatto", max_length=200, blank=True)

    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='new', db_index=True)
    risposta = models.TextField("Risposta", blank=True)
    risposta_at = models.DateTimeField("Risposta il", null=True, blank=True)
    note_admin = models.TextField("Note admin", blank=True)

    class Meta:
        verbose_name = "Idea"
        verbose_name_plural = "Idee"
        ordering = ['-created_at']

    def __str__(self):
        return self.titolo

    def get_absolute_url(self):
        return reverse('idee:idea_detail', kwargs={'pk': self.pk})

    @classmethod
    def get_search_fields(cls):
        return ['titolo', 'descrizione']

    @property
    def stato_badge_color(self):
        colors = {
            'new': 'primary',
            'reviewed': 'info',
            'approved': 'success',
            'implemented': 'dark',
            'rejected': 'danger',
        }
        return colors.get(self.stato, 'secondary')

    def save(self, *args, **kwargs):
        # I dati del proponente si conservano solo per le idee firmate
        if self.anonima:
            self.nome_proponente = ''
            self.email_contatto = ''
        else:
            self.nome_proponente = (self.nome_proponente or '').strip()
            self.email_contatto = (self.email_contatto or '').strip()
        super().save(*args, **kwargs)

    def aggiorna_stato(self, stato, risposta=None, note_admin=None, user=None):
        """
        Cambia stato e, se indicati, risposta e note admin.

        risposta_at viene impostato quando la risposta non è vuota.
        """
        if stato not in dict(self.STATO_CHOICES):
            raise ValidationError({'stato': f"Stato non valido: {stato}"})

        self.stato = stato
        if risposta is not None:
            self.risposta = risposta
            if risposta:
                self.risposta_at = timezone.now()
        if note_admin is not None:
            self.note_admin = note_admin
        if user:
            self.updated_by = user
        self.save()
        logger.info(f"Idea {self.pk} -> {stato}")

    def to_dict(self, admin=True):
        dati = {
            'id': str(self.pk),
            'categoria': self.categoria,
            'titolo': self.titolo,
            'descrizione': self.descrizione,
            'anonima': self.anonima,
            'nome_proponente': self.nome_proponente,
            'email_contatto': self.email_contatto,
            'stato': self.stato,
            'risposta': self.risposta,
            'risposta_at': self.risposta_at.isoformat() if self.risposta_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if admin:
            dati['note_admin'] = self.note_admin
        return dati


# ============================================================================
# RIUNIONI
# ============================================================================

class Riunione(BaseModel):

    STATO_CHOICES = [
        ('draft', 'Bozza'),
        ('open', 'Aperta'),
        ('closed', 'Chiusa'),
        ('completed', 'Conclusa'),
    ]

    titolo = models.CharField("Titolo", max_length=200, validators=[MinLengthValidator(2)])
    data_riunione = models.DateField("Data riunione")
    descrizione = models.TextField("Descrizione", blank=True)
    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='open')
    aperta = models.BooleanField("Aperta alle idee", default=True)

    class Meta:
        verbose_name = "Riunione"
        verbose_name_plural = "Riunioni"
        ordering = ['-data_riunione']

    def __str__(self):
        return f"{self.titolo} ({self.data_riunione:%d/%m/%Y})"

    def get_absolute_url(self):
        return reverse('idee:riunione_detail', kwargs={'pk': self.pk})

    def get_board_url(self):
        return reverse('idee:riunione_bacheca', kwargs={'pk': self.pk})

    @property
    def accetta_idee(self):
        return self.aperta and self.stato == 'open'

    @property
    def stato_badge_color(self):
        colors = {
            'draft': 'secondary',
            'open': 'success',
            'closed': 'warning',
            'completed': 'dark',
        }
        return colors.get(self.stato, 'secondary')

    def apri(self, user=None):
        self.aperta = True
        self.stato = 'open'
        if user:
            self.updated_by = user
        self.save(update_fields=['aperta', 'stato', 'updated_by', 'updated_at'])
        logger.info(f"Riunione {self.pk} aperta alle idee")

    def chiudi(self, user=None):
        self.aperta = False
        self.stato = 'closed'
        if user:
            self.updated_by = user
        self.save(update_fields=['aperta', 'stato', 'updated_by', 'updated_at'])
        logger.info(f"Riunione {self.pk} chiusa alle idee")

    def aggiungi_idea(self, titolo, descrizione='', nome_proponente='', anonima=True, lingua_invio='he'):
        """
        Lascia un'idea sulla bacheca.

        Raises:
            ValidationError: se la riunione non accetta idee
        """
        if not self.accetta_idee:
            raise ValidationError("La riunione non è aperta alle idee")

        idea = IdeaRiunione(
            riunione=self,
            titolo=titolo,
            descrizione=descrizione or '',
            nome_proponente='' if anonima else (nome_proponente or '').strip(),
            anonima=anonima,
            lingua_invio=lingua_invio if lingua_invio in dict(LINGUA_CHOICES) else 'he',
        )
        idea.full_clean()
        idea.save()
        logger.info(f"Nuova idea sulla bacheca della riunione {self.pk}")
        return idea

    def bacheca(self):
        """Idee della bacheca, dalla più recente."""
        return self.idee.filter(is_active=True).order_by('-created_at')

    def to_dict(self):
        return {
            'id': str(self.pk),
            'titolo': self.titolo,
            'data_riunione': self.data_riunione.isoformat() if self.data_riunione else None,
            'descrizione': self.descrizione,
            'stato': self.stato,
            'aperta': self.aperta,
            'accetta_idee': self.accetta_idee,
            'numero_idee': self.idee.filter(is_active=True).count(),
        }


class IdeaRiunione(BaseModel):
    riunione = models.ForeignKey(Riunione, on_delete=models.CASCADE, related_name='idee', verbose_name="Riunione")
    titolo = models.CharField("Titolo", max_length=200, validators=[MinLengthValidator(2)])
    descrizione = models.TextField("Descrizione", blank=True)
    nome_proponente = models.CharField("Nome", max_length=100, blank=True)
    anonima = models.BooleanField("Anonima", default=True)
    lingua_invio = models.CharField("Lingua", max_length=2, choices=LINGUA_CHOICES, default='he')

    class Meta:
        verbose_name = "Idea riunione"
        verbose_name_plural = "Idee riunione"
        ordering = ['-created_at']

    def __str__(self):
        return self.titolo

    def to_dict(self):
        return {
            'id': str(self.pk),
            'riunione_id': str(self.riunione_id),
            'titolo': self.titolo,
            'descrizione': self.descrizione,
            'nome_proponente': self.nome_proponente,
            'anonima': self.anonima,
            'lingua_invio': self.lingua_invio,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
