"""
Models per app attivita (compiti del comitato e tag).

ARCHITETTURA:
- Attivita: compito con responsabile, scadenza, priorità e stato
- Tag: etichetta colorata (le tag di sistema non si eliminano)
- AttivitaTag: relazione attività-tag, unica per coppia
"""

import logging

from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models
from django.urls import reverse
from django.utils import timezone

from core.models import BaseModel, BaseModelSimple, SearchableMixin
from core.validators import validatore_colore_hex, validatore_slug_tag

logger = logging.getLogger(__name__)

# Ordine di priorità: urgent > high > normal > low
PESO_PRIORITA = {'urgent': 4, 'high': 3, 'normal': 2, 'low': 1}


class AttivitaQuerySet(models.QuerySet):

    def con_peso_priorita(self):
        return self.annotate(
            peso_priorita=models.Case(
                *[models.When(priorita=codice, then=models.Value(peso)) for codice, peso in PESO_PRIORITA.items()],
                default=models.Value(0),
                output_field=models.IntegerField(),
            )
        )

    def ordinate(self):
        """Priorità decrescente, poi scadenza crescente (senza scadenza in fondo)."""
        return self.con_peso_priorita().order_by(
            '-peso_priorita', models.F('scadenza').asc(nulls_last=True), '-created_at'
        )

    def in_ritardo(self):
        return self.exclude(stato__in=['completed', 'cancelled']).filter(scadenza__lt=timezone.localdate())


# ============================================================================
# ATTIVITA
# ============================================================================

class Attivita(SearchableMixin, BaseModel):
    """
    Compito assegnato a un genitore del comitato.

    completata_at viene valorizzato quando lo stato diventa 'completed'
    e azzerato negli altri stati.
    """

    PRIORITA_CHOICES = [
        ('low', 'Bassa'),
        ('normal', 'Normale'),
        ('high', 'Alta'),
        ('urgent', 'Urgente'),
    ]

    STATO_CHOICES = [
        ('pending', 'Da fare'),
        ('in_progress', 'In corso'),
        ('completed', 'Completata'),
        ('cancelled', 'Annullata'),
    ]

    titolo = models.CharField("Titolo", max_length=200, validators=[MinLengthValidator(2)])
    descrizione = models.TextField("Descrizione", blank=True)

    responsabile_nome = models.CharField("Responsabile", max_length=100, validators=[MinLengthValidator(2)])
    responsabile_telefono = models.CharField("Telefono responsabile", max_length=20, blank=True)

    scadenza = models.DateField("Scadenza", null=True, blank=True)
    data_promemoria = models.DateTimeField("Promemoria il", null=True, blank=True)

    priorita = models.CharField("Priorità", max_length=10, choices=PRIORITA_CHOICES, default='normal')
    stato = models.CharField("Stato", max_length=20, choices=STATO_CHOICES, default='pending', db_index=True)

    # ========== COLLEGAMENTI ==========
    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='attivita',
        verbose_name="Evento"
    )
    attivita_padre = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='sotto_attivita',
        verbose_name="Attività padre"
    )
    protocollo = models.ForeignKey(
        'protocolli.Protocollo',
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='attivita',
        verbose_name="Protocollo"
    )
    tags = models.ManyToManyField('Tag', through='AttivitaTag', related_name='attivita', blank=True)

    # ========== PROMEMORIA ==========
    promemoria_automatico = models.BooleanField("Promemoria automatico", default=False)
    numero_solleciti = models.PositiveIntegerField("Solleciti inviati", default=0)
    ultimo_promemoria = models.TextField("Ultimo promemoria", blank=True)

    allegati_url = models.JSONField("Allegati", default=list, blank=True)
    completata_at = models.DateTimeField("Completata il", null=True, blank=True)

    objects = AttivitaQuerySet.as_manager()

    class Meta:
        verbose_name = "Attività"
        verbose_name_plural = "Attività"
        ordering = ['scadenza', '-created_at']
        indexes = [
            models.Index(fields=['stato', 'scadenza']),
            models.Index(fields=['priorita']),
        ]

    def __str__(self):
        return self.titolo

    def get_absolute_url(self):
        return reverse('attivita:attivita_detail', kwargs={'pk': self.pk})

    @classmethod
    def get_search_fields(cls):
        return ['titolo', 'descrizione', 'responsabile_nome']

    @property
    def stato_badge_color(self):
        colors = {
            'pending': 'secondary',
            'in_progress': 'primary',
            'completed': 'success',
            'cancelled': 'dark',
        }
        return colors.get(self.stato, 'secondary')

    @property
    def priorita_badge_color(self):
        colors = {
            'low': 'success',
            'normal': 'info',
            'high': 'warning',
            'urgent': 'danger',
        }
        return colors.get(self.priorita, 'secondary')

    @property
    def in_ritardo(self):
        if self.stato in ('completed', 'cancelled') or not self.scadenza:
            return False
        return self.scadenza < timezone.localdate()

    def clean(self):
        if self.attivita_padre_id and self.attivita_padre_id == self.pk:
            raise ValidationError({'attivita_padre': "Un'attività non può essere padre di se stessa"})

    def save(self, *args, **kwargs):
        if self.stato == 'completed':
            if not self.completata_at:
                self.completata_at = timezone.now()
                self.numero_solleciti = 0
        else:
            self.completata_at = None
        super().save(*args, **kwargs)

    def tag_attivi(self):
        return self.tags.filter(is_active=True).order_by('ordine_visualizzazione', 'nome_he')

    def to_dict(self):
        return {
            'id': str(self.pk),
            'titolo': self.titolo,
            'descrizione': self.descrizione,
            'responsabile_nome': self.responsabile_nome,
            'responsabile_telefono': self.responsabile_telefono,
            'scadenza': self.scadenza.isoformat() if self.scadenza else None,
            'data_promemoria': self.data_promemoria.isoformat() if self.data_promemoria else None,
            'priorita': self.priorita,
            'stato': self.stato,
            'evento_id': str(self.evento_id) if self.evento_id else None,
            'attivita_padre_id': str(self.attivita_padre_id) if self.attivita_padre_id else None,
            'protocollo_id': str(self.protocollo_id) if self.protocollo_id else None,
            'promemoria_automatico': self.promemoria_automatico,
            'numero_solleciti': self.numero_solleciti,
            'allegati_url': self.allegati_url,
            'completata_at': self.completata_at.isoformat() if self.completata_at else None,
            'in_ritardo': self.in_ritardo,
            'tags': [tag.to_dict() for tag in self.tag_attivi()],
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


# ============================================================================
# TAG
# ============================================================================

class Tag(BaseModel):
    """
    Etichetta per le attività.

    is_active fa da flag "attiva": una tag in uso non viene cancellata
    ma disattivata.
    """

    nome = models.CharField(
        "Nome (slug)", max_length=50, unique=True,
        validators=[MinLengthValidator(2), validatore_slug_tag]
    )
    nome_he = models.CharField("Nome (HE)", max_length=100, validators=[MinLengthValidator(2)])
    emoji = models.CharField("Emoji", max_length=10, blank=True)
    colore = models.CharField("Colore", max_length=7, default='#0D98BA', validators=[validatore_colore_hex])
    descrizione = models.TextField("Descrizione", blank=True)
    ordine_visualizzazione = models.PositiveIntegerField("Ordine", default=0)
    di_sistema = models.BooleanField("Tag di sistema", default=False)

    class Meta:
        verbose_name = "Tag"
        verbose_name_plural = "Tag"
        ordering = ['ordine_visualizzazione', 'nome_he']

    def __str__(self):
        return f"{self.emoji} {self.nome_he}".strip()

    def get_absolute_url(self):
        return reverse('attivita:tag_update', kwargs={'pk': self.pk})

    @property
    def numero_attivita(self):
        return self.attivita_tag.filter(attivita__is_active=True).count()

    def to_dict(self):
        return {
            'id': str(self.pk),
            'nome': self.nome,
            'nome_he': self.nome_he,
            'emoji': self.emoji,
            'colore': self.colore,
            'descrizione': self.descrizione,
            'ordine_visualizzazione': self.ordine_visualizzazione,
            'di_sistema': self.di_sistema,
            'attivo': self.is_active,
        }


class AttivitaTag(BaseModelSimple):
    attivita = models.ForeignKey(Attivita, on_delete=models.CASCADE, related_name='attivita_tag')
    tag = models.ForeignKey(Tag, on_delete=models.CASCADE, related_name='attivita_tag')

    class Meta:
        verbose_name = "Tag attività"
        verbose_name_plural = "Tag attività"
        constraints = [
            models.UniqueConstraint(fields=['attivita', 'tag'], name='unique_attivita_tag'),
        ]

    def __str__(self):
        return f"{self.attivita} - {self.tag}"
