"""
Models per app comunicazioni.

ARCHITETTURA:
- MessaggioUrgente: banner bilingue (he/ru) mostrato in homepage nella
  sua finestra di date
- ImpostazioniApp: impostazioni generali del portale (riga unica)
- GruppoClasse: link ai gruppi WhatsApp di ogni classe
"""

from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models
from django.db.models import Q
from django.urls import reverse
from django.utils import timezone

from core.models import BaseModel, BaseModelSimple
from core.validators import validatore_colore_hex


CLASSE_CHOICES = [(c, c) for c in ['א', 'ב', 'ג', 'ד', 'ה', 'ו', 'ז', 'ח', 'ט', 'י', 'יא', 'יב']]


# ============================================================================
# MESSAGGI URGENTI
# ============================================================================

class MessaggioUrgenteQuerySet(models.QuerySet):

    def attivi_oggi(self, oggi=None):
        """Messaggi attivi la cui finestra comprende oggi (date nulle = aperte)."""
        oggi = oggi or timezone.localdate()
        return self.filter(
            attivo=True,
            is_active=True,
        ).filter(
            Q(data_inizio__isnull=True) | Q(data_inizio__lte=oggi),
            Q(data_fine__isnull=True) | Q(data_fine__gte=oggi),
        ).order_by('-created_at')

    def scaduti(self, oggi=None):
        oggi = oggi or timezone.localdate()
        return self.filter(attivo=True, data_fine__lt=oggi)


class MessaggioUrgente(BaseModel):

    TIPO_CHOICES = [
        ('info', 'Informazione'),
        ('warning', 'Avviso'),
        ('urgent', 'Urgente'),
        ('success', 'Buone notizie'),
        ('white_shirt', 'Maglietta bianca'),
    ]

    COLORE_TIPO = {
        'info': 'info',
        'warning': 'warning',
        'urgent': 'danger',
        'success': 'success',
        'white_shirt': 'light',
    }

    tipo = models.CharField("Tipo", max_length=20, choices=TIPO_CHOICES, default='info')
    titolo_he = models.CharField("Titolo (he)", max_length=200, validators=[MinLengthValidator(2)])
    titolo_ru = models.CharField("Titolo (ru)", max_length=200, blank=True)
    descrizione_he = models.TextField("Descrizione (he)", blank=True)
    descrizione_ru = models.TextField("Descrizione (ru)", blank=True)
    testo_condivisione_he = models.TextField("Testo condivisione (he)", blank=True)
    testo_condivisione_ru = models.TextField("Testo condivisione (ru)", blank=True)
    icona = models.CharField("Icona", max_length=10, blank=True)
    colore = models.CharField(
        "Colore", max_length=7, default='#FF8200', validators=[validatore_colore_hex]
    )
    attivo = models.BooleanField("Attivo", default=True, db_index=True)
    data_inizio = models.DateField("Dal", null=True, blank=True)
    data_fine = models.DateField("Al", null=True, blank=True)

    objects = MessaggioUrgenteQuerySet.as_manager()

    class Meta:
        verbose_name = "Messaggio urgente"
        verbose_name_plural = "Messaggi urgenti"
        ordering = ['-created_at']

    def __str__(self):
        return self.titolo_he

    @property
    def badge_color(self):
        return self.COLORE_TIPO.get(self.tipo, 'secondary')

    def visibile_il(self, giorno):
        if not self.attivo:
            return False
        if self.data_inizio and self.data_inizio > giorno:
            return False
        if self.data_fine and self.data_fine < giorno:
            return False
        return True

    def clean(self):
        super().clean()
        if self.data_inizio and self.data_fine and self.data_fine < self.data_inizio:
            raise ValidationError({'data_fine': "La data di fine precede quella di inizio"})

    def to_dict(self):
        return {
            'id': str(self.pk),
            'tipo': self.tipo,
            'titolo_he': self.titolo_he,
            'titolo_ru': self.titolo_ru,
            'descrizione_he': self.descrizione_he,
            'descrizione_ru': self.descrizione_ru,
            'testo_condivisione_he': self.testo_condivisione_he,
            'testo_condivisione_ru': self.testo_condivisione_ru,
            'icona': self.icona,
            'colore': self.colore,
            'attivo': self.attivo,
            'data_inizio': self.data_inizio.isoformat() if self.data_inizio else None,
            'data_fine': self.data_fine.isoformat() if self.data_fine else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


# ============================================================================
# IMPOSTAZIONI
# ============================================================================

class ImpostazioniApp(BaseModelSimple):
    """Riga unica (pk=1), letta con ImpostazioniApp.carica()."""

    nome_comitato = models.CharField("Nome comitato", max_length=200, default="ועד הורים")
    anno_scolastico = models.CharField("Anno scolastico", max_length=20, blank=True)
    email_contatto = models.EmailField("Email contatto", blank=True)
    telefono_contatto = models.CharField("Telefono contatto", max_length=20, blank=True)
    url_whatsapp = models.URLField("Link WhatsApp", blank=True)
    banner_attivo = models.BooleanField("Banner attivo", default=True)

    class Meta:
        verbose_name = "Impostazioni"
        verbose_name_plural = "Impostazioni"

    def __str__(self):
        return self.nome_comitato

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def carica(cls):
        impostazioni, _creata = cls.objects.get_or_create(pk=1)
        return impostazioni

    def to_dict(self):
        return {
            'nome_comitato': self.nome_comitato,
            'anno_scolastico': self.anno_scolastico,
            'email_contatto': self.email_contatto,
            'telefono_contatto': self.telefono_contatto,
            'url_whatsapp': self.url_whatsapp,
            'banner_attivo': self.banner_attivo,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


# ============================================================================
# GRUPPI CLASSE
# ============================================================================

class GruppoClasse(BaseModelSimple):
    classe = models.CharField("Classe", max_length=2, choices=CLASSE_CHOICES, unique=True)
    emoji = models.CharField("Emoji", max_length=10, blank=True)
    url_whatsapp = models.URLField("Link gruppo WhatsApp")
    colore = models.CharField("Colore", max_length=7, default='#0D98BA', validators=[validatore_colore_hex])
    ordine_visualizzazione = models.PositiveIntegerField("Ordine", default=0)

    class Meta:
        verbose_name = "Gruppo classe"
        verbose_name_plural = "Gruppi classe"
        ordering = ['ordine_visualizzazione', 'classe']

    def __str__(self):
        return f"{self.emoji} {self.classe}".strip()

    def get_absolute_url(self):
        return reverse('comunicazioni:gruppo_update', kwargs={'pk': self.pk})

    def to_dict(self):
        return {
            'id': self.pk,
            'classe': self.classe,
            'emoji': self.emoji,
            'url_whatsapp': self.url_whatsapp,
            'colore': self.colore,
            'ordine_visualizzazione': self.ordine_visualizzazione,
        }
