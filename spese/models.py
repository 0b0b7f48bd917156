"""
Models per app spese.

ARCHITETTURA:
- Spesa: movimento di cassa del comitato (entrata o uscita),
  opzionalmente collegato a un evento, con approvazione dell'admin.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models
from django.db.models import Q, Sum
from django.urls import reverse
from django.utils import timezone

from core.models import BaseModel, SearchableMixin

logger = logging.getLogger(__name__)


def parse_mese(mese):
    """
    'YYYY-MM' -> (anno, mese).

    Raises:
        ValidationError: se il formato non è valido
    """
    try:
        anno, numero = (int(parte) for parte in mese.split('-'))
    except (AttributeError, ValueError):
        raise ValidationError("Mese non valido, formato atteso YYYY-MM")
    if not 1 <= numero <= 12:
        raise ValidationError("Mese non valido, formato atteso YYYY-MM")
    return anno, numero


class SpesaQuerySet(models.QuerySet):

    def attive(self):
        return self.filter(is_active=True)

    def del_mese(self, mese):
        """
        Filtra per mese nel formato 'YYYY-MM'.

        Raises:
            ValidationError: se il formato non è valido
        """
        anno, numero = parse_mese(mese)
        return self.filter(data_spesa__year=anno, data_spesa__month=numero)


class Spesa(SearchableMixin, BaseModel):
    """
    Movimento del libro cassa del comitato.
    """

    TIPO_CHOICES = [
        ('income', 'Entrata'),
        ('expense', 'Uscita'),
    ]

    CATEGORIA_CHOICES = [
        ('events', 'Eventi'),
        ('maintenance', 'Manutenzione'),
        ('equipment', 'Attrezzatura'),
        ('refreshments', 'Rinfreschi'),
        ('transportation', 'Trasporti'),
        ('donations', 'Donazioni'),
        ('fundraising', 'Raccolta fondi'),
        ('other', 'Altro'),
    ]

    METODO_PAGAMENTO_CHOICES = [
        ('cash', 'Contanti'),
        ('check', 'Assegno'),
        ('transfer', 'Bonifico'),
        ('credit_card', 'Carta di credito'),
        ('other', 'Altro'),
    ]

    titolo = models.CharField("Titolo", max_length=200, validators=[MinLengthValidator(2)])
    descrizione = models.TextField("Descrizione", blank=True)
    importo = models.DecimalField(
        "Importo", max_digits=10, decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    tipo = models.CharField("Tipo", max_length=10, choices=TIPO_CHOICES, default='expense')
    categoria = models.CharField("Categoria", max_length=20, choices=CATEGORIA_CHOICES, default='other')
    data_spesa = models.DateField("Data", default=timezone.localdate)
    metodo_pagamento = models.CharField(
        "Metodo di pagamento", max_length=20, choices=METODO_PAGAMENTO_CHOICES, default='cash'
    )
    fornitore = models.CharField("Fornitore", max_length=200, blank=True)
    ricevuta_url = models.URLField("Ricevuta (URL)", blank=True)
    evento = models.ForeignKey(
        'eventi.Evento',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='spese',
        verbose_name="Evento"
    )

    # ========== APPROVAZIONE ==========
    approvata = models.BooleanField("Approvata", default=False)
    approvata_da = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='spese_approvate',
        verbose_name="Approvata da"
    )
    approvata_at = models.DateTimeField("Approvata il", null=True, blank=True)
    note = models.TextField("Note", blank=True)

    objects = SpesaQuerySet.as_manager()

    class Meta:
        verbose_name = "Spesa"
        verbose_name_plural = "Spese"
        ordering = ['-data_spesa', '-created_at']
        indexes = [
            models.Index(fields=['tipo', 'data_spesa']),
            models.Index(fields=['categoria']),
        ]

    def __str__(self):
        segno = '+' if self.tipo == 'income' else '-'
        return f"{self.titolo} ({segno}₪{self.importo})"

    def get_absolute_url(self):
        return reverse('spese:spesa_update', kwargs={'pk': self.pk})

    @classmethod
    def get_search_fields(cls):
        return ['titolo', 'descrizione', 'fornitore']

    @property
    def stato_badge_color(self):
        return 'success' if self.approvata else 'warning'

    # ========== WORKFLOW ==========

    def approva(self, user):
        if self.approvata:
            raise ValidationError("La spesa è già approvata")
        self.approvata = True
        self.approvata_da = user
        self.approvata_at = timezone.now()
        self.updated_by = user
        self.save(update_fields=['approvata', 'approvata_da', 'approvata_at', 'updated_by', 'updated_at'])
        logger.info(f"Spesa {self.pk} approvata da {user}")

    def revoca_approvazione(self, user):
        if not self.approvata:
            raise ValidationError("La spesa non è approvata")
        self.approvata = False
        self.approvata_da = None
        self.approvata_at = None
        self.updated_by = user
        self.save(update_fields=['approvata', 'approvata_da', 'approvata_at', 'updated_by', 'updated_at'])
        logger.info(f"Approvazione spesa {self.pk} revocata da {user}")

    # ========== TOTALI ==========

    @staticmethod
    def totali(queryset):
        """
        Entrate, uscite e saldo (entrate - uscite) di un queryset.
        """
        aggregati = queryset.aggregate(
            entrate=Sum('importo', filter=Q(tipo='income')),
            uscite=Sum('importo', filter=Q(tipo='expense')),
        )
        entrate = aggregati['entrate'] or Decimal('0')
        uscite = aggregati['uscite'] or Decimal('0')
        return {
            'entrate': entrate,
            'uscite': uscite,
            'saldo': entrate - uscite,
        }

    @staticmethod
    def per_categoria(queryset):
        """
        Totali per categoria: [{categoria, etichetta, entrate, uscite, saldo}]
        ordinati per uscite decrescenti.
        """
        etichette = dict(Spesa.CATEGORIA_CHOICES)
        righe = queryset.order_by().values('categoria').annotate(
            entrate=Sum('importo', filter=Q(tipo='income')),
            uscite=Sum('importo', filter=Q(tipo='expense')),
        )

        risultato = []
        for riga in righe:
            entrate = riga['entrate'] or Decimal('0')
            uscite = riga['uscite'] or Decimal('0')
            risultato.append({
                'categoria': riga['categoria'],
                'etichetta': etichette.get(riga['categoria'], riga['categoria']),
                'entrate': entrate,
                'uscite': uscite,
                'saldo': entrate - uscite,
            })
        return sorted(risultato, key=lambda r: r['uscite'], reverse=True)

    def to_dict(self):
        return {
            'id': str(self.pk),
            'titolo': self.titolo,
            'descrizione': self.descrizione,
            'importo': float(self.importo),
            'tipo': self.tipo,
            'categoria': self.categoria,
            'data_spesa': self.data_spesa.isoformat() if self.data_spesa else None,
            'metodo_pagamento': self.metodo_pagamento,
            'fornitore': self.fornitore,
            'ricevuta_url': self.ricevuta_url,
            'evento_id': str(self.evento_id) if self.evento_id else None,
            'approvata': self.approvata,
            'approvata_da': self.approvata_da.username if self.approvata_da else None,
            'approvata_at': self.approvata_at.isoformat() if self.approvata_at else None,
            'note': self.note,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
