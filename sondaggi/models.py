"""
Models per app sondaggi.

ARCHITETTURA:
- RispostaCompetenze: risposta al sondaggio competenze dei genitori.
  I dati di contatto sono facoltativi; la risposta è anonima quando
  nome, telefono ed email sono tutti vuoti.
"""

import re

from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models
from django.urls import reverse

from core.models import BaseModel, SearchableMixin
from core.validators import normalizza_telefono


# ============================================================================
# CATALOGO COMPETENZE
# ============================================================================

COMPETENZE_HE = {
    # Servizi professionali
    'legal': 'משפטי',
    'medical': 'רפואי',
    'accounting': 'חשבונאות',
    'it_technology': 'IT וטכנולוגיה',
    # Istruzione
    'teaching_tutoring': 'הוראה ושיעורים',
    'language_tutoring': 'שיעורי שפות',
    'science_stem': 'מדע וטכנולוגיה STEM',
    'library_support': 'סיוע בספרייה',
    # Creatività e media
    'photography': 'צילום',
    'graphic_design': 'גרפיקה ועיצוב',
    'video_editing': 'עריכת וידאו',
    'arts': 'אומנות וצביעה',
    'music': 'מוזיקה',
    'writing_editing': 'כתיבה ועריכה',
    # Eventi e comunicazione
    'event_planning': 'תכנון אירועים',
    'cooking_catering': 'בישול והסעדה',
    'social_media': 'ניהול רשתות חברתיות',
    'translation': 'תרגום',
    # Pratiche
    'handyman': 'שיפוצים ותיקונים',
    'sewing_fashion': 'תפירה ואופנה',
    'driving_transport': 'נהיגה והסעות',
    'gardening': 'גינון',
    # Supporto alla scuola
    'sports_coaching': 'אימון ספורט',
    'childcare': 'שמרטפות',
    'fundraising': 'גיוס כספים',
    'office_admin': 'מזכירות וניהול',
    'other': 'אחר',
}

COMPETENZE_CHOICES = list(COMPETENZE_HE.items())

CONTATTO_HE = {
    'phone': 'טלפון',
    'email': 'אימייל',
    'whatsapp': 'WhatsApp',
    'any': 'כל אמצעי',
}

CLASSI = ['א', 'ב', 'ג', 'ד', 'ה', 'ו', 'ז', 'ח', 'ט', 'י', 'יא', 'יב']

MAX_COMPETENZE = 10

TELEFONO_SONDAGGIO_REGEX = re.compile(r'^(\+972|972|0)?[2-9]\d{7,8}$')


def _valida_competenze(valore):
    if not isinstance(valore, list) or not valore:
        raise ValidationError("Seleziona almeno una competenza")
    if len(valore) > MAX_COMPETENZE:
        raise ValidationError(f"Puoi selezionare al massimo {MAX_COMPETENZE} competenze")
    sconosciute = [c for c in valore if c not in COMPETENZE_HE]
    if sconosciute:
        raise ValidationError(f"Competenze non valide: {', '.join(map(str, sconosciute))}")


class RispostaCompetenze(SearchableMixin, BaseModel):

    CONTATTO_CHOICES = [
        ('phone', 'Telefono'),
        ('email', 'Email'),
        ('whatsapp', 'WhatsApp'),
        ('any', 'Qualsiasi'),
    ]

    CLASSE_CHOICES = [(c, c) for c in CLASSI]

    LINGUA_CHOICES = [
        ('he', 'Ebraico'),
        ('ru', 'Russo'),
    ]

    nome_genitore = models.CharField(
        "Nome genitore", max_length=100, blank=True, validators=[MinLengthValidator(2)]
    )
    telefono = models.CharField("Telefono", max_length=20, blank=True)
    email = models.EmailField("Email", blank=True)

    competenze = models.JSONField("Competenze", default=list, validators=[_valida_competenze])
    altra_specialita = models.CharField("Altra specialità", max_length=200, blank=True)
    preferenza_contatto = models.CharField(
        "Contatto preferito", max_length=10, choices=CONTATTO_CHOICES, default='any'
    )
    classe_studente = models.CharField("Classe", max_length=2, choices=CLASSE_CHOICES, blank=True)
    note = models.TextField("Note", max_length=1000, blank=True)
    lingua_invio = models.CharField("Lingua", max_length=2, choices=LINGUA_CHOICES, default='he')

    class Meta:
        verbose_name = "Risposta sondaggio competenze"
        verbose_name_plural = "Risposte sondaggio competenze"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['preferenza_contatto']),
            models.Index(fields=['created_at']),
        ]

    def __str__(self):
        return self.nome_genitore or "Anonimo"

    def get_absolute_url(self):
        return reverse('sondaggi:risposta_detail', kwargs={'pk': self.pk})

    @classmethod
    def get_search_fields(cls):
        return ['nome_genitore', 'telefono', 'email', 'note', 'altra_specialita']

    @property
    def anonima(self):
        return not (self.nome_genitore or self.telefono or self.email)

    def competenze_he(self):
        return [COMPETENZE_HE.get(c, c) for c in self.competenze or []]

    def clean(self):
        super().clean()
        self.telefono = normalizza_telefono(self.telefono)
        if self.telefono and not TELEFONO_SONDAGGIO_REGEX.match(self.telefono):
            raise ValidationError({'telefono': "Numero di telefono non valido"})
        if 'other' in (self.competenze or []) and not self.altra_specialita.strip():
            raise ValidationError({'altra_specialita': "Indica in quale ambito puoi aiutare"})

    def save(self, *args, **kwargs):
        self.nome_genitore = self.nome_genitore.strip()
        self.email = self.email.strip()
        self.telefono = normalizza_telefono(self.telefono)
        # La specialità libera ha senso solo con la competenza "other"
        if 'other' not in (self.competenze or []):
            self.altra_specialita = ''
        super().save(*args, **kwargs)

    def to_dict(self):
        return {
            'id': str(self.pk),
            'nome_genitore': self.nome_genitore,
            'telefono': self.telefono,
            'email': self.email,
            'competenze': self.competenze,
            'altra_specialita': self.altra_specialita,
            'preferenza_contatto': self.preferenza_contatto,
            'classe_studente': self.classe_studente,
            'note': self.note,
            'lingua_invio': self.lingua_invio,
            'anonima': self.anonima,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
