"""
Servizi app sondaggi: filtri, statistiche ed export delle risposte.
"""

import logging
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from core.excel_generator import generate_excel_response
from core.export import csv_response

from .models import COMPETENZE_HE, CONTATTO_HE, RispostaCompetenze

logger = logging.getLogger(__name__)

INTESTAZIONI_EXPORT = [
    'תאריך הגשה',
    'שם הורה',
    'טלפון',
    'אימייל',
    'מיומנויות',
    'אחר - פרטים',
    'אמצעי יצירת קשר מועדף',
    'הערות נוספות',
]

ANONIMO = 'אנונימי'

GIORNI_RECENTI = 7


def _data_filtro(valore, nome):
    """Accetta YYYY-MM-DD o un datetime ISO."""
    try:
        data = parse_date(valore) or parse_datetime(valore)
    except ValueError:
        data = None
    if data is None:
        raise ValidationError(f"Parametro {nome} non valido")
    return data


def filtra_risposte(queryset, params):
    """
    Filtri della lista admin.

    Parametri riconosciuti: skill, contact_preference, search,
    date_from, date_to. Date non valide sollevano ValidationError.
    """
    competenza = params.get('skill')
    if competenza and competenza != 'all':
        if competenza not in COMPETENZE_HE:
            raise ValidationError(f"Competenza non valida: {competenza}")
        # Filtro sulla lista JSON fatto in Python: __contains non è portabile su SQLite
        ids = [
            pk for pk, competenze in queryset.values_list('pk', 'competenze')
            if competenza in (competenze or [])
        ]
        queryset = queryset.filter(pk__in=ids)

    contatto = params.get('contact_preference')
    if contatto and contatto != 'all':
        queryset = queryset.filter(preferenza_contatto=contatto)

    ricerca = (params.get('search') or '').strip()
    if ricerca:
        queryset = queryset.filter(
            Q(nome_genitore__icontains=ricerca)
            | Q(telefono__icontains=ricerca)
            | Q(email__icontains=ricerca)
        )

    if params.get('date_from'):
        dal = _data_filtro(params['date_from'], 'date_from')
        campo = 'created_at__gte' if hasattr(dal, 'hour') else 'created_at__date__gte'
        queryset = queryset.filter(**{campo: dal})

    if params.get('date_to'):
        al = _data_filtro(params['date_to'], 'date_to')
        campo = 'created_at__lte' if hasattr(al, 'hour') else 'created_at__date__lte'
        queryset = queryset.filter(**{campo: al})

    return queryset.order_by('-created_at')


def statistiche_risposte(risposte, adesso=None):
    """
    Statistiche del cruscotto sulle risposte (già filtrate).

    Returns:
        dict: totale, per_competenza, per_contatto, anonime, recenti
    """
    adesso = adesso or timezone.now()
    limite_recenti = adesso - timedelta(days=GIORNI_RECENTI)

    stats = {
        'totale': 0,
        'per_competenza': {},
        'per_contatto': {},
        'anonime': 0,
        'recenti': 0,
    }

    for risposta in risposte:
        stats['totale'] += 1
        if risposta.anonima:
            stats['anonime'] += 1
        if risposta.created_at and risposta.created_at > limite_recenti:
            stats['recenti'] += 1
        for competenza in risposta.competenze or []:
            stats['per_competenza'][competenza] = stats['per_competenza'].get(competenza, 0) + 1
        contatto = risposta.preferenza_contatto
        stats['per_contatto'][contatto] = stats['per_contatto'].get(contatto, 0) + 1

    return stats


def competenze_ordinate(stats):
    """[(etichetta ebraica, conteggio)] dalla competenza più diffusa."""
    return sorted(
        ((COMPETENZE_HE.get(k, k), n) for k, n in stats['per_competenza'].items()),
        key=lambda coppia: -coppia[1],
    )


# ============================================================================
# EXPORT
# ============================================================================

def _righe_export(queryset):
    for risposta in queryset:
        yield [
            timezone.localtime(risposta.created_at).date() if risposta.created_at else '',
            risposta.nome_genitore or ANONIMO,
            risposta.telefono,
            risposta.email,
            ', '.join(risposta.competenze_he()),
            risposta.altra_specialita if 'other' in (risposta.competenze or []) else '',
            CONTATTO_HE.get(risposta.preferenza_contatto, risposta.preferenza_contatto),
            risposta.note,
        ]


def nome_file_export(adesso=None):
    """parent-skills-<timestamp in millisecondi>, senza estensione."""
    adesso = adesso or timezone.now()
    return f"parent-skills-{int(adesso.timestamp() * 1000)}"


def export_csv(queryset):
    return csv_response(f"{nome_file_export()}.csv", INTESTAZIONI_EXPORT, _righe_export(queryset))


def export_excel(queryset):
    data = [dict(zip(INTESTAZIONI_EXPORT, riga)) for riga in _righe_export(queryset)]
    return generate_excel_response(
        data,
        filename=nome_file_export(),
        sheet_name='Competenze',
        headers=INTESTAZIONI_EXPORT,
    )
