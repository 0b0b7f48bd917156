"""
Servizi app prom: riepilogo budget, confronto preventivi, statistiche voti.

Le funzioni di confronto lavorano su iterabili di PreventivoFornitore
(o queryset) e restituiscono strutture semplici, usate sia dalle
pagine HTML sia dalle API JSON.
"""

import logging
from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction
from django.utils import timezone

from core.api import ApiError
from core.export import csv_response

from .forms import VoceBudgetForm
from .models import CATEGORIA_CHOICES, PreventivoFornitore, VoceBudget

logger = logging.getLogger(__name__)


ETICHETTE_CATEGORIA = {
    'he': {
        'venue': 'אולם/מקום',
        'catering': 'קייטרינג',
        'dj': 'DJ/מוזיקה',
        'photography': 'צילום',
        'decorations': 'קישוטים',
        'transportation': 'הסעות',
        'entertainment': 'בידור',
        'shirts': 'חולצות',
        'sound_lighting': 'הגברה ותאורה',
        'yearbook': 'ספר מחזור',
        'recording': 'אולפן הקלטות',
        'scenery': 'תפאורה',
        'flowers': 'פרחים/זרים',
        'security': 'אבטחה',
        'electrician': 'חשמלאי',
        'moving': 'הובלה',
        'video_editing': 'עריכת סרטונים',
        'drums': 'מתופפים',
        'choreography': 'כוריאוגרפיה',
        'other': 'אחר',
    },
    'ru': {
        'venue': 'Зал/место',
        'catering': 'Кейтеринг',
        'dj': 'DJ/музыка',
        'photography': 'Фотография',
        'decorations': 'Украшения',
        'transportation': 'Транспорт',
        'entertainment': 'Развлечения',
        'shirts': 'Футболки',
        'sound_lighting': 'Звук и свет',
        'yearbook': 'Выпускной альбом',
        'recording': 'Студия звукозаписи',
        'scenery': 'Декорации',
        'flowers': 'Цветы',
        'security': 'Охрана',
        'electrician': 'Электрик',
        'moving': 'Перевозка',
        'video_editing': 'Монтаж видео',
        'drums': 'Барабанщики',
        'choreography': 'Хореография',
        'other': 'Другое',
    },
}

ETICHETTE_DISPONIBILITA = {
    'he': {'available': 'פנוי', 'unavailable': 'תפוס', 'pending': 'ממתין', 'unknown': 'לא ידוע'},
    'ru': {'available': 'Свободно', 'unavailable': 'Занято', 'pending': 'Ожидание', 'unknown': 'Неизвестно'},
}

INTESTAZIONI_CONFRONTO = {
    'he': ['שם ספק', 'קטגוריה', 'מחיר כולל', 'מחיר לתלמיד', 'זמינות', 'דירוג', 'יתרונות', 'חסרונות'],
    'ru': ['Поставщик', 'Категория', 'Общая цена', 'Цена на ученика', 'Доступность', 'Рейтинг', 'Плюсы', 'Минусы'],
}

CAMPI_RISERVATI = ('telefono', 'email', 'note_admin')


def _arrotonda(valore):
    """Arrotondamento all'intero, metà per eccesso."""
    return int(Decimal(valore).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


# ============================================================================
# BUDGET
# ============================================================================

def riepilogo_budget(prom):
    """
    Totali del budget di un prom.

    Returns:
        dict: budget_totale, totale_allocato, totale_speso, rimanente,
              numero_studenti, per_studente, percentuale_utilizzo,
              colore_utilizzo
    """
    voci = list(prom.voci_budget.filter(is_active=True))
    totale_allocato = sum((v.importo_allocato or Decimal('0') for v in voci), Decimal('0'))
    totale_speso = sum((v.importo_speso or Decimal('0') for v in voci), Decimal('0'))
    budget_totale = prom.budget_totale or Decimal('0')
    studenti = prom.numero_studenti or 0

    per_studente = _arrotonda(totale_speso / studenti) if studenti > 0 else 0
    percentuale = _arrotonda(totale_speso / budget_totale * 100) if budget_totale > 0 else 0

    if percentuale > 90:
        colore = 'danger'
    elif percentuale > 70:
        colore = 'warning'
    else:
        colore = 'success'

    return {
        'budget_totale': budget_totale,
        'totale_allocato': totale_allocato,
        'totale_speso': totale_speso,
        'rimanente': budget_totale - totale_speso,
        'numero_studenti': studenti,
        'per_studente': per_studente,
        'percentuale_utilizzo': percentuale,
        'colore_utilizzo': colore,
    }


def aggiorna_voci_budget(prom, voci, user=None):
    """
    Upsert in blocco delle voci di budget, una per categoria.

    Args:
        voci: lista di dict {categoria, importo_allocato, importo_speso, note}

    Returns:
        list[VoceBudget]: le voci salvate, nell'ordine ricevuto
    """
    salvate = []
    with transaction.atomic():
        for dati in voci:
            categoria = dati.get('categoria')
            voce = VoceBudget.objects.filter(prom=prom, categoria=categoria).first() or VoceBudget(prom=prom)
            form = VoceBudgetForm(
                {
                    'categoria': categoria,
                    'importo_allocato': dati.get('importo_allocato') or 0,
                    'importo_speso': dati.get('importo_speso') or 0,
                    'note': dati.get('note') or '',
                },
                instance=voce,
            )
            if not form.is_valid():
                raise ApiError(
                    f"Voce di budget non valida ({categoria})",
                    status=400,
                    details=form.errors.get_json_data(),
                )
            voce = form.save(commit=False)
            voce.is_active = True
            voce.deleted_at = None
            if user:
                if voce._state.adding:
                    voce.created_by = user
                voce.updated_by = user
            voce.save()
            salvate.append(voce)

    logger.info(f"Budget prom {prom.pk}: {len(salvate)} voci aggiornate")
    return salvate


# ============================================================================
# CONFRONTO PREVENTIVI
# ============================================================================

def confronta_preventivi(preventivi, categoria=None):
    """
    Ordina i preventivi per (categoria, prezzo) e calcola le statistiche
    di ogni categoria.

    Args:
        preventivi: iterabile di PreventivoFornitore, nell'ordine di visualizzazione
        categoria: filtro opzionale ('all' o vuoto = tutte)

    Returns:
        dict: {
            'preventivi': [...] ordinati,
            'statistiche': OrderedDict categoria -> {
                numero, prezzo_min, prezzo_max, prezzo_medio,
                piu_economico_id, meglio_valutato_id, miglior_rapporto_id
            }
        }
    """
    preventivi = list(preventivi)
    if categoria and categoria != 'all':
        preventivi = [p for p in preventivi if p.categoria == categoria]

    ordinati = sorted(preventivi, key=lambda p: (p.categoria, p.prezzo_totale))

    statistiche = OrderedDict()
    for codice, _etichetta in CATEGORIA_CHOICES:
        gruppo = [p for p in preventivi if p.categoria == codice]
        if not gruppo:
            continue

        prezzi = [p.prezzo_totale for p in gruppo]

        piu_economico = gruppo[0]
        for p in gruppo[1:]:
            if p.prezzo_totale < piu_economico.prezzo_totale:
                piu_economico = p

        valutati = [p for p in gruppo if p.valutazione is not None]
        meglio_valutato = None
        for p in valutati:
            if meglio_valutato is None or p.valutazione > meglio_valutato.valutazione:
                meglio_valutato = p

        miglior_rapporto = None
        for p in valutati:
            if p.prezzo_totale <= 0:
                continue
            if miglior_rapporto is None or (
                Decimal(p.valutazione) / p.prezzo_totale
                > Decimal(miglior_rapporto.valutazione) / miglior_rapporto.prezzo_totale
            ):
                miglior_rapporto = p

        statistiche[codice] = {
            'numero': len(gruppo),
            'prezzo_min': min(prezzi),
            'prezzo_max': max(prezzi),
            'prezzo_medio': _arrotonda(sum(prezzi, Decimal('0')) / len(prezzi)),
            'piu_economico_id': piu_economico.pk,
            'meglio_valutato_id': meglio_valutato.pk if meglio_valutato else None,
            # Il miglior rapporto si segnala solo se non coincide col più economico
            'miglior_rapporto_id': (
                miglior_rapporto.pk
                if miglior_rapporto and miglior_rapporto.pk != piu_economico.pk
                else None
            ),
        }

    return {'preventivi': ordinati, 'statistiche': statistiche}


def _righe_confronto(preventivi, locale):
    categorie = ETICHETTE_CATEGORIA[locale]
    disponibilita = ETICHETTE_DISPONIBILITA[locale]
    for p in preventivi:
        yield [
            p.nome_fornitore,
            categorie.get(p.categoria, p.categoria),
            p.prezzo_totale,
            p.prezzo_per_studente,
            disponibilita.get(p.stato_disponibilita, p.stato_disponibilita),
            p.valutazione,
            p.pro,
            p.contro,
        ]


def nome_file_confronto(oggi=None):
    oggi = oggi or timezone.localdate()
    return f"quotes_comparison_{oggi.isoformat()}.csv"


def csv_confronto(preventivi, locale='he'):
    locale = locale if locale in INTESTAZIONI_CONFRONTO else 'he'
    return csv_response(
        nome_file_confronto(),
        INTESTAZIONI_CONFRONTO[locale],
        _righe_confronto(preventivi, locale),
    )


def sanifica_preventivo(preventivo, is_admin):
    """to_dict() del preventivo senza i campi riservati per i non admin."""
    dati = preventivo.to_dict()
    if not is_admin:
        for campo in CAMPI_RISERVATI:
            dati.pop(campo, None)
    return dati


@transaction.atomic
def seleziona_preventivo(preventivo, user=None):
    """
    Sceglie il preventivo per la sua categoria.

    Deseleziona gli altri preventivi della stessa categoria e riporta
    il prezzo come importo allocato nella voce di budget corrispondente.
    """
    PreventivoFornitore.objects.filter(
        prom_id=preventivo.prom_id, categoria=preventivo.categoria, selezionato=True
    ).exclude(pk=preventivo.pk).update(selezionato=False, updated_at=timezone.now())

    preventivo.selezionato = True
    if user:
        preventivo.updated_by = user
    preventivo.save(update_fields=['selezionato', 'updated_by', 'updated_at'])

    voce, _creata = VoceBudget.objects.get_or_create(
        prom_id=preventivo.prom_id,
        categoria=preventivo.categoria,
        defaults={'created_by': user},
    )
    voce.importo_allocato = preventivo.prezzo_totale
    voce.is_active = True
    voce.save(update_fields=['importo_allocato', 'is_active', 'updated_at'])

    logger.info(
        f"Preventivo {preventivo.pk} selezionato per {preventivo.categoria} "
        f"(prom {preventivo.prom_id}, ₪{preventivo.prezzo_totale})"
    )
    return preventivo


# ============================================================================
# VOTI
# ============================================================================

def statistiche_voti(prom, preventivo_id=None):
    """
    Conteggio voti per preventivo.

    Returns:
        dict: {
            'per_preventivo': {preventivo_id: {prefer, neutral, oppose, totale}},
            'totale_votanti': numero di identificativi distinti
        }
    """
    voti = prom.voti.filter(is_active=True)
    if preventivo_id:
        voti = voti.filter(preventivo_id=preventivo_id)

    per_preventivo = {}
    votanti = set()
    for preventivo_id, tipo_voto, identificativo in voti.values_list(
        'preventivo_id', 'tipo_voto', 'identificativo_votante'
    ):
        conteggio = per_preventivo.setdefault(
            str(preventivo_id), {'prefer': 0, 'neutral': 0, 'oppose': 0, 'totale': 0}
        )
        conteggio[tipo_voto] += 1
        conteggio['totale'] += 1
        votanti.add(identificativo)

    return {'per_preventivo': per_preventivo, 'totale_votanti': len(votanti)}
