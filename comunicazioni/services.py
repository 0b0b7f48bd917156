"""
Servizi app comunicazioni: salvataggio in blocco dei messaggi urgenti
e testi di condivisione.
"""

import logging
import uuid

from django.db import transaction
from django.utils import timezone

from core.api import ApiError, dati_parziali
from core.share_formatters import (
    DatiCondivisione,
    formatta_link_gruppi,
    formatta_maglietta_bianca,
    formatta_messaggio_urgente,
)

from .forms import MessaggioUrgenteForm
from .models import GruppoClasse, MessaggioUrgente

logger = logging.getLogger(__name__)

LOCALI = ('he', 'ru')

VENERDI = 4


def _uuid_esistente(valore):
    """L'id come UUID se è un UUID valido, altrimenti None (id temporaneo del client)."""
    if not valore:
        return None
    try:
        return uuid.UUID(str(valore))
    except ValueError:
        return None


@transaction.atomic
def salva_messaggi(lista, user=None):
    """
    Sostituisce l'insieme dei messaggi urgenti con quello ricevuto.

    - i messaggi senza un id noto vengono creati
    - quelli con id esistente vengono aggiornati
    - quelli salvati ma assenti dalla lista vengono eliminati, tranne
      quando tutti i messaggi ricevuti sono nuovi

    Returns:
        dict: {'creati': n, 'aggiornati': n, 'eliminati': n}

    Raises:
        ApiError: 400 se la lista non è una lista o un messaggio non è valido
    """
    if not isinstance(lista, list):
        raise ApiError("messages deve essere una lista")

    esistenti = {m.pk: m for m in MessaggioUrgente.objects.select_for_update()}
    ids_ricevuti = set()
    risultato = {'creati': 0, 'aggiornati': 0, 'eliminati': 0}

    for indice, dati in enumerate(lista):
        if not isinstance(dati, dict):
            raise ApiError(f"Messaggio {indice + 1} non valido")

        pk = _uuid_esistente(dati.get('id'))
        if pk is not None:
            ids_ricevuti.add(pk)
        messaggio = esistenti.get(pk)
        istanza = messaggio or MessaggioUrgente()
        form = MessaggioUrgenteForm(dati_parziali(istanza, MessaggioUrgenteForm, dati), instance=istanza)
        if not form.is_valid():
            raise ApiError(
                f"Messaggio {indice + 1} non valido",
                details=form.errors.get_json_data(),
            )

        messaggio_salvato = form.save(commit=False)
        if user:
            if messaggio is None:
                messaggio_salvato.created_by = user
            messaggio_salvato.updated_by = user
        messaggio_salvato.save()

        if messaggio is None:
            risultato['creati'] += 1
        else:
            risultato['aggiornati'] += 1

    tutti_nuovi = bool(lista) and not ids_ricevuti
    da_eliminare = [pk for pk in esistenti if pk not in ids_ricevuti]
    if da_eliminare and not tutti_nuovi:
        risultato['eliminati'], _dettaglio = MessaggioUrgente.objects.filter(pk__in=da_eliminare).delete()

    logger.info(
        f"Messaggi urgenti salvati: {risultato['creati']} creati, "
        f"{risultato['aggiornati']} aggiornati, {risultato['eliminati']} eliminati"
    )
    return risultato


def disattiva_scaduti(oggi=None):
    """Spegne i messaggi con data di fine passata. Ritorna quanti."""
    return MessaggioUrgente.objects.scaduti(oggi).update(attivo=False, updated_at=timezone.now())


# ============================================================================
# CONDIVISIONE
# ============================================================================

def condivisione_messaggio(messaggio, oggi=None):
    """
    Testi di condivisione he/ru di un messaggio.

    Il testo personalizzato del messaggio ha la precedenza; la maglietta
    bianca usa il suo testo standard.
    """
    oggi = oggi or timezone.localdate()
    condivisione = {}
    for locale in LOCALI:
        personalizzato = getattr(messaggio, f'testo_condivisione_{locale}')
        if personalizzato:
            titolo = getattr(messaggio, f'titolo_{locale}') or messaggio.titolo_he
            condivisione[locale] = DatiCondivisione(title=titolo, text=personalizzato)
        elif messaggio.tipo == 'white_shirt':
            condivisione[locale] = formatta_maglietta_bianca(locale, venerdi=oggi.weekday() == VENERDI)
        else:
            condivisione[locale] = formatta_messaggio_urgente(messaggio, locale)
    return condivisione


def condivisione_gruppi(gruppi=None):
    gruppi = list(gruppi if gruppi is not None else GruppoClasse.objects.all())
    return {locale: formatta_link_gruppi(gruppi, locale) for locale in LOCALI}
