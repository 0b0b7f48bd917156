"""
Servizi app attivita: filtri, gestione tag (singola e in blocco), promemoria.
"""

import logging
import uuid

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.db.models import Count, Q

from core.share_formatters import EMOJI_PRIORITA, PRIORITA, formatta_data, link_whatsapp

from .models import Attivita, AttivitaTag, Tag

logger = logging.getLogger(__name__)

AZIONI_BLOCCO = ('add', 'remove')


# ============================================================================
# ATTIVITA
# ============================================================================

def filtra_attivita(queryset, params):
    """
    Filtri elenco attività.

    Args:
        params: dict-like con status, priority, owner, tag, overdue ('true')

    Returns:
        QuerySet ordinato per priorità e scadenza
    """
    stato = params.get('status')
    if stato and stato != 'all':
        queryset = queryset.filter(stato=stato)

    priorita = params.get('priority')
    if priorita and priorita != 'all':
        queryset = queryset.filter(priorita=priorita)

    responsabile = (params.get('owner') or '').strip()
    if responsabile:
        queryset = queryset.filter(responsabile_nome__icontains=responsabile)

    tag = params.get('tag')
    if tag and tag != 'all':
        queryset = queryset.filter(Q(tags__nome=tag) | Q(tags__pk__in=_uuid_validi([tag]))).distinct()

    if params.get('overdue') == 'true':
        queryset = queryset.in_ritardo()

    return queryset.ordinate()


def _uuid_validi(valori):
    validi = []
    for valore in valori:
        try:
            validi.append(uuid.UUID(str(valore)))
        except ValueError:
            continue
    return validi


def testo_promemoria(attivita, locale='he'):
    """Testo WhatsApp del sollecito per il responsabile."""
    emoji = EMOJI_PRIORITA.get(attivita.priorita, '⚡')
    priorita = PRIORITA[locale].get(attivita.priorita, attivita.priorita)
    if locale == 'ru':
        testo = f"⏰ Напоминание: *{attivita.titolo}*\n{emoji} {priorita}"
        if attivita.scadenza:
            testo += f"\n📅 Срок: {formatta_data(attivita.scadenza, locale)}"
    else:
        testo = f"⏰ תזכורת: *{attivita.titolo}*\n{emoji} {priorita}"
        if attivita.scadenza:
            testo += f"\n📅 תאריך יעד: {formatta_data(attivita.scadenza, locale)}"
    return testo


def link_promemoria(attivita):
    """Link wa.me al telefono del responsabile (o generico) con il sollecito."""
    url = link_whatsapp(testo_promemoria(attivita))
    telefono = ''.join(c for c in attivita.responsabile_telefono or '' if c.isdigit())
    if telefono.startswith('0'):
        url = url.replace('https://wa.me/', f'https://wa.me/972{telefono[1:]}', 1)
    return url


# ============================================================================
# TAG
# ============================================================================

def elenco_tag(params):
    """
    Tag filtrate e ordinate.

    Args:
        params: active ('false' per includere le inattive), system ('true'/'false'),
                sort ('name' | 'usage' | 'order')
    """
    qs = Tag.objects.annotate(
        conteggio_attivita=Count('attivita_tag', filter=Q(attivita_tag__attivita__is_active=True))
    )
    if params.get('active') != 'false':
        qs = qs.filter(is_active=True)

    sistema = params.get('system')
    if sistema in ('true', 'false'):
        qs = qs.filter(di_sistema=(sistema == 'true'))

    ordinamento = params.get('sort') or 'order'
    if ordinamento == 'name':
        return qs.order_by('nome_he')
    if ordinamento == 'usage':
        return qs.order_by('-conteggio_attivita', 'nome_he')
    return qs.order_by('ordine_visualizzazione', 'nome_he')


def verifica_modifica_tag(tag, dati):
    """
    Le tag di sistema non possono cambiare nome né essere disattivate.

    Raises:
        PermissionDenied
    """
    if not tag.di_sistema:
        return
    nome = dati.get('nome')
    if nome and nome != tag.nome:
        raise PermissionDenied("Non è possibile rinominare una tag di sistema")
    if dati.get('attivo') is False or dati.get('is_active') is False:
        raise PermissionDenied("Non è possibile disattivare una tag di sistema")


def elimina_tag(tag, user=None):
    """
    Elimina una tag. Se è usata da qualche attività viene solo disattivata.

    Returns:
        str: 'disattivata' o 'eliminata'

    Raises:
        PermissionDenied: per le tag di sistema
    """
    if tag.di_sistema:
        raise PermissionDenied("Non è possibile eliminare una tag di sistema")

    if tag.attivita_tag.exists():
        tag.soft_delete(user=user)
        logger.info(f"Tag {tag.nome} disattivata (in uso su {tag.attivita_tag.count()} attività)")
        return 'disattivata'

    tag.delete()
    logger.info(f"Tag {tag.nome} eliminata")
    return 'eliminata'


def _tag_attive(tag_ids):
    """
    Tag richieste, tutte esistenti e attive.

    Raises:
        ValidationError
    """
    if not isinstance(tag_ids, list) or not tag_ids:
        raise ValidationError("Indicare almeno una tag")

    ids = set(_uuid_validi(tag_ids))
    tags = list(Tag.objects.filter(pk__in=ids))
    if len(ids) != len(set(map(str, tag_ids))) or len(tags) != len(ids):
        raise ValidationError("Una o più tag non esistono")

    inattive = [t.nome_he for t in tags if not t.is_active]
    if inattive:
        raise ValidationError(f"Tag non attive: {', '.join(inattive)}")
    return tags


def aggiungi_tag(attivita, tag_ids):
    """
    Aggiunge tag a un'attività, ignorando quelle già presenti.

    Returns:
        int: numero di tag aggiunte
    """
    tags = _tag_attive(tag_ids)
    presenti = set(attivita.attivita_tag.values_list('tag_id', flat=True))
    nuove = [AttivitaTag(attivita=attivita, tag=tag) for tag in tags if tag.pk not in presenti]
    AttivitaTag.objects.bulk_create(nuove)
    logger.info(f"Attività {attivita.pk}: {len(nuove)} tag aggiunte")
    return len(nuove)


def rimuovi_tag(attivita, tag_id):
    """
    Returns:
        bool: False se la tag non era assegnata
    """
    eliminati, _ = AttivitaTag.objects.filter(attivita=attivita, tag_id=tag_id).delete()
    return eliminati > 0


def imposta_tag(attivita, tags):
    """Sostituisce l'insieme di tag (usato dal form con Select2)."""
    nuove = {tag.pk for tag in tags}
    attuali = set(attivita.attivita_tag.values_list('tag_id', flat=True))
    AttivitaTag.objects.filter(attivita=attivita, tag_id__in=attuali - nuove).delete()
    AttivitaTag.objects.bulk_create(
        [AttivitaTag(attivita=attivita, tag_id=tag_id) for tag_id in nuove - attuali]
    )


@transaction.atomic
def tag_in_blocco(task_ids, tag_ids, azione):
    """
    Aggiunge o rimuove tag su più attività.

    Args:
        task_ids: id attività (devono esistere tutte)
        tag_ids: id tag (devono esistere ed essere attive)
        azione: 'add' | 'remove'

    Returns:
        int: numero di collegamenti creati o rimossi
    """
    if azione not in AZIONI_BLOCCO:
        raise ValidationError("Azione non valida (add o remove)")
    if not isinstance(task_ids, list) or not task_ids:
        raise ValidationError("Indicare almeno un'attività")

    ids_attivita = set(_uuid_validi(task_ids))
    attivita = list(Attivita.objects.filter(pk__in=ids_attivita, is_active=True))
    if len(ids_attivita) != len(set(map(str, task_ids))) or len(attivita) != len(ids_attivita):
        raise ValidationError("Una o più attività non esistono")

    tags = _tag_attive(tag_ids)

    if azione == 'remove':
        eliminati, _ = AttivitaTag.objects.filter(
            attivita__in=attivita, tag__in=tags
        ).delete()
        logger.info(f"Tag in blocco: {eliminati} collegamenti rimossi")
        return eliminati

    esistenti = set(
        AttivitaTag.objects.filter(attivita__in=attivita, tag__in=tags).values_list('attivita_id', 'tag_id')
    )
    nuove = [
        AttivitaTag(attivita=a, tag=t)
        for a in attivita
        for t in tags
        if (a.pk, t.pk) not in esistenti
    ]
    AttivitaTag.objects.bulk_create(nuove)
    logger.info(f"Tag in blocco: {len(nuove)} collegamenti creati")
    return len(nuove)
