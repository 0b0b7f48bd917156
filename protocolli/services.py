"""
Servizi app protocolli: filtri elenco, PDF del verbale, attività dalle azioni.
"""

import logging

from django.db import transaction
from django.utils.dateparse import parse_date
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, Spacer

from core.pdf_generator import (
    build_pdf,
    piede_generazione,
    stili_documento,
    tabella,
    testo_multilinea,
)

logger = logging.getLogger(__name__)

RESPONSABILE_DEFAULT = "Da assegnare"


def filtra_protocolli(queryset, params, solo_pubblici=False):
    """
    Applica i filtri dell'elenco.

    Args:
        params: dict-like con type, approved ('true'/'false'), year
        solo_pubblici: True per anonimi e non admin nelle API
    """
    tipo = params.get('type')
    if tipo and tipo != 'all':
        queryset = queryset.filter(tipo=tipo)

    approvato = params.get('approved')
    if approvato in ('true', 'false'):
        queryset = queryset.filter(approvato=(approvato == 'true'))

    anno = params.get('year')
    if anno:
        try:
            anno = int(anno)
        except ValueError:
            anno = None
        if anno:
            queryset = queryset.filter(data_protocollo__year=anno)

    if solo_pubblici:
        queryset = queryset.filter(pubblico=True)

    return queryset.order_by('-data_protocollo', '-created_at')


# ============================================================================
# PDF
# ============================================================================

def genera_pdf_protocollo(protocollo):
    """
    Verbale in PDF: intestazione, partecipanti, ordine del giorno,
    decisioni e tabella delle azioni.

    Returns:
        BytesIO: buffer del PDF
    """
    stili = stili_documento()
    elements = [
        Paragraph(protocollo.titolo, stili['title']),
        Paragraph(
            f"{protocollo.codice} | {protocollo.get_tipo_display()} | "
            f"{protocollo.data_protocollo.strftime('%d/%m/%Y')}",
            stili['info'],
        ),
    ]
    if protocollo.numero_protocollo:
        elements.append(Paragraph(f"Protocollo n. {protocollo.numero_protocollo}", stili['info']))
    elements.append(Spacer(1, 0.5 * cm))

    elements.append(Paragraph("Partecipanti", stili['header']))
    elements.append(Paragraph(", ".join(str(p) for p in protocollo.partecipanti), stili['normal']))

    if protocollo.ordine_del_giorno:
        elements.append(Paragraph("Ordine del giorno", stili['header']))
        elements.append(Paragraph(testo_multilinea(protocollo.ordine_del_giorno), stili['normal']))

    if protocollo.decisioni:
        elements.append(Paragraph("Decisioni", stili['header']))
        elements.append(Paragraph(testo_multilinea(protocollo.decisioni), stili['normal']))

    if protocollo.azioni:
        elements.append(Paragraph("Azioni", stili['header']))
        righe = [["Azione", "Responsabile", "Scadenza"]]
        for azione in protocollo.azioni:
            righe.append([
                Paragraph(str(azione.get('task', '')), stili['normal']),
                azione.get('owner') or '',
                azione.get('due') or '',
            ])
        elements.append(tabella(righe, col_widths=[9 * cm, 4.5 * cm, 3.5 * cm]))

    stato = "Approvato" if protocollo.approvato else "Non ancora approvato"
    if protocollo.approvato_at:
        stato += f" il {protocollo.approvato_at.strftime('%d/%m/%Y')}"
    elements.append(Spacer(1, 0.5 * cm))
    elements.append(Paragraph(stato, stili['info']))

    elements.append(Spacer(1, 1 * cm))
    elements.append(piede_generazione(stili))

    return build_pdf(elements)


def nome_file_pdf(protocollo):
    return f"protocollo_{protocollo.codice}.pdf"


# ============================================================================
# AZIONI -> ATTIVITA
# ============================================================================

def _scadenza(valore):
    if not valore:
        return None
    try:
        return parse_date(str(valore)[:10])
    except ValueError:
        return None


@transaction.atomic
def crea_attivita_da_azioni(protocollo, user=None):
    """
    Crea un'attività per ogni azione del verbale.

    Le azioni che hanno già un'attività collegata (stesso titolo) vengono
    saltate, quindi l'operazione può essere ripetuta.

    Returns:
        list[Attivita]: le attività create
    """
    from attivita.models import Attivita

    esistenti = set(
        protocollo.attivita.filter(is_active=True).values_list('titolo', flat=True)
    )
    create = []
    for azione in protocollo.azioni or []:
        titolo = str(azione.get('task') or '').strip()[:200]
        if len(titolo) < 2 or titolo in esistenti:
            continue

        responsabile = str(azione.get('owner') or '').strip()
        if len(responsabile) < 2:
            responsabile = RESPONSABILE_DEFAULT

        scadenza = _scadenza(azione.get('due'))

        attivita = Attivita.objects.create(
            titolo=titolo,
            descrizione=f"Dal protocollo {protocollo.codice}: {protocollo.titolo}",
            responsabile_nome=responsabile,
            scadenza=scadenza,
            protocollo=protocollo,
            created_by=user,
            updated_by=user,
        )
        esistenti.add(titolo)
        create.append(attivita)

    logger.info(f"Protocollo {protocollo.codice}: {len(create)} attività create dalle azioni")
    return create
