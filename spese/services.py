"""
Servizi app spese: filtri del libro cassa ed export.
"""

from django.utils import timezone

from core.excel_generator import generate_excel_response
from core.export import csv_response

from .models import Spesa

INTESTAZIONI_EXPORT = [
    'Data', 'Titolo', 'Tipo', 'Categoria', 'Importo', 'Metodo pagamento',
    'Fornitore', 'Evento', 'Approvata', 'Note',
]


def filtra_spese(queryset, params):
    """
    Applica i filtri del libro cassa.

    Parametri riconosciuti (il valore 'all' è ignorato):
        type, category, approved (true/false), start_date, end_date,
        event_id, month (YYYY-MM)
    """
    tipo = params.get('type')
    if tipo and tipo != 'all':
        queryset = queryset.filter(tipo=tipo)

    categoria = params.get('category')
    if categoria and categoria != 'all':
        queryset = queryset.filter(categoria=categoria)

    approvata = params.get('approved')
    if approvata == 'true':
        queryset = queryset.filter(approvata=True)
    elif approvata == 'false':
        queryset = queryset.filter(approvata=False)

    if params.get('start_date'):
        queryset = queryset.filter(data_spesa__gte=params['start_date'])
    if params.get('end_date'):
        queryset = queryset.filter(data_spesa__lte=params['end_date'])

    if params.get('event_id'):
        queryset = queryset.filter(evento_id=params['event_id'])

    mese = params.get('month')
    if mese and mese != 'all':
        queryset = queryset.del_mese(mese)

    return queryset


def _righe_export(queryset):
    tipi = dict(Spesa.TIPO_CHOICES)
    categorie = dict(Spesa.CATEGORIA_CHOICES)
    metodi = dict(Spesa.METODO_PAGAMENTO_CHOICES)

    for spesa in queryset.select_related('evento'):
        yield [
            spesa.data_spesa,
            spesa.titolo,
            tipi.get(spesa.tipo, spesa.tipo),
            categorie.get(spesa.categoria, spesa.categoria),
            spesa.importo,
            metodi.get(spesa.metodo_pagamento, spesa.metodo_pagamento),
            spesa.fornitore,
            spesa.evento.titolo if spesa.evento else '',
            'Sì' if spesa.approvata else 'No',
            spesa.note,
        ]


def nome_file_export(mese=None):
    """expenses_<YYYY-MM> oppure expenses_all (senza estensione)."""
    return f"expenses_{mese if mese and mese != 'all' else 'all'}"


def export_csv(queryset, mese=None):
    return csv_response(f"{nome_file_export(mese)}.csv", INTESTAZIONI_EXPORT, _righe_export(queryset))


def export_excel(queryset, mese=None):
    data = [dict(zip(INTESTAZIONI_EXPORT, riga)) for riga in _righe_export(queryset)]
    totali = Spesa.totali(queryset)
    data.append({
        'Data': timezone.localdate(),
        'Titolo': 'Saldo',
        'Importo': totali['saldo'],
    })
    return generate_excel_response(
        data,
        filename=nome_file_export(mese),
        sheet_name='Spese',
        headers=INTESTAZIONI_EXPORT,
    )
