"""
Export CSV del portale.

Tutti i CSV iniziano con il BOM UTF-8 così che Excel legga
correttamente ebraico e russo.
"""

import csv
from datetime import date, datetime
from decimal import Decimal

from django.http import HttpResponse

BOM = "\ufeff"


def _formatta_cella(value):
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    if isinstance(value, bool):
        return "✓" if value else ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def csv_response(filename, headers, rows):
    """
    Genera un CSV (con BOM) come HttpResponse in download.

    Args:
        filename: nome file completo di estensione
        headers: lista intestazioni
        rows: iterabile di liste di valori

    Esempio:
        return csv_response("expenses_2025-01.csv", ["Titolo", "Importo"], righe)
    """
    response = HttpResponse(content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    response.write(BOM)

    writer = csv.writer(response)
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_formatta_cella(value) for value in row])

    return response
