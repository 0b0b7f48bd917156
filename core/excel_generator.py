"""
CORE EXCEL GENERATOR - Portale Comitato
========================================

Generazione file Excel (openpyxl) per gli export del portale
(registro spese, risposte sondaggio competenze).
"""

from io import BytesIO
from typing import List, Dict, Any
from datetime import datetime, date
from decimal import Decimal

from django.http import HttpResponse
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _valore_cella(value):
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y %H:%M")
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return value


def build_workbook(
    data: List[Dict[str, Any]],
    sheet_name: str = "Dati",
    headers: List[str] = None,
    right_to_left: bool = True,
) -> Workbook:
    """
    Crea il workbook con header colorato, bordi, auto-width e freeze della prima riga.

    Args:
        data: Lista di dizionari con i dati
        sheet_name: Nome del foglio
        headers: Lista headers (default: chiavi del primo dizionario)
        right_to_left: foglio da destra a sinistra (ebraico)
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name
    ws.sheet_view.rightToLeft = right_to_left

    if not data and not headers:
        return wb

    if headers is None:
        headers = list(data[0].keys())

    header_font = Font(bold=True, color="FFFFFF", size=12)
    header_fill = PatternFill(start_color="0D98BA", end_color="0D98BA", fill_type="solid")
    header_alignment = Alignment(horizontal="center", vertical="center")

    for col_num, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col_num)
        cell.value = header
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment

    for row_num, row_data in enumerate(data, 2):
        for col_num, header in enumerate(headers, 1):
            cell = ws.cell(row=row_num, column=col_num)
            cell.value = _valore_cella(row_data.get(header, ""))
            cell.alignment = Alignment(vertical="center")

    # Auto-width colonne
    for col_num in range(1, len(headers) + 1):
        column_letter = get_column_letter(col_num)
        max_length = max(
            (len(str(cell.value)) for cell in ws[column_letter] if cell.value is not None),
            default=0,
        )
        ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

    thin_border = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin"),
    )
    for row in ws.iter_rows(min_row=1, max_row=len(data) + 1, min_col=1, max_col=len(headers)):
        for cell in row:
            cell.border = thin_border

    ws.freeze_panes = "A2"
    return wb


def generate_excel_response(
    data: List[Dict[str, Any]],
    filename: str,
    sheet_name: str = "Dati",
    headers: List[str] = None,
) -> HttpResponse:
    """
    Genera un file Excel e lo ritorna come HttpResponse.

    Args:
        data: Lista di dizionari con i dati
        filename: Nome del file (senza estensione)
        sheet_name: Nome del foglio
        headers: Lista headers personalizzati (opzionale)
    """
    wb = build_workbook(data, sheet_name=sheet_name, headers=headers)

    output = BytesIO()
    wb.save(output)
    output.seek(0)

    response = HttpResponse(output.read(), content_type=XLSX_CONTENT_TYPE)
    response["Content-Disposition"] = f'attachment; filename="{filename}.xlsx"'
    return response
