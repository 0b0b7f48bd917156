"""
CORE PDF GENERATOR - Portale Comitato
======================================

Stili e utility ReportLab condivisi dai documenti PDF del portale
(es. verbale protocollo).
"""

from io import BytesIO
from typing import List

from django.http import HttpResponse
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph

COLORE_PRIMARIO = colors.HexColor("#0D98BA")


def stili_documento():
    """Dizionario di ParagraphStyle usati nei PDF del portale."""
    styles = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "PortaleTitle",
            parent=styles["Heading1"],
            fontSize=18,
            textColor=COLORE_PRIMARIO,
            spaceAfter=20,
            alignment=TA_CENTER,
        ),
        "header": ParagraphStyle(
            "PortaleHeader",
            parent=styles["Heading2"],
            fontSize=13,
            textColor=colors.HexColor("#333333"),
            spaceBefore=12,
            spaceAfter=8,
        ),
        "normal": ParagraphStyle(
            "PortaleNormal",
            parent=styles["Normal"],
            fontSize=10,
            leading=14,
        ),
        "info": ParagraphStyle(
            "PortaleInfo",
            parent=styles["Normal"],
            fontSize=9,
            textColor=colors.grey,
            alignment=TA_RIGHT,
        ),
        "footer": ParagraphStyle(
            "PortaleFooter",
            parent=styles["Normal"],
            fontSize=9,
            textColor=colors.grey,
            alignment=TA_CENTER,
        ),
    }


def testo_multilinea(testo):
    """Converte i newline in <br/> per Paragraph."""
    return (testo or "").replace("\n", "<br/>")


def tabella(righe: List[List[str]], col_widths=None, header=True):
    """Tabella con header colorato e righe alternate."""
    table = Table(righe, colWidths=col_widths)
    comandi = [
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
    ]
    if header:
        comandi += [
            ("BACKGROUND", (0, 0), (-1, 0), COLORE_PRIMARIO),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f8f9fa")]),
        ]
    table.setStyle(TableStyle(comandi))
    return table


def build_pdf(elements) -> BytesIO:
    """Costruisce un PDF A4 con margini standard e ritorna il buffer."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=2 * cm,
        leftMargin=2 * cm,
        topMargin=2 * cm,
        bottomMargin=2 * cm,
    )
    doc.build(elements)
    buffer.seek(0)
    return buffer


def piede_generazione(stili):
    return Paragraph(
        f"Documento generato il {timezone.localtime().strftime('%d/%m/%Y alle %H:%M')}",
        stili["footer"],
    )


def pdf_response(buffer: BytesIO, filename: str) -> HttpResponse:
    response = HttpResponse(buffer.getvalue(), content_type="application/pdf")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response
