# Overview: reportlab rendering of an assembled InvoiceDocument.

from __future__ import annotations

import io
import os

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from .document_service import InvoiceDocument

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 20 * mm
LINE_HEIGHT = 6 * mm
BOTTOM_LIMIT = 30 * mm

# Item table columns (x positions)
COL_NAME = MARGIN
COL_QTY = 120 * mm
COL_RATE = 140 * mm
COL_AMOUNT = 170 * mm

INK = HexColor("#1B2A4A")
RULE = HexColor("#94A3B8")

# DejaVu Sans covers the currency symbols (including ₹) that the
# built-in Helvetica encoding lacks.
FONT_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "fonts")
FONT = "DejaVuSans"
FONT_BOLD = "DejaVuSans-Bold"

pdfmetrics.registerFont(TTFont(FONT, os.path.join(FONT_DIR, "DejaVuSans.ttf")))
pdfmetrics.registerFont(TTFont(FONT_BOLD, os.path.join(FONT_DIR, "DejaVuSans-Bold.ttf")))


def _fit(text: str, font: str, size: float, width: float) -> str:
    """Truncate text with an ellipsis so it fits the column."""
    if stringWidth(text, font, size) <= width:
        return text
    while text and stringWidth(text + "...", font, size) > width:
        text = text[:-1]
    return text + "..."


def _draw_table_header(c: canvas.Canvas, y: float) -> float:
    c.setFont(FONT_BOLD, 11)
    c.drawString(COL_NAME, y, "Items")
    c.drawString(COL_QTY, y, "Qty")
    c.drawString(COL_RATE, y, "Rate")
    c.drawString(COL_AMOUNT, y, "Amount")
    y -= 2 * mm
    c.setStrokeColor(RULE)
    c.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
    c.setFont(FONT, 10)
    return y - LINE_HEIGHT


def _new_page(c: canvas.Canvas, document: InvoiceDocument) -> float:
    c.showPage()
    c.setFillColor(INK)
    c.setFont(FONT, 9)
    c.drawString(MARGIN, PAGE_HEIGHT - MARGIN, f"{document.title} {document.invoice_number} (continued)")
    return _draw_table_header(c, PAGE_HEIGHT - MARGIN - 2 * LINE_HEIGHT)


def render_invoice_pdf(document: InvoiceDocument) -> bytes:
    """
    Draw the document onto A4 pages and return the PDF bytes.

    Layout: title and invoice meta at the top, company block on the left,
    "Bill To" block below it, the items table, then the totals block with
    a bold total. Item rows that do not fit continue on a new page with the
    table header repeated.
    """
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"{document.title} {document.invoice_number}")
    c.setFillColor(INK)

    # Header
    top = PAGE_HEIGHT - MARGIN
    c.setFont(FONT_BOLD, 20)
    c.drawString(MARGIN, top, document.title)
    c.setFont(FONT, 11)
    c.drawString(COL_RATE, top - 3 * LINE_HEIGHT, f"Invoice #: {document.invoice_number}")
    c.drawString(COL_RATE, top - 4 * LINE_HEIGHT, f"Date: {document.issued_on}")

    # Company block
    y = top - 3 * LINE_HEIGHT
    company_width = COL_RATE - MARGIN - 5 * mm
    for i, text in enumerate(document.company_lines):
        font, size = (FONT_BOLD, 12) if i == 0 else (FONT, 11)
        c.setFont(font, size)
        c.drawString(MARGIN, y, _fit(text, font, size, company_width))
        y -= LINE_HEIGHT

    # Customer block
    y -= LINE_HEIGHT
    c.setFont(FONT_BOLD, 11)
    c.drawString(MARGIN, y, "Bill To:")
    c.setFont(FONT, 11)
    y -= LINE_HEIGHT
    for text in document.customer_lines:
        c.drawString(MARGIN, y, _fit(text, FONT, 11, PAGE_WIDTH - 2 * MARGIN))
        y -= LINE_HEIGHT

    # Items table
    y -= LINE_HEIGHT
    y = _draw_table_header(c, y)
    for line in document.lines:
        if y < BOTTOM_LIMIT:
            y = _new_page(c, document)
        c.drawString(COL_NAME, y, _fit(line.name, FONT, 10, COL_QTY - COL_NAME - 3 * mm))
        c.drawString(COL_QTY, y, str(line.quantity))
        c.drawString(COL_RATE, y, line.unit_price)
        c.drawString(COL_AMOUNT, y, line.amount)
        y -= LINE_HEIGHT

    # Totals block (kept together on one page)
    if y - 4 * LINE_HEIGHT < BOTTOM_LIMIT:
        c.showPage()
        c.setFillColor(INK)
        y = PAGE_HEIGHT - MARGIN
    y -= LINE_HEIGHT
    c.setStrokeColor(RULE)
    c.line(COL_QTY, y + LINE_HEIGHT / 2, PAGE_WIDTH - MARGIN, y + LINE_HEIGHT / 2)
    c.setFont(FONT, 11)
    c.drawString(COL_QTY, y, document.subtotal_line)
    c.drawString(COL_QTY, y - LINE_HEIGHT, document.tax_line)
    c.setFont(FONT_BOLD, 14)
    c.drawString(COL_QTY, y - 2.5 * LINE_HEIGHT, document.total_line)

    c.showPage()
    c.save()
    return buffer.getvalue()
