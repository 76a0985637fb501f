# Overview: Pytest coverage for reportlab invoice rendering.

import io
import re
from decimal import Decimal

from pypdf import PdfReader
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import stringWidth

from billcraft.services.document_service import build_invoice_document
from billcraft.services.pdf_service import COL_RATE, FONT, FONT_BOLD, MARGIN, render_invoice_pdf
from billcraft.services.settings_service import CompanySettingsConfig


def _record(item_count: int) -> dict:
    items = [
        {"product_id": i, "name": f"Item {i}", "sku": f"S-{i}", "quantity": 2, "unit_price": "10.00"}
        for i in range(item_count)
    ]
    subtotal = Decimal("20.00") * item_count
    gst = (subtotal * Decimal("0.18")).quantize(Decimal("0.01"))
    return {
        "invoice_number": "INV-1",
        "customer_name": "Walk-in",
        "currency": "Rs.",
        "subtotal": subtotal,
        "gst_rate": Decimal("18"),
        "gst_amount": gst,
        "total": subtotal + gst,
        "items": items,
        "company_name": "My Company",
        "created_at": "2026-01-01T00:00:00Z",
    }


def _page_count(pdf: bytes) -> int:
    return len(re.findall(rb"/Type\s*/Page(?!s)", pdf))


def test_renders_pdf_bytes():
    pdf = render_invoice_pdf(build_invoice_document(_record(3)))

    assert pdf.startswith(b"%PDF")
    assert pdf.rstrip().endswith(b"%%EOF")


def test_long_item_list_spans_pages():
    short = render_invoice_pdf(build_invoice_document(_record(2)))
    long = render_invoice_pdf(build_invoice_document(_record(120)))

    assert len(long) > len(short)
    assert _page_count(short) == 1
    assert _page_count(long) > 1


def test_very_long_names_do_not_fail():
    record = _record(1)
    record["items"][0]["name"] = "Extremely long product description " * 20

    assert render_invoice_pdf(build_invoice_document(record)).startswith(b"%PDF")


def _text(pdf: bytes) -> str:
    return "\n".join(page.extract_text() for page in PdfReader(io.BytesIO(pdf)).pages)


def test_default_currency_symbol_is_drawn():
    currency = CompanySettingsConfig.defaults().currency
    record = _record(1)
    record.update({
        "currency": currency,
        "items": [{"product_id": 1, "name": "Widget", "sku": "W-1", "quantity": 1, "unit_price": "100.00"}],
        "subtotal": Decimal("100.00"),
        "gst_amount": Decimal("18.00"),
        "total": Decimal("118.00"),
    })

    text = _text(render_invoice_pdf(build_invoice_document(record)))

    assert currency == "₹"
    assert 0x20B9 in pdfmetrics.getFont(FONT).face.charToGlyph
    assert "₹100.00" in text
    assert "₹118.00" in text


def test_long_company_name_fits_beside_invoice_meta():
    record = _record(1)
    record["company_name"] = "Wide Company Name " * 10

    text = _text(render_invoice_pdf(build_invoice_document(record)))

    start = text.index("Wide Company")
    drawn = text[start:text.index("...", start) + 3]
    assert stringWidth(drawn, FONT_BOLD, 12) <= COL_RATE - MARGIN - 5 * mm
