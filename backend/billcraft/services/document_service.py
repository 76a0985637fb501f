# Overview: Invoice numbering and layout-level document assembly.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from ..time_utils import parse_iso_datetime, utcnow
from ..validation import to_decimal

DEFAULT_INVOICE_PREFIX = "INV"
INVOICE_NUMBER_SEPARATOR = "-"
DOCUMENT_TITLE = "INVOICE"


def synthesize_invoice_number(prefix: str | None, timestamp_ms: int) -> str:
    """
    Build an invoice number from the account prefix and a millisecond clock.

    Pure: the same (prefix, timestamp_ms) always yields the same number and
    no storage round-trip is involved. Numbers are monotonic under a normal
    clock but not gap-free. Uniqueness relies on callers never issuing two
    invoices in the same millisecond.
    """
    prefix = (prefix or "").strip() or DEFAULT_INVOICE_PREFIX
    if timestamp_ms < 0:
        raise ValueError("timestamp_ms must be >= 0")
    return f"{prefix}{INVOICE_NUMBER_SEPARATOR}{timestamp_ms}"


def round_money(amount) -> Decimal:
    return to_decimal(amount, "amount").quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_money(amount, currency: str) -> str:
    """Currency symbol as a literal prefix plus exactly two decimals."""
    return f"{currency}{round_money(amount)}"


def format_rate(rate) -> str:
    """18.00 -> "18", 12.50 -> "12.5"."""
    return f"{to_decimal(rate, 'rate').normalize():f}"


@dataclass(frozen=True)
class DocumentLine:
    name: str
    quantity: int
    unit_price: str
    amount: str


@dataclass(frozen=True)
class InvoiceDocument:
    """
    Everything the renderer draws, already formatted.

    Section order is fixed: header, company, customer, items, totals.
    """
    title: str
    invoice_number: str
    issued_on: str
    company_lines: tuple[str, ...]
    customer_lines: tuple[str, ...]
    lines: tuple[DocumentLine, ...]
    subtotal_line: str
    tax_line: str
    total_line: str

    @property
    def filename(self) -> str:
        return f"{self.invoice_number}.pdf"

    def sections(self) -> list[tuple[str, list[str]]]:
        return [
            ("header", [self.title, f"Invoice #: {self.invoice_number}", f"Date: {self.issued_on}"]),
            ("company", list(self.company_lines)),
            ("customer", ["Bill To:", *self.customer_lines]),
            ("items", [f"{l.name} | {l.quantity} | {l.unit_price} | {l.amount}" for l in self.lines]),
            ("totals", [self.subtotal_line, self.tax_line, self.total_line]),
        ]


def _present(*values) -> tuple[str, ...]:
    return tuple(v.strip() for v in values if v and v.strip())


def build_invoice_document(record: dict) -> InvoiceDocument:
    """
    Assemble the printable document from an invoice record snapshot.

    Works for freshly built records (created_at is a datetime) and for
    stored ones (created_at is an ISO string), so a re-download from
    history matches the original.
    """
    currency = record["currency"]

    created_at = record.get("created_at")
    if isinstance(created_at, str):
        created_at = parse_iso_datetime(created_at)
    if not isinstance(created_at, datetime):
        created_at = utcnow()

    lines = []
    for item in record["items"]:
        unit_price = to_decimal(item["unit_price"], "unit_price")
        quantity = int(item["quantity"])
        lines.append(
            DocumentLine(
                name=item["name"],
                quantity=quantity,
                unit_price=format_money(unit_price, currency),
                amount=format_money(unit_price * quantity, currency),
            )
        )

    company_gst = (record.get("company_gst") or "").strip()
    return InvoiceDocument(
        title=DOCUMENT_TITLE,
        invoice_number=record["invoice_number"],
        issued_on=created_at.strftime("%d/%m/%Y"),
        company_lines=_present(
            record.get("company_name"),
            record.get("company_address"),
            record.get("company_phone"),
            record.get("company_email"),
            f"GST: {company_gst}" if company_gst else None,
        ),
        customer_lines=_present(
            record.get("customer_name"),
            record.get("customer_email"),
            record.get("customer_address"),
            record.get("customer_phone"),
        ),
        lines=tuple(lines),
        subtotal_line=f"Subtotal: {format_money(record['subtotal'], currency)}",
        tax_line=f"GST ({format_rate(record['gst_rate'])}%): {format_money(record['gst_amount'], currency)}",
        total_line=f"Total: {format_money(record['total'], currency)}",
    )
