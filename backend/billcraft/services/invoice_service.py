# backend/billcraft/services/invoice_service.py
"""
Invoice Service - checkout orchestration and invoice history

LIFECYCLE:
  COMPOSING -> VALIDATING -> PERSISTING -> STOCK_ADJUSTING -> FINALIZED
                                   (any best-effort step failed) -> PARTIAL_FAILURE

ORDERING:
1. Validate (customer name, non-empty cart). Failure leaves the cart as is
   and nothing has been written.
2. Synthesize the number, compute totals, snapshot the record and render
   the PDF. A render failure aborts; a record only ever exists for a
   document that was produced.
3. Persist the record (best-effort).
4. Decrement stock once per line (best-effort, each line independent).
5. Clear the cart and reset customer details.

Best-effort steps absorb StorageError and NotFoundError only, log them and
report them as warnings on the outcome. Anything else is a bug and
propagates.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

from flask import current_app

from ..storage import Storage, StorageError, get_storage
from ..time_utils import now_ms, utcnow
from ..validation import NotFoundError, ValidationError, quantize_money
from .cart_service import Cart
from .document_service import build_invoice_document, synthesize_invoice_number
from .pdf_service import render_invoice_pdf
from .products_service import decrement_stock
from .settings_service import CompanySettingsConfig


class InvoiceState(str, Enum):
    COMPOSING = "COMPOSING"
    VALIDATING = "VALIDATING"
    PERSISTING = "PERSISTING"
    STOCK_ADJUSTING = "STOCK_ADJUSTING"
    FINALIZED = "FINALIZED"
    PARTIAL_FAILURE = "PARTIAL_FAILURE"


class InvoiceValidationError(ValidationError):
    """Checkout rejected before any side effect."""


@dataclass(frozen=True)
class StepResult:
    name: str
    ok: bool
    error: str | None = None
    value: object = None

    def to_dict(self) -> dict:
        return {"name": self.name, "ok": self.ok, "error": self.error}


@dataclass
class InvoiceOutcome:
    state: InvoiceState
    record: dict
    pdf: bytes
    steps: list[StepResult] = field(default_factory=list)
    states: list[InvoiceState] = field(default_factory=list)

    @property
    def invoice_number(self) -> str:
        return self.record["invoice_number"]

    @property
    def filename(self) -> str:
        return f"{self.invoice_number}.pdf"

    @property
    def warnings(self) -> list[str]:
        return [f"{s.name}: {s.error}" for s in self.steps if not s.ok]

    @property
    def persisted(self) -> bool:
        return any(s.name == "persist" and s.ok for s in self.steps)


STEP_ERRORS = (StorageError, NotFoundError)


def run_step(name: str, fn: Callable[[], object], *, invoice_number: str) -> StepResult:
    """Run one best-effort step; storage-level failures become a failed result."""
    try:
        value = fn()
    except STEP_ERRORS as exc:
        current_app.logger.warning("Invoice %s: step %s failed: %s", invoice_number, name, exc)
        return StepResult(name=name, ok=False, error=str(exc) or exc.__class__.__name__)
    return StepResult(name=name, ok=True, value=value)


def validate_checkout(cart: Cart) -> None:
    if not cart.customer.name.strip():
        raise InvoiceValidationError("Please enter customer name")
    if cart.is_empty:
        raise InvoiceValidationError("Please add products to the invoice")


def build_invoice_record(
    *,
    cart: Cart,
    settings: CompanySettingsConfig,
    invoice_number: str,
    created_at: datetime,
) -> dict:
    """
    Frozen snapshot of the cart as an invoice.

    Money is rounded to cents here, at the presentation boundary. Unit
    prices carry at most two decimals, so the rounded subtotal is exact and
    total == subtotal + gst_amount holds on the stored values.
    """
    totals = cart.totals(settings.gst_rate)
    subtotal = quantize_money(totals.subtotal)
    gst_amount = quantize_money(totals.tax_amount)

    customer = cart.customer
    return {
        "invoice_number": invoice_number,
        "customer_name": customer.name.strip(),
        "customer_email": customer.email or None,
        "customer_phone": customer.phone or None,
        "customer_address": customer.address or None,
        "currency": settings.currency,
        "subtotal": subtotal,
        "gst_rate": totals.tax_rate,
        "gst_amount": gst_amount,
        "total": subtotal + gst_amount,
        "items": [
            {
                "product_id": line.product_id,
                "name": line.product.get("name"),
                "sku": line.product.get("sku"),
                "quantity": line.quantity,
                "unit_price": str(quantize_money(line.effective_price)),
            }
            for line in cart.lines
        ],
        **settings.company_snapshot(),
        "created_at": created_at,
    }


def create_invoice(
    *,
    account_id: int,
    cart: Cart,
    settings: CompanySettingsConfig,
    storage: Storage | None = None,
    timestamp_ms: int | None = None,
) -> InvoiceOutcome:
    """
    Turn the cart into an invoice: PDF, stored record, stock decrements.

    settings is loaded once by the caller and used for the whole invoice.

    Raises:
        InvoiceValidationError: missing customer name or empty cart
    """
    storage = storage or get_storage()
    states = [InvoiceState.COMPOSING, InvoiceState.VALIDATING]

    validate_checkout(cart)

    invoice_number = synthesize_invoice_number(
        settings.invoice_prefix,
        now_ms() if timestamp_ms is None else timestamp_ms,
    )
    record = build_invoice_record(
        cart=cart,
        settings=settings,
        invoice_number=invoice_number,
        created_at=utcnow(),
    )
    document = build_invoice_document(record)
    pdf = render_invoice_pdf(document)

    steps: list[StepResult] = []

    states.append(InvoiceState.PERSISTING)
    persisted = run_step(
        "persist",
        lambda: storage.invoices.insert(account_id, record),
        invoice_number=invoice_number,
    )
    steps.append(persisted)
    if persisted.ok:
        record = persisted.value

    states.append(InvoiceState.STOCK_ADJUSTING)
    for line in cart.lines:
        steps.append(
            run_step(
                f"stock:{line.product_id}",
                lambda line=line: decrement_stock(account_id, line.product_id, line.quantity, storage),
                invoice_number=invoice_number,
            )
        )

    cart.clear()

    final = InvoiceState.FINALIZED if all(s.ok for s in steps) else InvoiceState.PARTIAL_FAILURE
    states.append(final)
    if final is InvoiceState.FINALIZED:
        current_app.logger.info("Invoice %s finalized for account %s", invoice_number, account_id)

    return InvoiceOutcome(state=final, record=record, pdf=pdf, steps=steps, states=states)


# --- History ---------------------------------------------------------------

def list_invoices(owner_id: int, storage: Storage | None = None) -> list[dict]:
    """Newest first."""
    storage = storage or get_storage()
    return storage.invoices.list(owner_id, order_by="created_at", descending=True)


def get_invoice(owner_id: int, invoice_id: int, storage: Storage | None = None) -> dict:
    storage = storage or get_storage()
    invoice = storage.invoices.get(owner_id, invoice_id)
    if invoice is None:
        raise NotFoundError("Invoice not found")
    return invoice


def delete_invoice(owner_id: int, invoice_id: int, storage: Storage | None = None) -> None:
    """Remove the record only; products and customers are untouched."""
    storage = storage or get_storage()
    if not storage.invoices.delete(owner_id, invoice_id):
        raise NotFoundError("Invoice not found")


def render_invoice_pdf_for(owner_id: int, invoice_id: int, storage: Storage | None = None) -> tuple[str, bytes]:
    """Re-render a stored invoice from its snapshot. Returns (filename, pdf)."""
    invoice = get_invoice(owner_id, invoice_id, storage)
    document = build_invoice_document(invoice)
    return document.filename, render_invoice_pdf(document)
