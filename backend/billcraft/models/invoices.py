from __future__ import annotations

from ..extensions import db
from billcraft.time_utils import to_utc_z


class Invoice(db.Model):
    """
    Issued invoice: a frozen snapshot.

    IMMUTABLE: Rows are inserted once by the invoice engine and may be
    deleted by their owner; they are never updated. Customer and company
    fields are copied inline (no foreign keys), and line items keep the
    name and unit price as billed.

    At creation: subtotal == sum(unit_price * quantity) over items and
    total == subtotal + gst_amount.
    """
    __tablename__ = "invoices"
    __table_args__ = (
        db.UniqueConstraint("owner_id", "invoice_number", name="uq_invoices_owner_number"),
        db.Index("ix_invoices_owner_created", "owner_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    invoice_number = db.Column(db.String(64), nullable=False)

    customer_name = db.Column(db.String(255), nullable=False)
    customer_email = db.Column(db.String(255), nullable=True)
    customer_phone = db.Column(db.String(32), nullable=True)
    customer_address = db.Column(db.Text, nullable=True)

    currency = db.Column(db.String(8), nullable=False)
    subtotal = db.Column(db.Numeric(14, 2), nullable=False)
    gst_rate = db.Column(db.Numeric(5, 2), nullable=False)
    gst_amount = db.Column(db.Numeric(14, 2), nullable=False)
    total = db.Column(db.Numeric(14, 2), nullable=False)

    # [{"product_id", "name", "sku", "quantity", "unit_price"}], prices as strings
    items = db.Column(db.JSON, nullable=False)

    company_name = db.Column(db.String(255), nullable=True)
    company_email = db.Column(db.String(255), nullable=True)
    company_phone = db.Column(db.String(32), nullable=True)
    company_address = db.Column(db.Text, nullable=True)
    company_gst = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Invoice id={self.id} number={self.invoice_number!r} owner_id={self.owner_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "invoice_number": self.invoice_number,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "customer_address": self.customer_address,
            "currency": self.currency,
            "subtotal": self.subtotal,
            "gst_rate": self.gst_rate,
            "gst_amount": self.gst_amount,
            "total": self.total,
            "items": list(self.items or []),
            "company_name": self.company_name,
            "company_email": self.company_email,
            "company_phone": self.company_phone,
            "company_address": self.company_address,
            "company_gst": self.company_gst,
            "created_at": to_utc_z(self.created_at),
        }
