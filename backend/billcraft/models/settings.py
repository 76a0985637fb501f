from __future__ import annotations

from ..extensions import db
from billcraft.time_utils import to_utc_z


class CompanySettings(db.Model):
    """
    Company profile and invoice configuration, one row per account.

    Created lazily on first save (upsert keyed by owner_id). Readers get
    defaults when the row is absent.
    """
    __tablename__ = "company_settings"
    __table_args__ = (
        db.UniqueConstraint("owner_id", name="uq_company_settings_owner"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    company_name = db.Column(db.String(255), nullable=True)
    company_address = db.Column(db.Text, nullable=True)
    company_phone = db.Column(db.String(32), nullable=True)
    company_email = db.Column(db.String(255), nullable=True)
    company_gst = db.Column(db.String(32), nullable=True)

    currency = db.Column(db.String(8), nullable=False, default="₹")
    invoice_prefix = db.Column(db.String(16), nullable=False, default="INV")
    tax_rate = db.Column(db.Numeric(5, 2), nullable=False, default=18)
    gst_rate = db.Column(db.Numeric(5, 2), nullable=False, default=18)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "company_name": self.company_name,
            "company_address": self.company_address,
            "company_phone": self.company_phone,
            "company_email": self.company_email,
            "company_gst": self.company_gst,
            "currency": self.currency,
            "invoice_prefix": self.invoice_prefix,
            "tax_rate": self.tax_rate,
            "gst_rate": self.gst_rate,
            "updated_at": to_utc_z(self.updated_at),
        }
