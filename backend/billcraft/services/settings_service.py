# Overview: Company profile and invoice configuration per account.

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from flask import current_app

from ..models import CompanySettings
from ..storage import Storage, StorageError, get_storage
from ..validation import ModelValidationPolicy, enforce_rules_settings, to_decimal, validate_payload

DEFAULT_COMPANY_SETTINGS = {
    "company_name": "My Company",
    "company_address": "Your Business Address",
    "company_phone": "",
    "company_email": "",
    "company_gst": "",
    "currency": "₹",
    "invoice_prefix": "INV",
    "tax_rate": Decimal("18"),
    "gst_rate": Decimal("18"),
}

SETTINGS_POLICY = ModelValidationPolicy(
    writable_fields=set(DEFAULT_COMPANY_SETTINGS),
    required_on_create=set(),
)


@dataclass(frozen=True)
class CompanySettingsConfig:
    """
    Resolved settings for one account.

    Loaded once per checkout and passed to the invoice engine explicitly,
    so a single invoice never mixes two configurations.
    """
    company_name: str
    company_address: str
    company_phone: str
    company_email: str
    company_gst: str
    currency: str
    invoice_prefix: str
    tax_rate: Decimal
    gst_rate: Decimal

    @classmethod
    def defaults(cls) -> "CompanySettingsConfig":
        return cls(**DEFAULT_COMPANY_SETTINGS)

    @classmethod
    def from_record(cls, record: dict | None) -> "CompanySettingsConfig":
        """Stored values win; missing or blank ones fall back to defaults."""
        record = record or {}
        values = {}
        for key, default in DEFAULT_COMPANY_SETTINGS.items():
            value = record.get(key)
            if isinstance(default, Decimal):
                values[key] = default if value is None else to_decimal(value, key)
            elif isinstance(value, str) and value.strip():
                values[key] = value.strip()
            else:
                values[key] = default
        return cls(**values)

    def company_snapshot(self) -> dict:
        """Company fields copied onto an invoice record."""
        return {
            "company_name": self.company_name,
            "company_address": self.company_address,
            "company_phone": self.company_phone,
            "company_email": self.company_email,
            "company_gst": self.company_gst,
        }

    def to_dict(self) -> dict:
        return {key: getattr(self, key) for key in DEFAULT_COMPANY_SETTINGS}


def _settings_row(owner_id: int, storage: Storage) -> dict | None:
    rows = storage.settings.find(owner_id)
    return rows[0] if rows else None


def load_company_settings(owner_id: int, storage: Storage | None = None) -> CompanySettingsConfig:
    """
    Settings for the account, or defaults when none were saved.

    An unreachable store degrades to defaults with a warning rather than
    blocking invoicing.
    """
    storage = storage or get_storage()
    try:
        row = _settings_row(owner_id, storage)
    except StorageError:
        current_app.logger.warning("Company settings unavailable for owner %s; using defaults", owner_id)
        return CompanySettingsConfig.defaults()
    return CompanySettingsConfig.from_record(row)


def save_company_settings(owner_id: int, payload: dict, storage: Storage | None = None) -> CompanySettingsConfig:
    """
    Validate and upsert the account's settings row.

    Raises ValidationError for unknown fields, rates outside [0, 100] or a
    blank prefix/currency. StorageError propagates.
    """
    storage = storage or get_storage()
    patch = validate_payload(model=CompanySettings, payload=payload, policy=SETTINGS_POLICY, partial=True)
    enforce_rules_settings(patch)

    row = _settings_row(owner_id, storage)
    if row is None:
        record = {**DEFAULT_COMPANY_SETTINGS, **patch}
        row = storage.settings.insert(owner_id, record)
    else:
        row = storage.settings.update(owner_id, row["id"], patch)
    return CompanySettingsConfig.from_record(row)
