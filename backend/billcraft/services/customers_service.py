# Overview: Account-scoped customer address book.

from __future__ import annotations

from ..models import Customer
from ..storage import Storage, get_storage
from ..validation import ModelValidationPolicy, NotFoundError, validate_payload

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "email", "phone", "address", "gst_number", "is_prime"},
    required_on_create={"name"},
)


def list_customers(owner_id: int, *, search: str | None = None, storage: Storage | None = None) -> list[dict]:
    """Customers ordered by name; search matches name, email or phone."""
    storage = storage or get_storage()
    customers = storage.customers.list(owner_id, order_by="name")

    needle = (search or "").strip().lower()
    if not needle:
        return customers
    return [
        c for c in customers
        if any(needle in (c.get(key) or "").lower() for key in ("name", "email", "phone"))
    ]


def get_customer(owner_id: int, customer_id: int, storage: Storage | None = None) -> dict:
    storage = storage or get_storage()
    customer = storage.customers.get(owner_id, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


def create_customer(owner_id: int, payload: dict, storage: Storage | None = None) -> dict:
    storage = storage or get_storage()
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
    patch.setdefault("is_prime", False)
    return storage.customers.insert(owner_id, patch)


def update_customer(owner_id: int, customer_id: int, payload: dict, storage: Storage | None = None) -> dict:
    # Invoices hold their own copy of customer details; nothing else changes here.
    storage = storage or get_storage()
    patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
    updated = storage.customers.update(owner_id, customer_id, patch)
    if updated is None:
        raise NotFoundError("Customer not found")
    return updated


def delete_customer(owner_id: int, customer_id: int, storage: Storage | None = None) -> None:
    storage = storage or get_storage()
    if not storage.customers.delete(owner_id, customer_id):
        raise NotFoundError("Customer not found")
