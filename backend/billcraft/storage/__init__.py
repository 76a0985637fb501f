"""
Swappable storage backends.

STORAGE_BACKEND selects "sql" (Flask-SQLAlchemy models) or "memory"
(process-local dicts, used by demo mode). Services always go through
get_storage() and never branch on the backend.
"""
from __future__ import annotations

from flask import Flask, current_app

from .base import Storage, StorageError, TableStore
from .demo_data import seed_demo_catalog
from .memory_store import MemoryTableStore
from .sql_store import SqlTableStore

# Owner used for unauthenticated requests in demo mode
DEMO_ACCOUNT_ID = 0

STORAGE_EXTENSION_KEY = "billcraft_storage"

__all__ = [
    "DEMO_ACCOUNT_ID",
    "Storage",
    "StorageError",
    "TableStore",
    "build_storage",
    "get_storage",
    "init_storage",
]


def build_storage(backend: str) -> Storage:
    if backend == "sql":
        from ..models import CompanySettings, Customer, Invoice, Product

        return Storage(
            products=SqlTableStore(Product),
            customers=SqlTableStore(Customer),
            invoices=SqlTableStore(Invoice),
            settings=SqlTableStore(CompanySettings),
            backend="sql",
        )

    if backend == "memory":
        return Storage(
            products=MemoryTableStore(defaults={
                "description": None,
                "stock": 0,
                "category": None,
                "low_stock_threshold": 10,
            }, unique=("sku",)),
            customers=MemoryTableStore(defaults={
                "email": None,
                "phone": None,
                "address": None,
                "gst_number": None,
                "is_prime": False,
            }),
            invoices=MemoryTableStore(track_updates=False, unique=("invoice_number",)),
            settings=MemoryTableStore(),
            backend="memory",
        )

    raise ValueError(f"Unknown storage backend: {backend!r}")


def init_storage(app: Flask) -> Storage:
    storage = build_storage(app.config["STORAGE_BACKEND"])
    app.extensions[STORAGE_EXTENSION_KEY] = storage

    if app.config.get("DEMO_MODE"):
        if storage.backend == "memory":
            seeded = seed_demo_catalog(storage, DEMO_ACCOUNT_ID)
            app.logger.info("Demo mode: seeded %d sample products", seeded)
        else:
            app.logger.warning("Demo mode with %s storage: run `flask demo seed` for sample data", storage.backend)

    return storage


def get_storage() -> Storage:
    return current_app.extensions[STORAGE_EXTENSION_KEY]
