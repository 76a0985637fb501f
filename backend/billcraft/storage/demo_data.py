"""Sample catalog shown in demo mode and seeded by `flask demo seed`."""
from __future__ import annotations

from decimal import Decimal

from .base import Storage

SAMPLE_PRODUCTS = [
    {
        "name": "Wireless Mouse",
        "description": "2.4 GHz optical mouse with USB receiver",
        "price": Decimal("799.00"),
        "stock": 45,
        "category": "Electronics",
        "sku": "ELEC-MOU-001",
        "low_stock_threshold": 10,
    },
    {
        "name": "Mechanical Keyboard",
        "description": "Tenkeyless keyboard, brown switches",
        "price": Decimal("3499.00"),
        "stock": 8,
        "category": "Electronics",
        "sku": "ELEC-KEY-002",
        "low_stock_threshold": 10,
    },
    {
        "name": "A4 Copier Paper (500 sheets)",
        "description": None,
        "price": Decimal("289.50"),
        "stock": 120,
        "category": "Stationery",
        "sku": "STAT-PAP-001",
        "low_stock_threshold": 25,
    },
    {
        "name": "Ball Pen (Box of 10)",
        "description": "Blue ink",
        "price": Decimal("95.00"),
        "stock": 4,
        "category": "Stationery",
        "sku": "STAT-PEN-002",
        "low_stock_threshold": 10,
    },
    {
        "name": "Desk Lamp",
        "description": "LED, adjustable arm",
        "price": Decimal("1250.00"),
        "stock": 15,
        "category": "Furniture",
        "sku": "FURN-LMP-001",
        "low_stock_threshold": 5,
    },
]


def seed_demo_catalog(storage: Storage, owner_id: int) -> int:
    """Insert any sample product whose SKU the owner does not have yet."""
    created = 0
    for product in SAMPLE_PRODUCTS:
        if storage.products.find(owner_id, sku=product["sku"]):
            continue
        storage.products.insert(owner_id, dict(product))
        created += 1
    return created
