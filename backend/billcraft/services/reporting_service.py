# Overview: Dashboard figures derived from the catalog and invoice history.

from __future__ import annotations

from decimal import Decimal

from ..storage import Storage, get_storage
from ..validation import quantize_money, to_decimal
from .products_service import is_low_stock

ZERO = Decimal("0")


def inventory_summary(owner_id: int, storage: Storage | None = None) -> dict:
    storage = storage or get_storage()
    products = storage.products.list(owner_id, order_by="name")

    value = sum(
        (to_decimal(p.get("price") or 0, "price") * int(p.get("stock") or 0) for p in products),
        ZERO,
    )
    low_stock = [p for p in products if is_low_stock(p)]
    return {
        "total_products": len(products),
        "total_stock": sum(int(p.get("stock") or 0) for p in products),
        "inventory_value": quantize_money(value),
        "low_stock_count": len(low_stock),
        "low_stock": [
            {"id": p["id"], "name": p["name"], "sku": p["sku"], "stock": p["stock"]}
            for p in low_stock
        ],
    }


def invoice_summary(owner_id: int, storage: Storage | None = None) -> dict:
    storage = storage or get_storage()
    invoices = storage.invoices.list(owner_id, order_by="created_at", descending=True)

    revenue = sum((to_decimal(i["total"], "total") for i in invoices), ZERO)
    gst = sum((to_decimal(i["gst_amount"], "gst_amount") for i in invoices), ZERO)
    return {
        "invoice_count": len(invoices),
        "revenue": quantize_money(revenue),
        "gst_collected": quantize_money(gst),
        "recent": [
            {
                "id": i["id"],
                "invoice_number": i["invoice_number"],
                "customer_name": i["customer_name"],
                "total": i["total"],
                "currency": i["currency"],
                "created_at": i["created_at"],
            }
            for i in invoices[:5]
        ],
    }


def dashboard(owner_id: int, storage: Storage | None = None) -> dict:
    storage = storage or get_storage()
    return {
        "inventory": inventory_summary(owner_id, storage),
        "invoices": invoice_summary(owner_id, storage),
    }
