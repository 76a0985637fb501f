# backend/billcraft/services/products_service.py
"""
Products Service - account-scoped catalog

OWNERSHIP: Every call takes owner_id and only sees that account's rows.
A product owned by another account raises NotFoundError, the same as a
missing one.

STOCK: The invoice engine only ever lowers stock through decrement_stock,
which floors at zero. The read-compute-write has no version check, so two
concurrent checkouts can lose an update (single-user model).
"""
from __future__ import annotations

from ..models import Product
from ..storage import Storage, get_storage
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_product,
    validate_payload,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price", "stock", "category", "sku", "low_stock_threshold"},
    required_on_create={"name", "sku", "price"},
)


def is_low_stock(product: dict) -> bool:
    return int(product.get("stock") or 0) <= int(product.get("low_stock_threshold") or 0)


def _matches(product: dict, needle: str) -> bool:
    for key in ("name", "category", "sku"):
        value = product.get(key)
        if value and needle in value.lower():
            return True
    return False


def list_products(
    owner_id: int,
    *,
    search: str | None = None,
    low_stock_only: bool = False,
    storage: Storage | None = None,
) -> list[dict]:
    """
    Products ordered by name.

    search matches name, category or SKU (case-insensitive substring).
    """
    storage = storage or get_storage()
    products = storage.products.list(owner_id, order_by="name")

    needle = (search or "").strip().lower()
    if needle:
        products = [p for p in products if _matches(p, needle)]
    if low_stock_only:
        products = [p for p in products if is_low_stock(p)]
    return products


def get_product(owner_id: int, product_id: int, storage: Storage | None = None) -> dict:
    storage = storage or get_storage()
    product = storage.products.get(owner_id, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def _ensure_sku_free(owner_id: int, sku: str, storage: Storage, exclude_id: int | None = None) -> None:
    for existing in storage.products.find(owner_id, sku=sku):
        if existing["id"] != exclude_id:
            raise ConflictError("SKU already exists for this account.")


def create_product(owner_id: int, payload: dict, storage: Storage | None = None) -> dict:
    """
    Validate and insert a product.

    Raises:
        ValidationError: missing name/sku/price or bad values
        ConflictError: SKU already used by this account
    """
    storage = storage or get_storage()
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)

    _ensure_sku_free(owner_id, patch["sku"], storage)

    patch.setdefault("stock", 0)
    patch.setdefault("low_stock_threshold", 10)
    return storage.products.insert(owner_id, patch)


def update_product(owner_id: int, product_id: int, payload: dict, storage: Storage | None = None) -> dict:
    storage = storage or get_storage()
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    enforce_rules_product(patch)

    get_product(owner_id, product_id, storage)
    if "sku" in patch:
        _ensure_sku_free(owner_id, patch["sku"], storage, exclude_id=product_id)

    updated = storage.products.update(owner_id, product_id, patch)
    if updated is None:
        raise NotFoundError("Product not found")
    return updated


def delete_product(owner_id: int, product_id: int, storage: Storage | None = None) -> None:
    """Hard delete. Past invoices keep their own copy of the line."""
    storage = storage or get_storage()
    if not storage.products.delete(owner_id, product_id):
        raise NotFoundError("Product not found")


def decrement_stock(owner_id: int, product_id: int, quantity: int, storage: Storage | None = None) -> int:
    """
    Lower a product's stock by quantity, floored at zero.

    Returns the new stock level. Raises NotFoundError if the product was
    deleted after it was added to the cart; StorageError propagates.
    """
    if quantity < 0:
        raise ValidationError("quantity must be >= 0")

    storage = storage or get_storage()
    product = get_product(owner_id, product_id, storage)
    new_stock = max(0, int(product.get("stock") or 0) - quantity)

    if storage.products.update(owner_id, product_id, {"stock": new_stock}) is None:
        raise NotFoundError("Product not found")
    return new_stock
