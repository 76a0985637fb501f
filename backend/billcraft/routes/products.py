# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/billcraft/routes/products.py
"""
Product catalog routes.

OWNERSHIP: Every operation is scoped to g.account_id (set by @require_auth).
Another account's product answers 404.
"""
from flask import Blueprint, current_app, request, g

from ..services import products_service
from ..storage import StorageError
from ..validation import ValidationError, ConflictError, NotFoundError
from ..decorators import require_auth

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _product_payload(product: dict) -> dict:
    return {**product, "is_low_stock": products_service.is_low_stock(product)}


@products_bp.get("")
@require_auth
def list_products_route():
    """
    Query params:
    - q: search name, category or SKU
    - low_stock: 1 to only return products at or below their threshold
    """
    search = request.args.get("q")
    low_stock_only = request.args.get("low_stock", "").strip().lower() in {"1", "true", "yes"}

    try:
        items = products_service.list_products(g.account_id, search=search, low_stock_only=low_stock_only)
    except StorageError:
        current_app.logger.exception("Failed to list products")
        return {"error": "Storage unavailable"}, 503

    return {"items": [_product_payload(p) for p in items], "count": len(items)}


@products_bp.get("/<int:product_id>")
@require_auth
def get_product_route(product_id: int):
    try:
        return _product_payload(products_service.get_product(g.account_id, product_id))
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except StorageError:
        current_app.logger.exception("Failed to load product")
        return {"error": "Storage unavailable"}, 503


@products_bp.post("")
@require_auth
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        created = products_service.create_product(g.account_id, payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return {"error": str(e)}, 409
    except StorageError:
        current_app.logger.exception("Failed to create product")
        return {"error": "Storage unavailable"}, 503

    return _product_payload(created), 201


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        updated = products_service.update_product(g.account_id, product_id, payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return {"error": str(e)}, 409
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except StorageError:
        current_app.logger.exception("Failed to update product")
        return {"error": "Storage unavailable"}, 503

    return _product_payload(updated)


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    try:
        products_service.delete_product(g.account_id, product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except StorageError:
        current_app.logger.exception("Failed to delete product")
        return {"error": "Storage unavailable"}, 503

    return {"deleted": True, "id": product_id}
