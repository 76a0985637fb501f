# Overview: Flask API routes for customer records; parses input and returns JSON responses.

from flask import Blueprint, current_app, request, g

from ..services import customers_service
from ..storage import StorageError
from ..validation import ValidationError, NotFoundError
from ..decorators import require_auth

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
def list_customers_route():
    try:
        items = customers_service.list_customers(g.account_id, search=request.args.get("q"))
    except StorageError:
        current_app.logger.exception("Failed to list customers")
        return {"error": "Storage unavailable"}, 503
    return {"items": items, "count": len(items)}


@customers_bp.get("/<int:customer_id>")
@require_auth
def get_customer_route(customer_id: int):
    try:
        return customers_service.get_customer(g.account_id, customer_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except StorageError:
        current_app.logger.exception("Failed to load customer")
        return {"error": "Storage unavailable"}, 503


@customers_bp.post("")
@require_auth
def create_customer_route():
    payload = request.get_json(silent=True) or {}
    try:
        created = customers_service.create_customer(g.account_id, payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except StorageError:
        current_app.logger.exception("Failed to create customer")
        return {"error": "Storage unavailable"}, 503
    return created, 201


@customers_bp.put("/<int:customer_id>")
@require_auth
def update_customer_route(customer_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        return customers_service.update_customer(g.account_id, customer_id, payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except StorageError:
        current_app.logger.exception("Failed to update customer")
        return {"error": "Storage unavailable"}, 503


@customers_bp.delete("/<int:customer_id>")
@require_auth
def delete_customer_route(customer_id: int):
    try:
        customers_service.delete_customer(g.account_id, customer_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except StorageError:
        current_app.logger.exception("Failed to delete customer")
        return {"error": "Storage unavailable"}, 503
    return {"deleted": True, "id": customer_id}
