# Overview: Flask API routes for invoice composition and checkout.

# backend/billcraft/routes/cart.py
"""
Cart routes - composing an invoice.

The cart lives server-side, one per account, until checkout. Every
response carries the full cart with totals at the account's GST rate.

CHECKOUT: returns the PDF as an attachment. The outcome is reported in
headers:
- X-Invoice-Number
- X-Invoice-State: FINALIZED or PARTIAL_FAILURE
- X-Invoice-Warnings: "; "-joined step failures (empty when none)
"""
import io

from flask import Blueprint, current_app, request, g, send_file

from ..decorators import require_auth
from ..services import products_service
from ..services.cart_service import get_cart
from ..services.invoice_service import InvoiceValidationError, create_invoice
from ..services.settings_service import load_company_settings
from ..storage import StorageError
from ..validation import ValidationError, NotFoundError

cart_bp = Blueprint("cart", __name__, url_prefix="/api/cart")


def _cart_response(cart, status: int = 200):
    settings = load_company_settings(g.account_id)
    body = cart.to_dict(settings.gst_rate)
    body["currency"] = settings.currency
    return body, status


@cart_bp.get("")
@require_auth
def get_cart_route():
    return _cart_response(get_cart(g.account_id))


@cart_bp.delete("")
@require_auth
def clear_cart_route():
    cart = get_cart(g.account_id)
    cart.clear()
    return _cart_response(cart)


@cart_bp.post("/lines")
@require_auth
def add_line_route():
    """
    Body: {"product_id": int, "quantity": int (optional, default 1)}

    A product already in the cart is left as it is.
    """
    payload = request.get_json(silent=True) or {}
    product_id = payload.get("product_id")
    if isinstance(product_id, bool) or not isinstance(product_id, int):
        return {"error": "product_id must be an integer"}, 400

    cart = get_cart(g.account_id)
    try:
        product = products_service.get_product(g.account_id, product_id)
        cart.add_product(product, payload.get("quantity", 1))
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ValidationError as e:
        return {"error": str(e)}, 400
    except StorageError:
        current_app.logger.exception("Failed to load product for cart")
        return {"error": "Storage unavailable"}, 503

    return _cart_response(cart, 201)


@cart_bp.delete("/lines/<int:product_id>")
@require_auth
def remove_line_route(product_id: int):
    cart = get_cart(g.account_id)
    if not cart.remove_line(product_id):
        return {"error": "Product is not in the cart"}, 404
    return _cart_response(cart)


@cart_bp.post("/lines/<int:product_id>/increment")
@require_auth
def increment_line_route(product_id: int):
    cart = get_cart(g.account_id)
    try:
        cart.increment(product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return _cart_response(cart)


@cart_bp.post("/lines/<int:product_id>/decrement")
@require_auth
def decrement_line_route(product_id: int):
    """Quantity never drops below 1; use DELETE to remove the line."""
    cart = get_cart(g.account_id)
    try:
        cart.decrement(product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return _cart_response(cart)


@cart_bp.put("/lines/<int:product_id>/price")
@require_auth
def set_price_route(product_id: int):
    """Body: {"price": number or numeric string}."""
    payload = request.get_json(silent=True) or {}
    if "price" not in payload:
        return {"error": "price is required"}, 400

    cart = get_cart(g.account_id)
    try:
        cart.set_override_price(product_id, payload["price"])
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ValidationError as e:
        return {"error": str(e)}, 400
    return _cart_response(cart)


@cart_bp.delete("/lines/<int:product_id>/price")
@require_auth
def clear_price_route(product_id: int):
    cart = get_cart(g.account_id)
    try:
        cart.clear_override_price(product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return _cart_response(cart)


@cart_bp.put("/customer")
@require_auth
def set_customer_route():
    """Body: any of name, email, phone, address."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return {"error": "Invalid JSON payload"}, 400

    cart = get_cart(g.account_id)
    try:
        cart.customer.update(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    return _cart_response(cart)


@cart_bp.post("/checkout")
@require_auth
def checkout_route():
    cart = get_cart(g.account_id)
    settings = load_company_settings(g.account_id)

    try:
        outcome = create_invoice(account_id=g.account_id, cart=cart, settings=settings)
    except InvoiceValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to generate invoice")
        return {"error": "Internal server error"}, 500

    response = send_file(
        io.BytesIO(outcome.pdf),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=outcome.filename,
    )
    response.headers["X-Invoice-Number"] = outcome.invoice_number
    response.headers["X-Invoice-State"] = outcome.state.value
    response.headers["X-Invoice-Warnings"] = "; ".join(outcome.warnings)
    if outcome.persisted:
        response.headers["X-Invoice-Id"] = str(outcome.record["id"])
    return response
