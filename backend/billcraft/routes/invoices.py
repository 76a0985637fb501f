# Overview: Flask API routes for invoice history; parses input and returns JSON responses.

"""
Invoice history routes.

Invoices are immutable snapshots: they can be listed, read, re-downloaded
and deleted, never edited.
"""
import io

from flask import Blueprint, current_app, g, send_file

from ..decorators import require_auth
from ..services import invoice_service
from ..storage import StorageError
from ..validation import NotFoundError

invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")


@invoices_bp.get("")
@require_auth
def list_invoices_route():
    """Newest first."""
    try:
        items = invoice_service.list_invoices(g.account_id)
    except StorageError:
        current_app.logger.exception("Failed to list invoices")
        return {"error": "Storage unavailable"}, 503
    return {"items": items, "count": len(items)}


@invoices_bp.get("/<int:invoice_id>")
@require_auth
def get_invoice_route(invoice_id: int):
    try:
        return invoice_service.get_invoice(g.account_id, invoice_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except StorageError:
        current_app.logger.exception("Failed to load invoice")
        return {"error": "Storage unavailable"}, 503


@invoices_bp.get("/<int:invoice_id>/pdf")
@require_auth
def invoice_pdf_route(invoice_id: int):
    try:
        filename, pdf = invoice_service.render_invoice_pdf_for(g.account_id, invoice_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except StorageError:
        current_app.logger.exception("Failed to load invoice")
        return {"error": "Storage unavailable"}, 503

    return send_file(
        io.BytesIO(pdf),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=filename,
    )


@invoices_bp.delete("/<int:invoice_id>")
@require_auth
def delete_invoice_route(invoice_id: int):
    try:
        invoice_service.delete_invoice(g.account_id, invoice_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except StorageError:
        current_app.logger.exception("Failed to delete invoice")
        return {"error": "Storage unavailable"}, 503
    return {"deleted": True, "id": invoice_id}
