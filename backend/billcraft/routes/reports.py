# Overview: Flask API routes for reports operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, g

from ..decorators import require_auth
from ..services import reporting_service
from ..storage import StorageError

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
@require_auth
def dashboard_route():
    try:
        return reporting_service.dashboard(g.account_id)
    except StorageError:
        current_app.logger.exception("Failed to build dashboard")
        return {"error": "Storage unavailable"}, 503
