from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request, g

from ..decorators import require_auth
from ..services import settings_service
from ..storage import StorageError
from ..validation import ValidationError


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("/company")
@require_auth
def get_company_settings():
    """Saved settings, or defaults when none were saved yet."""
    config = settings_service.load_company_settings(g.account_id)
    return jsonify(config.to_dict())


@settings_bp.put("/company")
@require_auth
def put_company_settings():
    payload = request.get_json(silent=True)
    try:
        config = settings_service.save_company_settings(g.account_id, payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except StorageError:
        current_app.logger.exception("Failed to save company settings")
        return jsonify({"error": "Storage unavailable"}), 503
    return jsonify(config.to_dict())
