# backend/billcraft/routes/system.py
"""
System health and version endpoints.
"""

import sys
import time
from flask import Blueprint, current_app

from ..storage import DEMO_ACCOUNT_ID, StorageError, get_storage
from billcraft.time_utils import to_utc_z, utcnow

API_VERSION = "1.0.0"

system_bp = Blueprint("system", __name__)


def check_storage_health() -> dict:
    """
    Round-trip a read through the configured storage backend.
    """
    start_time = time.time()
    storage = get_storage()
    try:
        storage.settings.find(DEMO_ACCOUNT_ID)
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"backend": storage.backend},
        }
    except StorageError:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Storage health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Storage error",
            "details": {"backend": storage.backend},
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: storage reachable
    - 503: storage unhealthy
    """
    start_time = time.time()
    storage_health = check_storage_health()

    healthy = storage_health["status"] == "healthy"
    response = {
        "status": "healthy" if healthy else "unhealthy",
        "demo_mode": bool(current_app.config.get("DEMO_MODE")),
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": {"storage": storage_health},
    }
    return response, 200 if healthy else 503


@system_bp.get("/health/version")
def version():
    """Non-sensitive deployment info."""
    return {
        "api_version": API_VERSION,
        "environment": "development" if current_app.debug else "production",
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }
