# backend/flouz/routes/system.py
"""
System health endpoint.

Liveness probe for deployments; no authentication.
"""

import time

from flask import Blueprint, current_app

from ..storage import get_storage
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_storage_health() -> dict:
    """Run one cheap read against the configured storage backend."""
    start_time = time.time()
    try:
        account_count = len(get_storage().list_accounts())
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "backend": current_app.config["STORAGE_BACKEND"],
                "accounts": account_count,
            },
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Storage health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Storage error",
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: storage reachable
    - 503: storage unhealthy
    """
    storage_health = check_storage_health()
    http_status = 200 if storage_health["status"] == "healthy" else 503

    return {
        "status": storage_health["status"],
        "timestamp": to_utc_z(utcnow()),
        "checks": {"storage": storage_health},
    }, http_status
