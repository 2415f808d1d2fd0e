# backend/donphone/routes/system.py
"""
System health and version endpoints.
"""

import time
from importlib.metadata import PackageNotFoundError, version as package_version

from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db
from ..models import Document
from ..services import sequence_service
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    """
    Check database connectivity, count stored documents per collection and
    report the last issued number of every sequence.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        rows = (
            db.session.query(Document.collection, db.func.count(Document.id))
            .group_by(Document.collection)
            .all()
        )
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {collection: count for collection, count in rows},
            "sequences": {
                name: sequence_service.current_value(name)
                for name in current_app.config.get("SEQUENCES", {})
            },
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable
    - 503: database unhealthy
    """
    database_health = check_database_health()
    http_status = 200 if database_health["status"] == "healthy" else 503
    return {
        "status": database_health["status"],
        "timestamp": to_utc_z(utcnow()),
        "checks": {"database": database_health},
    }, http_status


@system_bp.get("/version")
def version():
    try:
        app_version = package_version("donphone")
    except PackageNotFoundError:
        app_version = "unknown"
    return {"name": "donphone", "version": app_version}, 200
