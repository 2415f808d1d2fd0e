# Overview: Flask API routes for establishment settings.

from flask import Blueprint, current_app, jsonify, request

from ..services import settings_service
from ..validation import ValidationError

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("/establishment")
def get_establishment_route():
    settings = settings_service.get_establishment_settings()
    if settings is None:
        return jsonify({"error": "Establishment settings not configured"}), 404
    return jsonify(settings), 200


@settings_bp.put("/establishment")
def save_establishment_route():
    payload = request.get_json(silent=True) or {}
    try:
        saved = settings_service.save_establishment_settings(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to save establishment settings")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(saved), 200
