# Overview: Flask API route for AI repair suggestions.

from flask import Blueprint, current_app, jsonify, request

from ..services import diagnostics_service
from ..validation import ValidationError

diagnostics_bp = Blueprint("diagnostics", __name__, url_prefix="/api/diagnostics")


@diagnostics_bp.post("/suggest")
def suggest_route():
    """Body: {"phoneModel": str, "problemDescription": str}"""
    data = request.get_json(silent=True) or {}
    try:
        result = diagnostics_service.suggest_repair_solutions(
            phone_model=data.get("phoneModel"),
            problem_description=data.get("problemDescription"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except diagnostics_service.DiagnosticsUnavailable as e:
        return jsonify({"error": str(e)}), 503
    except diagnostics_service.DiagnosticsError as e:
        current_app.logger.error("AI diagnostics failed: %s", e)
        return jsonify({"error": "Could not get repair suggestions. Try again later."}), 502
    return jsonify(result), 200
