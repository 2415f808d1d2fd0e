# Overview: Flask API routes for providers; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..services import provider_service
from ..validation import NotFoundError, ValidationError

providers_bp = Blueprint("providers", __name__, url_prefix="/api/providers")


@providers_bp.get("")
def list_providers_route():
    return jsonify(provider_service.list_providers()), 200


@providers_bp.post("")
def create_provider_route():
    payload = request.get_json(silent=True) or {}
    try:
        created = provider_service.add_provider(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to create provider")
        return {"error": "Internal server error"}, 500
    return created, 201


@providers_bp.get("/<doc_id>")
def get_provider_route(doc_id: str):
    try:
        return provider_service.get_provider(doc_id), 200
    except NotFoundError as e:
        return {"error": str(e)}, 404


@providers_bp.put("/<doc_id>")
def update_provider_route(doc_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        updated = provider_service.update_provider(doc_id, payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to update provider")
        return {"error": "Internal server error"}, 500
    return updated, 200


@providers_bp.delete("/<doc_id>")
def delete_provider_route(doc_id: str):
    try:
        provider_service.delete_provider(doc_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return {"ok": True}, 200
