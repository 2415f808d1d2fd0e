# Overview: Flask API routes for staff users; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..services import user_service
from ..services.document_store import DocumentNotFoundError
from ..validation import ConflictError, ValidationError

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
def list_users_route():
    return jsonify(user_service.list_users()), 200


@users_bp.post("")
def create_user_route():
    """
    Create a user profile. An optional "id" (the identity provider uid)
    becomes the document id.
    """
    payload = request.get_json(silent=True) or {}
    user_id = payload.pop("id", None)
    try:
        created = user_service.add_user(payload, user_id=user_id)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return {"error": str(e)}, 409
    except Exception:
        current_app.logger.exception("Failed to create user")
        return {"error": "Internal server error"}, 500
    return created, 201


@users_bp.get("/<user_id>")
def get_user_route(user_id: str):
    try:
        return user_service.get_user(user_id), 200
    except DocumentNotFoundError:
        return {"error": "User not found"}, 404


@users_bp.put("/<user_id>")
def update_user_route(user_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        updated = user_service.update_user(user_id, payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except DocumentNotFoundError:
        return {"error": "User not found"}, 404
    return updated, 200


@users_bp.delete("/<user_id>")
def delete_user_route(user_id: str):
    try:
        user_service.delete_user(user_id)
    except DocumentNotFoundError:
        return {"error": "User not found"}, 404
    return {"ok": True}, 200
