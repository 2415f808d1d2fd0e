# Overview: Flask API routes for clients; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..services import client_service
from ..validation import NotFoundError, ValidationError

clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@clients_bp.get("")
def list_clients_route():
    """All clients ordered by name."""
    return jsonify(client_service.list_clients()), 200


@clients_bp.post("")
def create_client_route():
    payload = request.get_json(silent=True) or {}
    try:
        created = client_service.add_client(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to create client")
        return {"error": "Internal server error"}, 500
    return created, 201


@clients_bp.get("/<doc_id>")
def get_client_route(doc_id: str):
    try:
        return client_service.get_client(doc_id), 200
    except NotFoundError as e:
        return {"error": str(e)}, 404


@clients_bp.put("/<doc_id>")
def update_client_route(doc_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        updated = client_service.update_client(doc_id, payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to update client")
        return {"error": "Internal server error"}, 500
    return updated, 200


@clients_bp.delete("/<doc_id>")
def delete_client_route(doc_id: str):
    """
    Delete a client. Sales and service orders keep the client name they were
    created with, so nothing else is touched.
    """
    try:
        client_service.delete_client(doc_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return {"ok": True}, 200
