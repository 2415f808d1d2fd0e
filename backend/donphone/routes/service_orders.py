# Overview: Flask API routes for service orders; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..services import service_order_service
from ..services.sequence_service import SequenceUnavailable
from ..time_utils import parse_iso_datetime
from ..validation import NotFoundError, ValidationError


service_orders_bp = Blueprint("service_orders", __name__, url_prefix="/api/service-orders")


@service_orders_bp.post("")
def create_service_order_route():
    """
    Open a service order. 503 when no OS number could be issued; nothing is
    stored in that case.
    """
    payload = request.get_json(silent=True) or {}
    try:
        order = service_order_service.add_service_order(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except SequenceUnavailable as e:
        current_app.logger.error("Service order rejected: %s", e)
        return jsonify({"error": "Could not generate the service order number. Try again."}), 503
    except Exception:
        current_app.logger.exception("Failed to create service order")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(order), 201


@service_orders_bp.get("")
def list_service_orders_route():
    """
    Query params (optional, together): start, end, status.
    Without a range every order is returned, newest number first.
    """
    start_raw = request.args.get("start")
    end_raw = request.args.get("end")
    if not start_raw and not end_raw:
        return jsonify(service_order_service.list_service_orders()), 200

    try:
        start = parse_iso_datetime(start_raw)
        end = parse_iso_datetime(end_raw)
    except ValueError:
        return jsonify({"error": "start and end must be ISO-8601 dates"}), 400
    if start is None or end is None:
        return jsonify({"error": "start and end are required together"}), 400

    orders = service_order_service.get_service_orders_by_date_range(
        start,
        end,
        status=request.args.get("status"),
    )
    return jsonify(orders), 200


@service_orders_bp.get("/stats")
def service_order_stats_route():
    return jsonify({
        "openCount": service_order_service.count_open_service_orders(),
        "completedRevenue": service_order_service.get_completed_service_orders_revenue(),
    }), 200


@service_orders_bp.get("/<order_id>")
def get_service_order_route(order_id: str):
    try:
        return jsonify(service_order_service.get_service_order(order_id)), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@service_orders_bp.put("/<order_id>")
def update_service_order_route(order_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        order = service_order_service.update_service_order(order_id, payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(order), 200


@service_orders_bp.delete("/<order_id>")
def delete_service_order_route(order_id: str):
    try:
        service_order_service.delete_service_order(order_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"ok": True}), 200
