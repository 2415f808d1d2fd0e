# Overview: Flask API routes for sales; parses input and returns JSON responses.

# backend/donphone/routes/sales.py
"""Sales API routes"""

from flask import Blueprint, current_app, jsonify, request

from ..services import sales_service
from ..services.sequence_service import SequenceUnavailable
from ..time_utils import parse_iso_datetime
from ..validation import ConflictError, NotFoundError, ValidationError


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _date_range_args():
    start = parse_iso_datetime(request.args.get("start"))
    end = parse_iso_datetime(request.args.get("end"))
    if start is None or end is None:
        raise ValidationError("start and end are required")
    return start, end


@sales_bp.post("")
def create_sale_route():
    """
    Register a sale.

    Body: {"items": [{"name", "quantity", "price"}], "paymentMethod", "clientName"}

    503 when no sale number could be issued; the sale is not stored.
    """
    data = request.get_json(silent=True) or {}
    try:
        sale = sales_service.add_sale(
            items=data.get("items"),
            payment_method=data.get("paymentMethod"),
            client_name=data.get("clientName"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except SequenceUnavailable as e:
        current_app.logger.error("Sale rejected: %s", e)
        return jsonify({"error": "Could not generate the sale number. Try again."}), 503
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"sale": sale}), 201


@sales_bp.get("")
def list_sales_route():
    return jsonify(sales_service.list_sales()), 200


@sales_bp.get("/by-date")
def sales_by_date_route():
    try:
        start, end = _date_range_args()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(sales_service.get_sales_by_date_range(start, end)), 200


@sales_bp.get("/revenue")
def sales_revenue_route():
    return jsonify({"totalRevenue": sales_service.get_total_sales_revenue()}), 200


@sales_bp.get("/<sale_id>")
def get_sale_route(sale_id: str):
    try:
        return jsonify({"sale": sales_service.get_sale(sale_id)}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@sales_bp.post("/<sale_id>/cancel")
def cancel_sale_route(sale_id: str):
    data = request.get_json(silent=True) or {}
    try:
        sale = sales_service.cancel_sale(sale_id, data.get("reason"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"sale": sale}), 200
