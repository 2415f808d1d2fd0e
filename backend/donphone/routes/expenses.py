# Overview: Flask API routes for expenses; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from ..services import expense_service
from ..time_utils import parse_iso_datetime
from ..validation import NotFoundError, ValidationError

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.get("")
def list_expenses_route():
    """
    Query params:
    - month: int 1-12 (optional)
    - year: int (optional, defaults to the current year when month is given)
    - category: category name or "all"
    - status: Pendente | Pago | all
    """
    try:
        expenses = expense_service.list_expenses(
            month=request.args.get("month", type=int),
            year=request.args.get("year", type=int),
            category=request.args.get("category"),
            status=request.args.get("status"),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    return jsonify(expenses), 200


@expenses_bp.get("/categories")
def list_categories_route():
    return jsonify(list(expense_service.EXPENSE_CATEGORIES)), 200


@expenses_bp.post("")
def create_expense_route():
    payload = request.get_json(silent=True) or {}
    try:
        created = expense_service.add_expense(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to create expense")
        return {"error": "Internal server error"}, 500
    return created, 201


@expenses_bp.get("/<expense_id>")
def get_expense_route(expense_id: str):
    try:
        return expense_service.get_expense(expense_id), 200
    except NotFoundError as e:
        return {"error": str(e)}, 404


@expenses_bp.put("/<expense_id>")
def update_expense_route(expense_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        updated = expense_service.update_expense(expense_id, payload)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return updated, 200


@expenses_bp.post("/<expense_id>/toggle-status")
def toggle_expense_status_route(expense_id: str):
    data = request.get_json(silent=True) or {}
    try:
        payment_date = parse_iso_datetime(data.get("paymentDate")) if data.get("paymentDate") else None
    except ValueError:
        return {"error": "paymentDate must be an ISO-8601 datetime"}, 400

    try:
        updated = expense_service.toggle_expense_status(expense_id, payment_date)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return updated, 200


@expenses_bp.delete("/<expense_id>")
def delete_expense_route(expense_id: str):
    try:
        expense_service.delete_expense(expense_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return {"ok": True}, 200
