# Overview: Flask API routes for reports and the dashboard summary.

from flask import Blueprint, jsonify, request

from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/sales")
def sales_report():
    try:
        report = reporting_service.sales_report(
            start=request.args.get("start"),
            end=request.args.get("end"),
            payment_method=request.args.get("payment_method"),
        )
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400


@reports_bp.get("/service-orders")
def service_order_report():
    try:
        report = reporting_service.service_order_report(
            start=request.args.get("start"),
            end=request.args.get("end"),
            status=request.args.get("status"),
            technician=request.args.get("technician"),
        )
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400


@reports_bp.get("/financial")
def financial_report():
    try:
        report = reporting_service.financial_report(
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400


@reports_bp.get("/inventory")
def inventory_report():
    try:
        report = reporting_service.inventory_report(
            stock_filter=request.args.get("stock", "all"),
        )
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400


@reports_bp.get("/dashboard")
def dashboard():
    return jsonify(reporting_service.dashboard_summary()), 200
