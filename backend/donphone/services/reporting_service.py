# Overview: Service-layer reports and dashboard figures built from sales, service orders, expenses and products.

from __future__ import annotations

from datetime import datetime

from ..time_utils import ensure_utc, parse_iso_datetime, to_utc_z
from . import (
    client_service,
    expense_service,
    product_service,
    sales_service,
    service_order_service,
)

ALL = "Todos"

STOCK_FILTERS = ("all", "low", "zero")


class ReportError(Exception):
    """Raised when report parameters are invalid."""
    pass


def _parse_range(start: str | datetime | None, end: str | datetime | None) -> tuple[datetime, datetime]:
    try:
        start_dt = parse_iso_datetime(start) if isinstance(start, str) else start
        end_dt = parse_iso_datetime(end) if isinstance(end, str) else end
    except ValueError:
        raise ReportError("start and end must be ISO-8601 dates")
    if start_dt is None or end_dt is None:
        raise ReportError("Select a date range (start and end)")
    start_dt, end_dt = ensure_utc(start_dt), ensure_utc(end_dt)
    if start_dt > end_dt:
        raise ReportError("start must not be after end")
    return start_dt, end_dt


def _sum(rows: list[dict], field: str) -> float:
    return round(sum(float(row.get(field) or 0) for row in rows), 2)


def sales_report(*, start, end, payment_method: str | None = None) -> dict:
    start_dt, end_dt = _parse_range(start, end)
    sales = sales_service.get_sales_by_date_range(start_dt, end_dt)
    if payment_method and payment_method != ALL:
        if payment_method not in sales_service.PAYMENT_METHODS:
            raise ReportError(f"Unknown payment method: {payment_method}")
        sales = [s for s in sales if s.get("paymentMethod") == payment_method]

    completed = [s for s in sales if s.get("status") == sales_service.STATUS_COMPLETED]
    return {
        "start": to_utc_z(start_dt),
        "end": to_utc_z(end_dt),
        "paymentMethod": payment_method or ALL,
        "rows": sales,
        "count": len(sales),
        "totalAmount": _sum(completed, "totalAmount"),
    }


def service_order_report(*, start, end, status: str | None = None, technician: str | None = None) -> dict:
    start_dt, end_dt = _parse_range(start, end)
    if status and status != ALL and status not in service_order_service.SERVICE_ORDER_STATUSES:
        raise ReportError(f"Unknown service order status: {status}")

    orders = service_order_service.get_service_orders_by_date_range(
        start_dt,
        end_dt,
        status=None if status == ALL else status,
    )
    if technician and technician != ALL:
        orders = [o for o in orders if o.get("responsibleTechnicianName") == technician]

    return {
        "start": to_utc_z(start_dt),
        "end": to_utc_z(end_dt),
        "status": status or ALL,
        "technician": technician or ALL,
        "rows": orders,
        "count": len(orders),
        "totalValue": _sum(orders, "grandTotalValue"),
    }


def financial_report(*, start, end) -> dict:
    """Completed sales against paid expenses in the period."""
    start_dt, end_dt = _parse_range(start, end)
    sales = [
        s for s in sales_service.get_sales_by_date_range(start_dt, end_dt)
        if s.get("status") == sales_service.STATUS_COMPLETED
    ]
    expenses = [
        e for e in expense_service.get_expenses_by_date_range(start_dt, end_dt)
        if e.get("status") == expense_service.STATUS_PAID
    ]
    total_sales = _sum(sales, "totalAmount")
    total_expenses = _sum(expenses, "amount")
    return {
        "start": to_utc_z(start_dt),
        "end": to_utc_z(end_dt),
        "sales": sales,
        "expenses": expenses,
        "totalSales": total_sales,
        "totalExpenses": total_expenses,
        "grossProfit": round(total_sales - total_expenses, 2),
    }


def inventory_report(*, stock_filter: str = "all") -> dict:
    if stock_filter not in STOCK_FILTERS:
        raise ReportError(f"stock_filter must be one of: {', '.join(STOCK_FILTERS)}")

    products = product_service.list_products()
    if stock_filter == "low":
        products = [
            p for p in products
            if 0 < int(p.get("stock") or 0) <= product_service.LOW_STOCK_THRESHOLD
        ]
    elif stock_filter == "zero":
        products = [p for p in products if int(p.get("stock") or 0) == 0]

    rows = []
    total_value = 0.0
    for product in products:
        stock = int(product.get("stock") or 0)
        value = round(stock * float(product.get("price") or 0), 2)
        total_value += value
        rows.append({**product, "stockValue": value})

    return {
        "stockFilter": stock_filter,
        "rows": rows,
        "count": len(rows),
        "totalStockValue": round(total_value, 2),
    }


def dashboard_summary() -> dict:
    sales_revenue = sales_service.get_total_sales_revenue()
    service_revenue = service_order_service.get_completed_service_orders_revenue()
    return {
        "salesRevenue": sales_revenue,
        "serviceOrdersRevenue": service_revenue,
        "totalRevenue": round(sales_revenue + service_revenue, 2),
        "clientCount": len(client_service.list_clients()),
        "openServiceOrders": service_order_service.count_open_service_orders(),
    }
