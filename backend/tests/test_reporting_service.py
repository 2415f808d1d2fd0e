from datetime import datetime, timezone

import pytest

from donphone.services import (
    client_service,
    document_store,
    expense_service,
    product_service,
    reporting_service,
    sales_service,
    service_order_service,
)
from donphone.services.reporting_service import ReportError

MARCH = datetime(2024, 3, 15, 10, tzinfo=timezone.utc)


def _sale(doc_id, amount, method="PIX", status="Concluída", created=MARCH):
    document_store.add_document("sales", {
        "saleNumber": 150,
        "totalAmount": amount,
        "paymentMethod": method,
        "status": status,
        "createdAt": created,
    }, doc_id=doc_id)


def test_sales_report_filters_by_payment_method(db_session):
    _sale("a", 100.0)
    _sale("b", 50.0, method="Dinheiro")
    _sale("c", 20.0, status="Cancelada")

    report = reporting_service.sales_report(start="2024-03-01", end="2024-03-31")
    assert report["count"] == 3
    assert report["totalAmount"] == 150.0

    pix = reporting_service.sales_report(start="2024-03-01", end="2024-03-31", payment_method="PIX")
    assert {s["id"] for s in pix["rows"]} == {"a", "c"}
    assert pix["totalAmount"] == 100.0


def test_range_is_required_and_ordered(db_session):
    with pytest.raises(ReportError):
        reporting_service.sales_report(start=None, end="2024-03-31")
    with pytest.raises(ReportError):
        reporting_service.financial_report(start="2024-04-01", end="2024-03-01")
    with pytest.raises(ReportError):
        reporting_service.sales_report(start="ontem", end="hoje")


def test_service_order_report_by_technician(db_session):
    for doc_id, tech, total in [("a", "Rafa", 100.0), ("b", "Lia", 80.0), ("c", "Rafa", 20.0)]:
        document_store.add_document("serviceOrders", {
            "status": "Aberta",
            "responsibleTechnicianName": tech,
            "grandTotalValue": total,
            "openingDate": MARCH,
        }, doc_id=doc_id)

    report = reporting_service.service_order_report(
        start="2024-03-01", end="2024-03-31", status="Todos", technician="Rafa",
    )

    assert report["count"] == 2
    assert report["totalValue"] == 120.0

    with pytest.raises(ReportError):
        reporting_service.service_order_report(start="2024-03-01", end="2024-03-31", status="Perdida")


def test_financial_report_balances_completed_sales_and_paid_expenses(db_session):
    _sale("a", 500.0)
    _sale("b", 70.0, status="Cancelada")
    expense_service.add_expense({
        "description": "Energia", "amount": 120, "category": "Energia",
        "dueDate": "2024-03-10", "status": "Pago",
    })
    expense_service.add_expense({
        "description": "Internet", "amount": 99, "category": "Internet", "dueDate": "2024-03-12",
    })

    report = reporting_service.financial_report(start="2024-03-01", end="2024-03-31")

    assert report["totalSales"] == 500.0
    assert report["totalExpenses"] == 120.0
    assert report["grossProfit"] == 380.0
    assert [e["description"] for e in report["expenses"]] == ["Energia"]


def test_inventory_report_stock_filters(db_session):
    product_service.add_product({"name": "Sem estoque", "price": 10, "stock": 0})
    product_service.add_product({"name": "Pouco", "price": 10, "stock": 5})
    product_service.add_product({"name": "Muito", "price": 2.5, "stock": 40})

    everything = reporting_service.inventory_report()
    assert everything["count"] == 3
    assert everything["totalStockValue"] == 150.0

    assert [p["name"] for p in reporting_service.inventory_report(stock_filter="low")["rows"]] == ["Pouco"]
    assert [p["name"] for p in reporting_service.inventory_report(stock_filter="zero")["rows"]] == ["Sem estoque"]

    with pytest.raises(ReportError):
        reporting_service.inventory_report(stock_filter="high")


def test_dashboard_summary(db_session):
    client_service.add_client({"name": "Ana"})
    sales_service.add_sale(items=[{"name": "Capa", "quantity": 1, "price": 30}], payment_method="PIX")
    service_order_service.add_service_order({
        "clientName": "Ana",
        "deviceBrandModel": "iPhone 11",
        "problemReportedByClient": "Bateria",
        "serviceManualValue": 200,
        "status": "Entregue",
    })
    service_order_service.add_service_order({
        "clientName": "Ana",
        "deviceBrandModel": "iPhone 12",
        "problemReportedByClient": "Tela",
    })

    summary = reporting_service.dashboard_summary()

    assert summary == {
        "salesRevenue": 30.0,
        "serviceOrdersRevenue": 200.0,
        "totalRevenue": 230.0,
        "clientCount": 1,
        "openServiceOrders": 1,
    }
