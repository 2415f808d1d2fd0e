# Overview: Service-layer operations for repair service orders (OS).

"""
Service orders

An OS is opened with the next number of the service-order sequence. As with
sales, the number is issued before anything is written; when the sequence
is unavailable the order is not created.

grandTotalValue is always derived from serviceManualValue plus the totals of
additionalSoldProducts.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..time_utils import end_of_day, ensure_utc, utcnow
from ..validation import (
    DocumentPolicy,
    ValidationError,
    as_amount,
    as_datetime,
    as_email,
    as_non_negative_int,
    as_text,
    list_of,
    one_of,
    validate_document,
)
from . import document_store, sequence_service

logger = logging.getLogger(__name__)

SERVICE_ORDERS = "serviceOrders"

STATUS_OPEN = "Aberta"
STATUS_IN_PROGRESS = "Em andamento"
STATUS_WAITING_PART = "Aguardando peça"
STATUS_COMPLETED = "Concluída"
STATUS_DELIVERED = "Entregue"
STATUS_CANCELLED = "Cancelada"

SERVICE_ORDER_STATUSES = (
    STATUS_OPEN,
    STATUS_IN_PROGRESS,
    STATUS_WAITING_PART,
    STATUS_COMPLETED,
    STATUS_DELIVERED,
    STATUS_CANCELLED,
)
OPEN_STATUSES = (STATUS_OPEN, STATUS_IN_PROGRESS, STATUS_WAITING_PART)
REVENUE_STATUSES = (STATUS_COMPLETED, STATUS_DELIVERED)

DEVICE_TYPES = ("Celular", "Notebook", "Tablet", "Placa", "Outro")


def _sold_product(key: str, value: Any) -> dict:
    if not isinstance(value, dict):
        raise ValidationError(f"{key} must be an object")
    name = as_text(f"{key}.name", value.get("name"))
    if not name:
        raise ValidationError(f"{key}.name is required")
    quantity = as_non_negative_int(f"{key}.quantity", value.get("quantity"))
    if not quantity:
        raise ValidationError(f"{key}.quantity must be at least 1")
    unit_price = as_amount(f"{key}.unitPrice", value.get("unitPrice")) or 0.0
    return {
        "name": name,
        "quantity": quantity,
        "unitPrice": unit_price,
        "totalPrice": round(quantity * unit_price, 2),
    }


SERVICE_ORDER_POLICY = DocumentPolicy(
    fields={
        "deliveryForecastDate": as_datetime,
        "status": one_of(*SERVICE_ORDER_STATUSES),
        "responsibleTechnicianName": as_text,
        "clientName": as_text,
        "clientCpfCnpj": as_text,
        "clientPhone": as_text,
        "clientEmail": as_email,
        "deviceType": one_of(*DEVICE_TYPES),
        "deviceBrandModel": as_text,
        "deviceImeiSerial": as_text,
        "deviceColor": as_text,
        "deviceAccessories": as_text,
        "problemReportedByClient": as_text,
        "technicalDiagnosis": as_text,
        "internalObservations": as_text,
        "servicesPerformedDescription": as_text,
        "partsUsedDescription": as_text,
        "serviceManualValue": as_amount,
        "additionalSoldProducts": list_of(_sold_product),
    },
    required_on_create=frozenset({"clientName", "deviceBrandModel", "problemReportedByClient"}),
)


def calculate_grand_total(order: dict) -> float:
    products = order.get("additionalSoldProducts") or []
    service_value = float(order.get("serviceManualValue") or 0)
    return round(service_value + sum(float(p.get("totalPrice") or 0) for p in products), 2)


def add_service_order(payload: dict) -> dict:
    """
    Open a service order and return it with its id and osNumber.

    Raises ValidationError for bad input and SequenceUnavailable when no OS
    number could be issued.
    """
    data = {
        "status": STATUS_OPEN,
        "serviceManualValue": 0.0,
        "additionalSoldProducts": [],
        **validate_document(payload, policy=SERVICE_ORDER_POLICY, partial=False),
    }
    data["grandTotalValue"] = calculate_grand_total(data)

    os_number = sequence_service.next_value(sequence_service.SERVICE_ORDER)

    now = utcnow()
    data["osNumber"] = os_number
    data["openingDate"] = now
    data["updatedAt"] = now
    order_id = document_store.add_document(SERVICE_ORDERS, data)
    logger.info("Service order #%d opened for %s", os_number, data["clientName"])
    return {"id": order_id, **data}


def list_service_orders() -> list[dict]:
    return document_store.query_documents(SERVICE_ORDERS, order_by="osNumber", descending=True)


def get_service_order(order_id: str) -> dict:
    return document_store.require_document(SERVICE_ORDERS, order_id).to_dict()


def update_service_order(order_id: str, payload: dict) -> dict:
    patch = validate_document(payload, policy=SERVICE_ORDER_POLICY, partial=True)
    current = document_store.require_document(SERVICE_ORDERS, order_id).data or {}
    patch["grandTotalValue"] = calculate_grand_total({**current, **patch})
    patch["updatedAt"] = utcnow()
    doc = document_store.update_document(SERVICE_ORDERS, order_id, patch)
    return doc.to_dict()


def delete_service_order(order_id: str) -> None:
    if not document_store.delete_document(SERVICE_ORDERS, order_id):
        raise document_store.DocumentNotFoundError(SERVICE_ORDERS, order_id)


def get_service_orders_by_date_range(
    start: datetime,
    end: datetime,
    *,
    status: str | None = None,
) -> list[dict]:
    """Orders opened from start through the end of end's day, newest first."""
    filters = [
        ("openingDate", ">=", ensure_utc(start)),
        ("openingDate", "<=", end_of_day(ensure_utc(end))),
    ]
    if status and status != "all":
        filters.append(("status", "==", status))
    return document_store.query_documents(
        SERVICE_ORDERS,
        filters=filters,
        order_by="openingDate",
        descending=True,
    )


def count_open_service_orders() -> int:
    return document_store.count_documents(SERVICE_ORDERS, filters=[("status", "in", OPEN_STATUSES)])


def get_completed_service_orders_revenue() -> float:
    orders = document_store.query_documents(SERVICE_ORDERS, filters=[("status", "in", REVENUE_STATUSES)])
    return round(sum(float(o.get("grandTotalValue") or 0) for o in orders), 2)
