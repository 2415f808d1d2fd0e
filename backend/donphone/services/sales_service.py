# Overview: Service-layer operations for counter sales; numbering comes from the sale sequence.

"""
Sales

A sale is created in one step: the sale number is issued first and the sale
document is only written once a number exists. If the sequence cannot issue
a number, SequenceUnavailable propagates and nothing is stored.

Sales are never deleted. Cancelling keeps the document with status
Cancelada so the number stays accounted for.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..time_utils import end_of_day, ensure_utc, utcnow
from ..validation import ConflictError, ValidationError, as_amount, as_non_negative_int, as_text
from . import document_store, sequence_service

logger = logging.getLogger(__name__)

SALES = "sales"

STATUS_COMPLETED = "Concluída"
STATUS_CANCELLED = "Cancelada"

PAYMENT_METHODS = (
    "Dinheiro",
    "Cartão de Crédito",
    "Cartão de Débito",
    "PIX",
)


def _validate_items(items: Any) -> list[dict]:
    if not isinstance(items, list) or not items:
        raise ValidationError("A sale needs at least one item")

    cleaned: list[dict] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{i}] must be an object")
        name = as_text(f"items[{i}].name", item.get("name"))
        if not name:
            raise ValidationError(f"items[{i}].name is required")
        quantity = as_non_negative_int(f"items[{i}].quantity", item.get("quantity"))
        if not quantity:
            raise ValidationError(f"items[{i}].quantity must be at least 1")
        price = as_amount(f"items[{i}].price", item.get("price"))
        if price is None:
            raise ValidationError(f"items[{i}].price is required")
        cleaned.append({"name": name, "quantity": quantity, "price": price})
    return cleaned


def calculate_total(items: list[dict]) -> float:
    return round(sum(item["quantity"] * item["price"] for item in items), 2)


def add_sale(*, items: Any, payment_method: str, client_name: str | None = None) -> dict:
    """
    Register a completed sale and return it with its id and saleNumber.

    Raises ValidationError for bad input and SequenceUnavailable when no
    sale number could be issued.
    """
    cleaned = _validate_items(items)
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"paymentMethod must be one of: {', '.join(PAYMENT_METHODS)}")
    client_name = as_text("clientName", client_name) or None

    sale_number = sequence_service.next_value(sequence_service.SALE)

    now = utcnow()
    sale = {
        "saleNumber": sale_number,
        "items": cleaned,
        "totalAmount": calculate_total(cleaned),
        "paymentMethod": payment_method,
        "clientName": client_name,
        "status": STATUS_COMPLETED,
        "createdAt": now,
        "updatedAt": now,
    }
    sale_id = document_store.add_document(SALES, sale)
    logger.info("Sale #%d registered (%.2f, %s)", sale_number, sale["totalAmount"], payment_method)
    return {"id": sale_id, **sale}


def list_sales() -> list[dict]:
    return document_store.query_documents(SALES, order_by="saleNumber", descending=True)


def get_sale(sale_id: str) -> dict:
    return document_store.require_document(SALES, sale_id).to_dict()


def cancel_sale(sale_id: str, reason: str) -> dict:
    reason = as_text("reason", reason)
    if not reason:
        raise ValidationError("A cancellation reason is required")

    doc = document_store.require_document(SALES, sale_id)
    if (doc.data or {}).get("status") == STATUS_CANCELLED:
        raise ConflictError(f"Sale {sale_id} is already cancelled")

    now = utcnow()
    doc = document_store.update_document(SALES, sale_id, {
        "status": STATUS_CANCELLED,
        "cancellationReason": reason,
        "cancelledAt": now,
        "updatedAt": now,
    })
    logger.info("Sale #%s cancelled", doc.data.get("saleNumber"))
    return doc.to_dict()


def get_sales_by_date_range(start: datetime, end: datetime) -> list[dict]:
    """Sales created from start through the end of end's day, newest first."""
    return document_store.query_documents(
        SALES,
        filters=[
            ("createdAt", ">=", ensure_utc(start)),
            ("createdAt", "<=", end_of_day(ensure_utc(end))),
        ],
        order_by="createdAt",
        descending=True,
    )


def get_total_sales_revenue() -> float:
    completed = document_store.query_documents(SALES, filters=[("status", "==", STATUS_COMPLETED)])
    return round(sum(float(sale.get("totalAmount") or 0) for sale in completed), 2)
