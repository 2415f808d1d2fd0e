# Overview: Service-layer operations for products and stock lookups.

from __future__ import annotations

from ..validation import DocumentPolicy, as_amount, as_non_negative_int, as_text
from . import records

PRODUCTS = "products"

# Products at or below this quantity (but above zero) count as low stock
LOW_STOCK_THRESHOLD = 5

PRODUCT_POLICY = DocumentPolicy(
    fields={
        "name": as_text,
        "sku": as_text,
        "price": as_amount,
        "stock": as_non_negative_int,
        "description": as_text,
    },
    required_on_create=frozenset({"name", "price"}),
)


def add_product(payload: dict) -> dict:
    return records.create_record(PRODUCTS, payload, policy=PRODUCT_POLICY, defaults={"stock": 0})


def list_products() -> list[dict]:
    return records.list_records(PRODUCTS, order_by="name")


def get_product(product_id: str) -> dict:
    return records.get_record(PRODUCTS, product_id)


def get_product_by_sku(sku: str) -> dict | None:
    """First product with the given SKU, or None."""
    sku = (sku or "").strip()
    if not sku:
        return None
    matches = records.list_records(PRODUCTS, filters=[("sku", "==", sku)])
    return matches[0] if matches else None


def update_product(product_id: str, payload: dict) -> dict:
    return records.update_record(PRODUCTS, product_id, payload, policy=PRODUCT_POLICY)


def delete_product(product_id: str) -> None:
    records.delete_record(PRODUCTS, product_id)
