# Overview: Service-layer operations for providers (suppliers).

from __future__ import annotations

from ..validation import DocumentPolicy, as_email, as_text
from . import records

PROVIDERS = "providers"

PROVIDER_POLICY = DocumentPolicy(
    fields={
        "name": as_text,
        "cnpj": as_text,
        "contactPerson": as_text,
        "phone": as_text,
        "email": as_email,
        "address": as_text,
    },
    required_on_create=frozenset({"name"}),
)


def add_provider(payload: dict) -> dict:
    return records.create_record(PROVIDERS, payload, policy=PROVIDER_POLICY)


def list_providers() -> list[dict]:
    return records.list_records(PROVIDERS, order_by="name")


def get_provider(provider_id: str) -> dict:
    return records.get_record(PROVIDERS, provider_id)


def update_provider(provider_id: str, payload: dict) -> dict:
    return records.update_record(PROVIDERS, provider_id, payload, policy=PROVIDER_POLICY)


def delete_provider(provider_id: str) -> None:
    records.delete_record(PROVIDERS, provider_id)
