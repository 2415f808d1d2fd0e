# Overview: Service-layer operations for clients.

from __future__ import annotations

from ..validation import DocumentPolicy, as_email, as_text
from . import records

CLIENTS = "clients"

CLIENT_POLICY = DocumentPolicy(
    fields={
        "name": as_text,
        "email": as_email,
        "phone": as_text,
        "cpfCnpj": as_text,
        "address": as_text,
        "notes": as_text,
    },
    required_on_create=frozenset({"name"}),
)


def add_client(payload: dict) -> dict:
    return records.create_record(CLIENTS, payload, policy=CLIENT_POLICY)


def list_clients() -> list[dict]:
    return records.list_records(CLIENTS, order_by="name")


def get_client(client_id: str) -> dict:
    return records.get_record(CLIENTS, client_id)


def update_client(client_id: str, payload: dict) -> dict:
    return records.update_record(CLIENTS, client_id, payload, policy=CLIENT_POLICY)


def delete_client(client_id: str) -> None:
    records.delete_record(CLIENTS, client_id)
