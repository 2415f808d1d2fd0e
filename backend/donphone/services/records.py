# Overview: Shared create/read/update/delete for registry-style collections.

"""
Record helpers

Clients, products, providers, expenses and users are plain documents with
createdAt/updatedAt stamps. Each area service declares a DocumentPolicy and
delegates the persistence work here.
"""

from __future__ import annotations

from typing import Any

from ..time_utils import utcnow
from ..validation import DocumentPolicy, validate_document
from . import document_store


def create_record(
    collection: str,
    payload: Any,
    *,
    policy: DocumentPolicy,
    doc_id: str | None = None,
    defaults: dict | None = None,
) -> dict:
    """Validate payload, stamp timestamps and store a new document."""
    data = {**(defaults or {}), **validate_document(payload, policy=policy, partial=False)}
    now = utcnow()
    data["createdAt"] = now
    data["updatedAt"] = now
    new_id = document_store.add_document(collection, data, doc_id=doc_id)
    return {"id": new_id, **data}


def update_record(collection: str, doc_id: str, payload: Any, *, policy: DocumentPolicy) -> dict:
    """Validate a partial payload and merge it into an existing document."""
    patch = validate_document(payload, policy=policy, partial=True)
    patch["updatedAt"] = utcnow()
    doc = document_store.update_document(collection, doc_id, patch)
    return doc.to_dict()


def get_record(collection: str, doc_id: str) -> dict:
    return document_store.require_document(collection, doc_id).to_dict()


def delete_record(collection: str, doc_id: str) -> None:
    if not document_store.delete_document(collection, doc_id):
        raise document_store.DocumentNotFoundError(collection, doc_id)


def list_records(collection: str, *, order_by: str | None = None, descending: bool = False, filters=()) -> list[dict]:
    return document_store.query_documents(
        collection,
        filters=filters,
        order_by=order_by,
        descending=descending,
    )
