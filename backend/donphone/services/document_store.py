# Overview: Service-layer access to document collections; every other service reads and writes through here.

"""
Document store

Records are schemaless documents addressed by (collection, doc_id); one
table and one set of primitives serves every business area. Filtering and
ordering run in Python on the decoded bodies.

Write helpers take commit=False so callers can group several writes into a
single transaction (counters, restore batches).
"""

from __future__ import annotations

import operator
import secrets
import string
from datetime import datetime
from typing import Any, Iterable

from ..extensions import db
from ..models import Document
from ..validation import NotFoundError

AUTO_ID_ALPHABET = string.ascii_letters + string.digits
AUTO_ID_LENGTH = 20

_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda left, right: left in right,
}


class DocumentNotFoundError(NotFoundError):
    """Raised when a document does not exist in its collection."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


def new_document_id() -> str:
    """Random 20-character alphanumeric id."""
    return "".join(secrets.choice(AUTO_ID_ALPHABET) for _ in range(AUTO_ID_LENGTH))


def _query(collection: str):
    return db.session.query(Document).filter(Document.collection == collection)


def get_document(collection: str, doc_id: str) -> Document | None:
    return _query(collection).filter(Document.doc_id == doc_id).first()


def get_document_data(collection: str, doc_id: str) -> dict | None:
    """Body of a document plus its id, or None."""
    doc = get_document(collection, doc_id)
    return doc.to_dict() if doc else None


def require_document(collection: str, doc_id: str) -> Document:
    doc = get_document(collection, doc_id)
    if doc is None:
        raise DocumentNotFoundError(collection, doc_id)
    return doc


def add_document(collection: str, data: dict, *, doc_id: str | None = None, commit: bool = True) -> str:
    """Create a document and return its id (generated unless given)."""
    doc_id = doc_id or new_document_id()
    db.session.add(Document(collection=collection, doc_id=doc_id, data=dict(data)))
    if commit:
        db.session.commit()
    return doc_id


def set_document(collection: str, doc_id: str, data: dict, *, commit: bool = True) -> Document:
    """Create or fully replace a document."""
    doc = get_document(collection, doc_id)
    if doc is None:
        doc = Document(collection=collection, doc_id=doc_id, data=dict(data))
        db.session.add(doc)
    else:
        doc.data = dict(data)
    if commit:
        db.session.commit()
    return doc


def update_document(collection: str, doc_id: str, patch: dict, *, commit: bool = True) -> Document:
    """Merge patch into an existing document. Raises DocumentNotFoundError."""
    doc = require_document(collection, doc_id)
    doc.data = {**(doc.data or {}), **patch}
    if commit:
        db.session.commit()
    return doc


def delete_document(collection: str, doc_id: str, *, commit: bool = True) -> bool:
    """Delete a document; returns False when it did not exist."""
    deleted = _query(collection).filter(Document.doc_id == doc_id).delete(synchronize_session=False)
    if commit:
        db.session.commit()
    return bool(deleted)


def list_document_ids(collection: str) -> list[str]:
    rows = _query(collection).with_entities(Document.doc_id).order_by(Document.doc_id).all()
    return [row.doc_id for row in rows]


def insert_documents(collection: str, items: Iterable[tuple[str, dict]], *, commit: bool = True) -> int:
    """Add (doc_id, body) pairs as new documents."""
    docs = [Document(collection=collection, doc_id=doc_id, data=dict(body)) for doc_id, body in items]
    db.session.add_all(docs)
    if commit:
        db.session.commit()
    return len(docs)


def delete_documents(collection: str, doc_ids: Iterable[str], *, commit: bool = True) -> int:
    """Delete a group of documents by id in one statement."""
    ids = list(doc_ids)
    if not ids:
        return 0
    deleted = (
        _query(collection)
        .filter(Document.doc_id.in_(ids))
        .delete(synchronize_session=False)
    )
    if commit:
        db.session.commit()
    return deleted


def _matches(data: dict, filters: Iterable[tuple[str, str, Any]]) -> bool:
    for field, op, expected in filters:
        compare = _OPERATORS.get(op)
        if compare is None:
            raise ValueError(f"Unsupported filter operator: {op}")
        actual = data.get(field)
        if actual is None and op not in ("==", "!="):
            return False
        try:
            if not compare(actual, expected):
                return False
        except TypeError:
            return False
    return True


def _type_rank(value: Any) -> int:
    # null < booleans < numbers < timestamps < strings < lists < objects
    if value is None:
        return 0
    if isinstance(value, bool):
        return 1
    if isinstance(value, (int, float)):
        return 2
    if isinstance(value, datetime):
        return 3
    if isinstance(value, str):
        return 4
    if isinstance(value, list):
        return 5
    return 6


def _sort_key(field: str):
    def key(data: dict):
        value = data.get(field)
        rank = _type_rank(value)
        if rank in (0, 5, 6):
            # Lists and objects are not compared by content
            return (rank, 0)
        return (rank, value)
    return key


def query_documents(
    collection: str,
    *,
    filters: Iterable[tuple[str, str, Any]] = (),
    order_by: str | None = None,
    descending: bool = False,
) -> list[dict]:
    """
    Return bodies (with "id") of documents matching every (field, op, value)
    filter, optionally ordered by a body field.
    """
    filters = list(filters)
    docs = [doc.to_dict() for doc in _query(collection).order_by(Document.id).all()]
    if filters:
        docs = [d for d in docs if _matches(d, filters)]
    if order_by:
        docs.sort(key=_sort_key(order_by), reverse=descending)
    return docs


def count_documents(collection: str, *, filters: Iterable[tuple[str, str, Any]] = ()) -> int:
    filters = list(filters)
    if not filters:
        return _query(collection).count()
    return len(query_documents(collection, filters=filters))
