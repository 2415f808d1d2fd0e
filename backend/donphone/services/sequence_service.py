# Overview: Service-layer sequence counters; issues sale and service-order numbers.

"""
Sequence counters

Each named sequence (sale, service-order) owns one counter document holding
the last issued value. next_value() performs the read-modify-write in a
single transaction so concurrent callers never receive the same number:
SQLite serializes writers with BEGIN IMMEDIATE, other databases lock the
counter row with SELECT ... FOR UPDATE, and a racing first insert is caught
by the (collection, doc_id) unique constraint and retried.

Callers must not persist the dependent record when SequenceUnavailable is
raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..models import Document
from .concurrency import begin_immediate, lock_for_update, run_with_retry

logger = logging.getLogger(__name__)

SALE = "sale"
SERVICE_ORDER = "service-order"


class SequenceUnavailable(Exception):
    """Raised when the next number of a sequence could not be issued."""

    def __init__(self, sequence_name: str, message: str | None = None):
        super().__init__(message or f"Could not issue the next number for sequence '{sequence_name}'")
        self.sequence_name = sequence_name


@dataclass(frozen=True)
class SequenceConfig:
    name: str
    collection: str
    document_id: str
    field: str
    start: int


def get_sequence_config(sequence_name: str) -> SequenceConfig:
    definitions = current_app.config.get("SEQUENCES", {})
    definition = definitions.get(sequence_name)
    if definition is None:
        raise SequenceUnavailable(sequence_name, f"Unknown sequence '{sequence_name}'")
    return SequenceConfig(
        name=sequence_name,
        collection=definition["collection"],
        document_id=definition["document_id"],
        field=definition["field"],
        start=int(definition["start"]),
    )


def _counter_query(config: SequenceConfig):
    return db.session.query(Document).filter_by(
        collection=config.collection,
        doc_id=config.document_id,
    )


def next_value(sequence_name: str) -> int:
    """
    Atomically issue the next number of a sequence.

    First use creates the counter at start + 1; later calls store and return
    current + 1.

    Must be called outside any open write transaction: on SQLite the
    counter update starts its own (BEGIN IMMEDIATE), and a failed attempt
    rolls the session back, discarding unflushed or uncommitted caller work.
    Issue the number first, then write the dependent record. Unflushed
    changes in the session are refused with SequenceUnavailable.
    """
    config = get_sequence_config(sequence_name)
    if db.session.new or db.session.dirty or db.session.deleted:
        raise SequenceUnavailable(
            sequence_name,
            f"Cannot issue a {sequence_name} number while the session has pending changes",
        )

    def _op() -> int:
        begin_immediate()
        counter = lock_for_update(_counter_query(config)).first()

        if counter is None:
            value = config.start + 1
            db.session.add(Document(
                collection=config.collection,
                doc_id=config.document_id,
                data={config.field: value},
            ))
        else:
            stored = (counter.data or {}).get(config.field)
            value = (config.start if stored is None else int(stored)) + 1
            counter.data = {**(counter.data or {}), config.field: value}

        db.session.commit()
        return value

    attempts = current_app.config.get("SEQUENCE_RETRY_ATTEMPTS", 5)
    try:
        value = run_with_retry(
            _op,
            attempts=attempts,
            retry_on=(OperationalError, StaleDataError, IntegrityError),
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Sequence %s unavailable: %s", sequence_name, exc)
        raise SequenceUnavailable(sequence_name) from exc

    logger.debug("Issued %s number %d", sequence_name, value)
    return value


def current_value(sequence_name: str) -> int | None:
    """Last issued value, or None when the sequence was never used."""
    config = get_sequence_config(sequence_name)
    counter = _counter_query(config).first()
    if counter is None:
        return None
    return (counter.data or {}).get(config.field)
