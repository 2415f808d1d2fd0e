# Overview: Service-layer full-database backup and restore over the known collections.

"""
Backup / restore

export_database() snapshots every allowlisted collection into a
JSON-compatible bundle:

    {collection: {doc_id: body}}

where timestamp leaves are tagged (see donphone.codec). import_database()
wipes every allowlisted collection and repopulates it from such a bundle.

Restore runs in two phases (delete, then write), each committed in batches
of BACKUP_BATCH_SIZE. There is no global transaction: a failure part-way
leaves already committed batches in place. Concurrent restores against the
same database are not guarded here; callers serialize them.

State machine (restore):
    IDLE -> VALIDATING -> DELETING(c) ... -> WRITING(c) ... -> DONE
    any state -> FAILED
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Sequence

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Document
from ..codec import deserialize_value, serialize_value
from . import document_store

logger = logging.getLogger(__name__)

PHASE_DELETE = "delete"
PHASE_WRITE = "write"


class BackupError(Exception):
    """Base class for backup/restore failures."""


class BackupFailed(BackupError):
    """Raised when a collection cannot be read during export."""

    def __init__(self, collection: str):
        super().__init__(f"Failed to back up collection {collection}")
        self.collection = collection


class InvalidBackupFormat(BackupError):
    """Raised when a restore bundle is not recognizable. Nothing was modified."""


class RestoreFailed(BackupError):
    """Raised when a delete or write batch fails during restore."""

    def __init__(self, collection: str, phase: str):
        action = "clear" if phase == PHASE_DELETE else "import data into"
        super().__init__(f"Failed to {action} collection {collection}")
        self.collection = collection
        self.phase = phase


class RestoreState(str, Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    DELETING = "DELETING"
    WRITING = "WRITING"
    DONE = "DONE"
    FAILED = "FAILED"


TERMINAL_STATES = frozenset({RestoreState.DONE, RestoreState.FAILED})


@dataclass
class RestoreReport:
    """Progress of one restore run; the history keeps every transition."""
    state: RestoreState = RestoreState.IDLE
    collection: str | None = None
    history: list[tuple[RestoreState, str | None]] = field(default_factory=list)
    deleted: dict[str, int] = field(default_factory=dict)
    written: dict[str, int] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    def transition(self, state: RestoreState, collection: str | None = None) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Restore already finished with state {self.state.value}")
        self.state = state
        self.collection = collection
        self.history.append((state, collection))

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "deleted": dict(self.deleted),
            "written": dict(self.written),
            "skipped": list(self.skipped),
        }


def _known_collections() -> tuple[str, ...]:
    return tuple(current_app.config["BACKUP_COLLECTIONS"])


def _batch_size() -> int:
    return max(1, int(current_app.config.get("BACKUP_BATCH_SIZE", 500)))


def _chunks(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


# =============================================================================
# Export
# =============================================================================

def export_collection(collection: str) -> dict[str, Any]:
    """Serialized bodies of one collection keyed by document id."""
    docs = (
        db.session.query(Document)
        .filter(Document.collection == collection)
        .order_by(Document.doc_id)
        .all()
    )
    return {doc.doc_id: serialize_value(doc.data or {}) for doc in docs}


def export_database() -> dict[str, dict[str, Any]]:
    """
    Snapshot every known collection.

    Raises BackupFailed(collection) on the first read or decode error; no
    partial bundle is returned.
    """
    bundle: dict[str, dict[str, Any]] = {}
    for collection in _known_collections():
        try:
            bundle[collection] = export_collection(collection)
        except (SQLAlchemyError, AttributeError, TypeError, ValueError) as exc:
            # ValueError/TypeError come from bodies the timestamp codec cannot decode
            db.session.rollback()
            logger.error("Error backing up collection %s: %s", collection, exc)
            raise BackupFailed(collection) from exc
        logger.info("Backed up %d documents from %s", len(bundle[collection]), collection)
    return bundle


# =============================================================================
# Restore
# =============================================================================

def _decode_bundle(bundle: Any, known: tuple[str, ...], report: RestoreReport) -> dict[str, dict[str, dict]]:
    """
    Validate the bundle shape and decode every document before anything is
    deleted. Returns {collection: {doc_id: body}} for known collections.
    """
    if not isinstance(bundle, dict) or not bundle:
        raise InvalidBackupFormat("Backup file is empty or has an invalid format")
    if not any(name in bundle for name in known):
        raise InvalidBackupFormat("Backup file is empty or has an invalid format")

    legacy_fields = tuple(current_app.config.get("BACKUP_LEGACY_FIELDS", ()))
    decoded: dict[str, dict[str, dict]] = {}

    for name, collection_data in bundle.items():
        if name not in known:
            logger.warning('Skipping unknown collection "%s" from backup file', name)
            report.skipped.append(name)
            continue
        if not isinstance(collection_data, dict):
            logger.warning('Skipping collection "%s": expected an object of documents', name)
            report.skipped.append(name)
            continue

        docs: dict[str, dict] = {}
        for doc_id, body in collection_data.items():
            if not isinstance(body, dict):
                raise InvalidBackupFormat(f"Document {name}/{doc_id} is not an object")
            try:
                docs[str(doc_id)] = deserialize_value(body, drop_fields=legacy_fields)
            except (AttributeError, TypeError, ValueError) as exc:
                raise InvalidBackupFormat(f"Document {name}/{doc_id} has an invalid timestamp") from exc
        decoded[name] = docs

    return decoded


def _clear_collection(collection: str, batch_size: int) -> int:
    try:
        doc_ids = document_store.list_document_ids(collection)
        deleted = 0
        for chunk in _chunks(doc_ids, batch_size):
            deleted += document_store.delete_documents(collection, chunk, commit=False)
            db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Error deleting collection %s: %s", collection, exc)
        raise RestoreFailed(collection, PHASE_DELETE) from exc
    return deleted


def _write_collection(collection: str, docs: dict[str, dict], batch_size: int) -> int:
    items = list(docs.items())
    try:
        for chunk in _chunks(items, batch_size):
            document_store.insert_documents(collection, chunk, commit=False)
            db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Error importing collection %s: %s", collection, exc)
        raise RestoreFailed(collection, PHASE_WRITE) from exc
    return len(items)


def import_database(bundle: Any, report: RestoreReport | None = None) -> RestoreReport:
    """
    Replace every known collection with the contents of bundle.

    Raises InvalidBackupFormat before touching data, RestoreFailed when a
    batch commit fails (earlier batches stay committed).
    """
    report = report or RestoreReport()
    known = _known_collections()
    batch_size = _batch_size()

    try:
        report.transition(RestoreState.VALIDATING)
        decoded = _decode_bundle(bundle, known, report)

        logger.info("Starting database import. This will delete existing data.")
        for collection in known:
            report.transition(RestoreState.DELETING, collection)
            report.deleted[collection] = _clear_collection(collection, batch_size)
            logger.info("Deleted %d documents from %s", report.deleted[collection], collection)

        for collection, docs in decoded.items():
            report.transition(RestoreState.WRITING, collection)
            report.written[collection] = _write_collection(collection, docs, batch_size)
            logger.info("Imported %d documents into %s", report.written[collection], collection)
    except BackupError:
        report.transition(RestoreState.FAILED, report.collection)
        raise

    report.transition(RestoreState.DONE)
    logger.info("Database import completed successfully")
    return report
