# Overview: Transaction helpers shared by services: row locking and retry on contention.

from __future__ import annotations

import logging
import time

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, see begin_immediate().
    """
    return query.with_for_update()


def begin_immediate() -> None:
    """
    Take SQLite's write lock up front so read-modify-write sequences are
    serialized across connections. No-op on other dialects, which honor
    lock_for_update() instead.
    """
    if db.engine.dialect.name == "sqlite":
        db.session.execute(text("BEGIN IMMEDIATE"))


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, retry_on=RETRYABLE_ERRORS):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts) unless retry_on says otherwise. The last
    error is re-raised once attempts are exhausted.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except retry_on as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            logger.warning(
                "Retrying %s after %s (attempt %d/%d)",
                getattr(func, "__name__", "operation"), type(exc).__name__, attempt + 1, attempts,
            )
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
