# Overview: Row locking and retry helpers for the database storage backend.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

# "database is locked" on SQLite, deadlocks/serialization failures elsewhere
RETRYABLE_ERRORS = (OperationalError, StaleDataError)


def lock_for_update(query):
    """
    SELECT ... FOR UPDATE on the product rows a sale touches.

    NOTE: SQLite ignores FOR UPDATE; there the conditional stock UPDATE is
    what prevents over-selling.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.05):
    """
    Run a unit of database work, rolling back and retrying on lock contention.

    Domain errors (FlouzError) are not retried; they propagate on the first
    attempt.
    """
    for attempt in range(attempts):
        try:
            return func()
        except RETRYABLE_ERRORS:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
