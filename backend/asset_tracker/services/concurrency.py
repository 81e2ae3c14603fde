# Overview: Transaction scoping, row locking and retry for service-layer writes.

from __future__ import annotations

import time
from typing import Callable, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db

T = TypeVar("T")


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; there the version_id column
    on the locked model is what rejects the losing writer (StaleDataError).
    """
    return query.with_for_update()


def run_with_retry(func: Callable[[], T], *, attempts: int = 3, backoff_base: float = 0.1) -> T:
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). Every other exception propagates at once.
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc


def run_in_transaction(work: Callable[[], T], *, attempts: int = 3, backoff_base: float = 0.1) -> T:
    """
    Run `work` as one unit: commit on success, roll back on any exception.

    The commit happens inside the retried block, so a version conflict
    detected at flush/commit time re-runs `work` from a clean session and
    its preconditions are checked again against the committed state.
    Commit and rollback both hand the connection back to the pool.
    """
    def _op():
        try:
            result = work()
            db.session.commit()
            return result
        except Exception:
            db.session.rollback()
            raise

    return run_with_retry(_op, attempts=attempts, backoff_base=backoff_base)

