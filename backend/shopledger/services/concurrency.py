# Overview: Row locking and lock-retry helpers used by the ledger store.

from __future__ import annotations

import logging
import time

from sqlalchemy.exc import OperationalError


logger = logging.getLogger(__name__)


def lock_for_update(query):
    """
    Lock the selected stock rows until commit.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; there the database-level
    write lock serialises writers instead.
    """
    return query.with_for_update()


def run_with_retry(session, func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Call func, retrying when the database reports a lock conflict.

    The session is rolled back before every retry, so func always starts a
    fresh transaction. The last OperationalError is re-raised once the
    attempts run out.
    """
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except OperationalError as exc:
            session.rollback()
            if attempt == attempts:
                logger.error("Giving up after %d attempts: %s", attempts, exc)
                raise
            logger.warning("Database busy (attempt %d/%d), retrying: %s", attempt, attempts, exc)
            time.sleep(backoff_base * (2 ** (attempt - 1)))
