# Overview: Transaction boundaries and row locking shared by the workflow services.

from __future__ import annotations

from contextlib import contextmanager

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


@contextmanager
def atomic():
    """
    Run a block as one transaction on the scoped session.

    Commits when the block completes and rolls back on any exception,
    which is re-raised unchanged. Nothing is retried.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
