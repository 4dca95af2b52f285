"""Explicit transaction boundary for multi-statement use-cases."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class UnitOfWork:
    """begin -> read -> compute -> write -> commit, or roll everything back.

    The session may already carry an autobegun transaction (e.g. from the
    identity lookup); the unit of work adopts it, so every statement issued
    inside the block commits or rolls back together.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self._closed = False

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._closed:
            return False
        if exc_type is not None:
            self.rollback()
            return False
        self.commit()
        return False

    def flush(self) -> None:
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()
        self._closed = True

    def rollback(self) -> None:
        self.db.rollback()
        self._closed = True
        logger.debug("unit of work rolled back")
