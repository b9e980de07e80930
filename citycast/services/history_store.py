"""Durable storage for the recent-searches list, backed by the key-value table."""
from __future__ import annotations
import logging
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from citycast.db import get_session
from citycast.errors import PersistenceError
from citycast.repositories.kv import delete_value, get_value, put_value

logger = logging.getLogger(__name__)


class HistoryStore:
    def __init__(self, engine):
        self._engine = engine

    def get(self, key: str) -> Optional[List[str]]:
        """
        Returns the stored list of strings, or None when the key is absent
        or the stored value is unreadable.
        """
        try:
            with get_session(self._engine) as session:
                value = get_value(session, key)
        except (SQLAlchemyError, ValueError) as e:
            logger.warning("Could not read %r from history store: %s", key, e)
            return None

        if value is None:
            return None
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            logger.warning("Ignoring malformed value stored under %r", key)
            return None
        return value

    def set(self, key: str, entries: Sequence[str]) -> None:
        try:
            with get_session(self._engine) as session:
                put_value(session, key, list(entries))
        except SQLAlchemyError as e:
            raise PersistenceError(f"could not write {key!r}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            with get_session(self._engine) as session:
                delete_value(session, key)
        except SQLAlchemyError as e:
            raise PersistenceError(f"could not remove {key!r}: {e}") from e
