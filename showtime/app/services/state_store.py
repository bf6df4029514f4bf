"""
Persistence collaborator

Stores top-level state keys as JSON documents. Saving is best-effort: a
storage failure is logged and reported as False, never raised into the
scheduling logic, which stays authoritative for the session.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from showtime.app.db.models import StateEntry

logger = logging.getLogger(__name__)


class StateStore(Protocol):
    def load(self, key: str) -> Optional[Any]:
        ...

    def save(self, key: str, value: Any) -> bool:
        ...


class MemoryStateStore:
    """Dict-backed store; values still go through JSON like the SQL store."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.save(key, value)

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, key: str, value: Any) -> bool:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning("Could not encode state key %s: %s", key, e)
            return False
        return True


class SqlStateStore:
    """Key-value store over the StateEntry table."""

    def __init__(self, session: Session):
        self.session = session

    def load(self, key: str) -> Optional[Any]:
        try:
            entry = self.session.exec(select(StateEntry).where(StateEntry.key == key)).first()
        except SQLAlchemyError as e:
            logger.warning("Failed to load state key %s: %s", key, e)
            return None
        if entry is None:
            return None
        try:
            return json.loads(entry.value)
        except ValueError:
            logger.warning("Discarding undecodable state for key %s", key)
            return None

    def save(self, key: str, value: Any) -> bool:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning("Could not encode state key %s: %s", key, e)
            return False

        try:
            entry = self.session.get(StateEntry, key)
            if entry is None:
                entry = StateEntry(key=key, value=payload)
            else:
                entry.value = payload
                entry.updated_at = datetime.now()
            self.session.add(entry)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning("Failed to save state key %s: %s", key, e)
            return False
        return True
