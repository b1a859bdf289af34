"""Simple in-memory registry of wizard sessions."""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Callable, Dict

from .errors import SessionNotFoundError
from .journey import Wizard

logger = logging.getLogger(__name__)


class SessionMemory:
    """Keep one ``Wizard`` per session id for the lifetime of the process."""

    def __init__(self) -> None:
        self._store: Dict[str, Wizard] = {}
        self._lock = threading.Lock()

    def create(self, factory: Callable[[str], Wizard], session_id: str | None = None) -> Wizard:
        """Start a new wizard (replacing any wizard under the same id)."""

        session_id = session_id or uuid.uuid4().hex
        wizard = factory(session_id)
        with self._lock:
            self._store[session_id] = wizard
        logger.info("Created wizard session %s", session_id)
        return wizard

    def get(self, session_id: str) -> Wizard:
        with self._lock:
            wizard = self._store.get(session_id)
        if wizard is None:
            raise SessionNotFoundError(f"No existe la sesión '{session_id}'.")
        return wizard

    def drop(self, session_id: str) -> None:
        with self._lock:
            removed = self._store.pop(session_id, None)
        if removed is None:
            raise SessionNotFoundError(f"No existe la sesión '{session_id}'.")

    def __len__(self) -> int:
        return len(self._store)
