"""Local key-value store for the student profile and one-time flags."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from .schemas import Profile

logger = logging.getLogger(__name__)

PROFILE_KEY = "perfil"
PORTALS_POPUP_KEY = "hasSeenDesignPortalsPopup"


class LocalStore:
    """JSON file holding string values, read and written whole."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable store at %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    # Profile -----------------------------------------------------------

    def load_profile(self) -> Profile | None:
        raw = self.get(PROFILE_KEY)
        if not raw:
            return None
        try:
            return Profile.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValueError):
            logger.warning("Stored profile is not valid; ignoring it")
            return None

    def save_profile(self, profile: Profile) -> None:
        self.set(PROFILE_KEY, profile.model_dump_json())

    # One-time popup ----------------------------------------------------

    def consume_portals_popup(self) -> bool:
        """Return True the first time only; the flag is stored as ``"true"``."""

        if self.get(PORTALS_POPUP_KEY) == "true":
            return False
        self.set(PORTALS_POPUP_KEY, "true")
        return True


class MemoryStore(LocalStore):
    """In-process variant used when no file should be touched."""

    def __init__(self) -> None:
        super().__init__(Path("memory"))
        self._data: Dict[str, Any] = {}

    def _load(self) -> Dict[str, str]:
        return dict(self._data)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
