from __future__ import annotations

import json
from pathlib import Path

import pytest

from seminar_flow.errors import SessionNotFoundError
from seminar_flow.memory import SessionMemory
from seminar_flow.schemas import Profile
from seminar_flow.storage import PORTALS_POPUP_KEY, PROFILE_KEY, LocalStore


def test_profile_is_stored_as_json_string(tmp_path: Path) -> None:
    store = LocalStore(tmp_path / "kv.json")

    store.save_profile(Profile(nombre="Ana", pronombres="Ella"))

    raw = json.loads((tmp_path / "kv.json").read_text(encoding="utf-8"))
    assert json.loads(raw[PROFILE_KEY]) == {"nombre": "Ana", "pronombres": "Ella", "preferencias": ""}
    assert LocalStore(tmp_path / "kv.json").load_profile() == Profile(nombre="Ana", pronombres="Ella")


def test_portals_popup_flag_is_consumed_once(tmp_path: Path) -> None:
    store = LocalStore(tmp_path / "kv.json")

    assert store.consume_portals_popup() is True
    assert store.consume_portals_popup() is False
    assert store.get(PORTALS_POPUP_KEY) == "true"


def test_unreadable_store_is_ignored(tmp_path: Path) -> None:
    path = tmp_path / "kv.json"
    path.write_text("{not json", encoding="utf-8")

    assert LocalStore(path).load_profile() is None


def test_session_memory_lifecycle(wizard) -> None:
    sessions = SessionMemory()

    created = sessions.create(lambda session_id: wizard, "abc")

    assert sessions.get("abc") is created
    assert len(sessions) == 1
    sessions.drop("abc")
    with pytest.raises(SessionNotFoundError):
        sessions.get("abc")
    with pytest.raises(SessionNotFoundError):
        sessions.drop("abc")
