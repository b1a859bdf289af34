from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

import pytest
from fastapi.testclient import TestClient

from seminar_flow.app import create_app
from seminar_flow.config import Settings
from seminar_flow.journey import Wizard
from seminar_flow.llm import PromptSpec
from seminar_flow.storage import MemoryStore


class FakeClient:
    """Scripted AI client: each call pops the next queued answer (or raises it)."""

    def __init__(self) -> None:
        self.responses: deque[Any] = deque()
        self.calls: List[Tuple[str, Any]] = []
        self.speech = b"ID3-fake-audio"

    def queue(self, *responses: Any) -> "FakeClient":
        self.responses.extend(responses)
        return self

    def _next(self, kind: str, payload: Any) -> Any:
        self.calls.append((kind, payload))
        if not self.responses:
            raise RuntimeError(f"unexpected {kind} call")
        response = self.responses.popleft()
        if isinstance(response, BaseException):
            raise response
        return response

    def generate_text(self, spec: PromptSpec) -> str:
        return self._next("text", spec)

    def generate_json(self, spec: PromptSpec, schema: Dict[str, Any]) -> Any:
        return self._next("json", spec)

    def synthesize_speech(self, text: str) -> bytes:
        self.calls.append(("speech", text))
        return self.speech


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(storage_path=tmp_path / "store.json", typewriter_ms=0)


@pytest.fixture
def make_wizard(fake_client: FakeClient, store: MemoryStore, settings: Settings) -> Callable[..., Wizard]:
    def factory(session_id: str = "test-session", **kwargs: Any) -> Wizard:
        return Wizard(session_id, client=fake_client, store=store, settings=settings, **kwargs)

    return factory


@pytest.fixture
def wizard(make_wizard: Callable[..., Wizard]) -> Wizard:
    return make_wizard()


@pytest.fixture
def api(fake_client: FakeClient, store: MemoryStore, settings: Settings) -> TestClient:
    return TestClient(create_app(ai_client=fake_client, store=store, settings=settings))
