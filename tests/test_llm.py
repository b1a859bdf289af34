from __future__ import annotations

from typing import Any

import pytest

from seminar_flow.config import Settings
from seminar_flow.errors import GenerationError, StepValidationError
from seminar_flow.llm import OpenAIGenerativeClient, PromptSpec, parse_structured_response, strip_code_fence
from seminar_flow.prompts import REFERENCE_SCHEMA
from seminar_flow.speech import read_aloud

from conftest import FakeClient


def _client_returning(monkeypatch: pytest.MonkeyPatch, raw: str) -> OpenAIGenerativeClient:
    client = OpenAIGenerativeClient(Settings(openai_api_key="test-key"))

    def fake_complete(spec: PromptSpec, **extra: Any) -> str:
        return raw

    monkeypatch.setattr(client, "_complete", fake_complete)
    return client


def test_strip_code_fence() -> None:
    assert strip_code_fence("```html\n<p>Hola</p>\n```") == "<p>Hola</p>"
    assert strip_code_fence("  <p>Sin cerco</p> ") == "<p>Sin cerco</p>"


def test_parse_structured_response_rejects_prose() -> None:
    with pytest.raises(GenerationError):
        parse_structured_response("Aquí tienes los referentes: ...")


def test_generate_text_strips_fences(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _client_returning(monkeypatch, "```html\n<p>Texto</p>\n```")

    assert client.generate_text(PromptSpec(user_prompt="x")) == "<p>Texto</p>"


def test_generate_json_unwraps_array_results(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _client_returning(monkeypatch, '{"items": [{"name": "Uno"}, {"name": "Dos"}]}')

    assert client.generate_json(PromptSpec(user_prompt="x"), REFERENCE_SCHEMA) == [{"name": "Uno"}, {"name": "Dos"}]


def test_generate_json_rejects_unexpected_shape(monkeypatch: pytest.MonkeyPatch) -> None:
    client = _client_returning(monkeypatch, '{"otra": 1}')

    with pytest.raises(GenerationError):
        client.generate_json(PromptSpec(user_prompt="x"), REFERENCE_SCHEMA)


def test_missing_key_fails_as_generation_error() -> None:
    client = OpenAIGenerativeClient(Settings())

    assert client.configured is False
    with pytest.raises(GenerationError):
        client.generate_text(PromptSpec(user_prompt="x"))


def test_read_aloud_strips_markup(fake_client: FakeClient) -> None:
    audio = read_aloud(fake_client, "<h2>Título</h2><p>Un <em>texto</em>\n breve.</p>")

    assert audio == fake_client.speech
    assert fake_client.calls == [("speech", "Título Un texto breve.")]


def test_read_aloud_refuses_empty_text(fake_client: FakeClient) -> None:
    with pytest.raises(StepValidationError):
        read_aloud(fake_client, "<p>   </p>", step=4)

    assert fake_client.calls == []
