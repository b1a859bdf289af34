"""OpenAI-compatible client used by every wizard step."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Protocol

from openai import OpenAI

from .config import Settings, get_settings
from .errors import GenerationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromptSpec:
    """Container describing how to call the LLM for a step action."""

    user_prompt: str
    system_prompt: str | None = None
    temperature: float = 0.7
    max_tokens: int = 2048


class GenerativeClient(Protocol):
    """What the step pipelines need from an AI provider."""

    def generate_text(self, spec: PromptSpec) -> str:
        ...

    def generate_json(self, spec: PromptSpec, schema: Dict[str, Any]) -> Any:
        ...

    def synthesize_speech(self, text: str) -> bytes:
        ...


def strip_code_fence(raw_text: str) -> str:
    """Drop a surrounding Markdown code fence (```html, ```json, ...) if present."""

    text = raw_text.strip()
    if text.startswith("```"):
        lines = [line.rstrip() for line in text.splitlines()]
        if len(lines) >= 2:
            lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    return text


def parse_structured_response(raw_text: str) -> Any:
    """Coerce the model output into JSON or raise ``GenerationError``."""

    text = strip_code_fence(raw_text)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise GenerationError(f"La respuesta de la IA no es JSON válido: {exc}") from exc


def _messages(spec: PromptSpec) -> list[dict[str, str]]:
    messages = []
    if spec.system_prompt:
        messages.append({"role": "system", "content": spec.system_prompt.strip()})
    messages.append({"role": "user", "content": spec.user_prompt.strip()})
    return messages


class OpenAIGenerativeClient:
    """Chat-completions client; errors propagate so steps can classify them."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._client: OpenAI | None = None

    @property
    def configured(self) -> bool:
        return self._settings.has_any_keys

    def _get_client(self) -> OpenAI:
        """Return a cached OpenAI client, or fail when no key is configured."""

        if self._client is not None:
            return self._client
        api_key = self._settings.get_api_key()
        if not api_key:
            raise GenerationError("No hay un proveedor de IA configurado (OPENAI_API_KEY o GEMINI_API_KEY).")
        self._client = OpenAI(api_key=api_key, base_url=self._settings.base_url)
        return self._client

    def _complete(self, spec: PromptSpec, **extra: Any) -> str:
        client = self._get_client()
        response = client.chat.completions.create(
            model=self._settings.model,
            messages=_messages(spec),
            temperature=spec.temperature,
            max_tokens=spec.max_tokens,
            **extra,
        )
        message = response.choices[0].message.content if response.choices else None
        if not message:
            raise GenerationError("La IA devolvió una respuesta vacía.")
        return message

    def generate_text(self, spec: PromptSpec) -> str:
        return strip_code_fence(self._complete(spec))

    def generate_json(self, spec: PromptSpec, schema: Dict[str, Any]) -> Any:
        """Request a schema-validated result.

        Structured outputs require an object at the top level, so array schemas are
        wrapped in ``{"items": [...]}`` and unwrapped again here.
        """

        wrapped = schema.get("type") == "array"
        root = {"type": "object", "properties": {"items": schema}, "required": ["items"]} if wrapped else schema
        raw = self._complete(
            spec,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "result", "schema": root},
            },
        )
        data = parse_structured_response(raw)
        if wrapped:
            if isinstance(data, dict) and "items" in data:
                return data["items"]
            if isinstance(data, list):
                return data
            raise GenerationError("La respuesta de la IA no tiene el formato esperado.")
        return data

    def synthesize_speech(self, text: str) -> bytes:
        """Read *text* aloud through the speech endpoint and return MP3 bytes."""

        client = self._get_client()
        response = client.audio.speech.create(
            model=self._settings.speech_model,
            voice=self._settings.speech_voice,
            input=text,
        )
        return response.read()


def get_generative_client(settings: Settings | None = None) -> OpenAIGenerativeClient:
    """Build the production client from environment settings."""

    resolved = settings or get_settings()
    if not resolved.has_any_keys:
        logger.warning("No AI provider key configured; AI-backed actions will fail until one is set.")
    return OpenAIGenerativeClient(resolved)
