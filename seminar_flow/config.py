"""Configuration helpers for the Boost Seminario backend."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Mapping

from dotenv import load_dotenv

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

load_dotenv(override=False)


@dataclass(frozen=True)
class Settings:
    """Settings container for the AI provider and the wizard tunables.

    OpenAI is considered the primary provider; if its key is missing the
    configuration falls back to Gemini through its OpenAI-compatible endpoint,
    so a single SDK serves both.
    """

    openai_api_key: str | None = None
    gemini_api_key: str | None = None
    base_url_override: str | None = None
    model_override: str | None = None
    storage_path: Path = Path(".seminar_store.json")
    step_seconds: int = 180
    extend_seconds: int = 60
    typewriter_ms: int = 15
    speech_model: str = "gpt-4o-mini-tts"
    speech_voice: str = "alloy"
    log_level: str = "INFO"
    allowed_origins: tuple[str, ...] = tuple(DEFAULT_ALLOWED_ORIGINS)

    @property
    def primary_provider(self) -> str | None:
        """Return the preferred provider based on available credentials."""

        if self.openai_api_key:
            return "openai"
        if self.gemini_api_key:
            return "gemini"
        return None

    def get_api_key(self, provider: str | None = None) -> str | None:
        """Return the API key for the requested provider.

        When *provider* is omitted the primary provider's key is returned.
        """

        resolved_provider = provider or self.primary_provider
        if resolved_provider == "openai":
            return self.openai_api_key
        if resolved_provider == "gemini":
            return self.gemini_api_key
        return None

    @property
    def has_any_keys(self) -> bool:
        """True when at least one provider API key is configured."""

        return self.primary_provider is not None

    @property
    def base_url(self) -> str | None:
        """Endpoint handed to the OpenAI client (``None`` means the SDK default)."""

        if self.base_url_override:
            return self.base_url_override
        if self.primary_provider == "gemini":
            return GEMINI_OPENAI_BASE_URL
        return None

    @property
    def model(self) -> str:
        if self.model_override:
            return self.model_override
        if self.primary_provider == "gemini":
            return DEFAULT_GEMINI_MODEL
        return DEFAULT_OPENAI_MODEL


def _int_from_env(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _origins_from_env(environ: Mapping[str, str]) -> tuple[str, ...]:
    """Return allowed origins, optionally sourced from an env override."""

    raw = environ.get("SEMINAR_ALLOWED_ORIGINS")
    if raw:
        origins: List[str] = [origin.strip() for origin in raw.split(",") if origin.strip()]
        return tuple(origins)
    return tuple(DEFAULT_ALLOWED_ORIGINS)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read environment variables and return cached settings."""

    environ = os.environ
    return Settings(
        openai_api_key=environ.get("OPENAI_API_KEY") or None,
        gemini_api_key=environ.get("GEMINI_API_KEY") or None,
        base_url_override=environ.get("SEMINAR_LLM_BASE_URL") or None,
        model_override=environ.get("SEMINAR_LLM_MODEL") or None,
        storage_path=Path(environ.get("SEMINAR_STORAGE_PATH", ".seminar_store.json")),
        step_seconds=_int_from_env(environ, "SEMINAR_STEP_SECONDS", 180),
        extend_seconds=_int_from_env(environ, "SEMINAR_EXTEND_SECONDS", 60),
        typewriter_ms=_int_from_env(environ, "SEMINAR_TYPEWRITER_MS", 15),
        speech_voice=environ.get("SEMINAR_SPEECH_VOICE", "alloy"),
        log_level=environ.get("SEMINAR_LOG_LEVEL", "INFO"),
        allowed_origins=_origins_from_env(environ),
    )
