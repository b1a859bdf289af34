"""Read-aloud of step content through the provider's speech endpoint."""

from __future__ import annotations

import logging

from .errors import StepValidationError, classify_failure
from .llm import GenerativeClient
from .markup import strip_html

logger = logging.getLogger(__name__)

SPEECH_MEDIA_TYPE = "audio/mpeg"
SPEECH_FAILURE_MESSAGE = "No se pudo leer el texto en voz alta."
# Characters accepted by the speech endpoint per request.
MAX_SPEECH_CHARS = 4096


def read_aloud(client: GenerativeClient, html: str, *, step: int | None = None) -> bytes:
    """Strip markup from *html* and return the synthesised MP3 bytes."""

    text = " ".join(strip_html(html).split())
    if not text:
        raise StepValidationError("No hay texto para leer en voz alta.", step=step)
    if len(text) > MAX_SPEECH_CHARS:
        logger.info("Truncating read-aloud text from %s to %s characters", len(text), MAX_SPEECH_CHARS)
        text = text[:MAX_SPEECH_CHARS]
    try:
        return client.synthesize_speech(text)
    except Exception as exc:
        logger.warning("Speech synthesis failed for step %s: %s", step, exc)
        raise classify_failure(exc, step=step, failure_message=SPEECH_FAILURE_MESSAGE) from exc
