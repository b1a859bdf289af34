"""Error taxonomy for wizard steps.

Every failure is scoped to the step that raised it. Validation errors are caught
before a request leaves; rate-limit and generation errors come back from the AI
provider and leave the step in the phase it had before the request.
"""

from __future__ import annotations

RATE_LIMIT_MARKERS = ("429", "resource_exhausted", "rate limit", "rate_limit", "ratelimit", "quota")

RATE_LIMIT_MESSAGE = "Límite de solicitudes alcanzado. Por favor, espera un momento y vuelve a intentarlo."
GENERIC_FAILURE_MESSAGE = "Hubo un error al contactar la IA. Por favor, intenta de nuevo."


class WizardError(Exception):
    """Base class for every error surfaced by the wizard API."""

    kind = "wizard"
    status_code = 400

    def __init__(self, message: str, *, step: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.step = step


class StepValidationError(WizardError):
    """Required input is missing; no request was sent."""

    kind = "validation"
    status_code = 422


class RateLimitError(WizardError):
    kind = "rate_limit"
    status_code = 429


class GenerationError(WizardError):
    """Provider or parsing failure (including too few variants)."""

    kind = "generation"
    status_code = 502


class InvalidTransitionError(WizardError):
    kind = "invalid_transition"
    status_code = 409


class SessionNotFoundError(WizardError):
    kind = "not_found"
    status_code = 404


def is_rate_limited(exc: BaseException) -> bool:
    """Detect quota exhaustion by looking for known markers in the error text."""

    text = f"{type(exc).__name__} {exc}".lower()
    return any(marker in text for marker in RATE_LIMIT_MARKERS)


def classify_failure(
    exc: BaseException,
    *,
    step: int | None = None,
    failure_message: str = GENERIC_FAILURE_MESSAGE,
    rate_limit_message: str = RATE_LIMIT_MESSAGE,
) -> WizardError:
    """Map a provider exception onto the user-facing error class."""

    if isinstance(exc, (StepValidationError, InvalidTransitionError)):
        return exc
    if is_rate_limited(exc):
        return RateLimitError(rate_limit_message, step=step)
    return GenerationError(failure_message, step=step)
