"""Step life-cycle state machine shared by every wizard step.

::

    EMPTY ⇄ READY → GENERATING → DISPLAYED → ACCEPTED
                        ↑  ↓         ↓  ↑       │
                        │  └─ SELECTING_VARIANT  │ reopen
                        │            EDITING ←──┘
                        └── rollback to the phase held before the request

A request failure never leaves the step in GENERATING: the phase reverts to the
one recorded when the request started and the error is kept on the machine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, TypeVar

from .errors import (
    GENERIC_FAILURE_MESSAGE,
    RATE_LIMIT_MESSAGE,
    InvalidTransitionError,
    RateLimitError,
    StepValidationError,
    WizardError,
    classify_failure,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StepPhase(str, Enum):
    """Phases a step (or a sub-stage of a step) moves through."""

    EMPTY = "empty"
    READY = "ready"
    GENERATING = "generating"
    DISPLAYED = "displayed"
    EDITING = "editing"
    SELECTING_VARIANT = "selecting_variant"
    ACCEPTED = "accepted"


STEP_TRANSITIONS: Dict[StepPhase, Set[StepPhase]] = {
    StepPhase.EMPTY: {StepPhase.READY},
    StepPhase.READY: {StepPhase.EMPTY, StepPhase.GENERATING, StepPhase.DISPLAYED, StepPhase.ACCEPTED},
    StepPhase.GENERATING: {StepPhase.DISPLAYED, StepPhase.SELECTING_VARIANT, StepPhase.ACCEPTED},
    StepPhase.DISPLAYED: {
        StepPhase.READY,
        StepPhase.EMPTY,
        StepPhase.GENERATING,
        StepPhase.EDITING,
        StepPhase.SELECTING_VARIANT,
        StepPhase.ACCEPTED,
    },
    StepPhase.EDITING: {StepPhase.DISPLAYED, StepPhase.SELECTING_VARIANT},
    StepPhase.SELECTING_VARIANT: {
        StepPhase.GENERATING,
        StepPhase.DISPLAYED,
        StepPhase.EDITING,
        StepPhase.ACCEPTED,
    },
    StepPhase.ACCEPTED: {StepPhase.DISPLAYED, StepPhase.GENERATING, StepPhase.EDITING},
}


@dataclass
class StepErrorInfo:
    kind: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "message": self.message}


@dataclass
class StepMachine:
    """Phase, animation flag and last error of one step or sub-stage."""

    step: int
    name: str = "main"
    phase: StepPhase = StepPhase.EMPTY
    is_animating: bool = False
    error: Optional[StepErrorInfo] = None
    history: List[tuple[str, str, str]] = field(default_factory=list)

    @property
    def label(self) -> str:
        return f"step {self.step}/{self.name}"

    @property
    def busy(self) -> bool:
        return self.phase is StepPhase.GENERATING or self.is_animating

    def can_transition(self, to_phase: StepPhase) -> bool:
        return to_phase in STEP_TRANSITIONS.get(self.phase, set())

    def transition(self, to_phase: StepPhase, reason: str = "") -> None:
        if to_phase is self.phase:
            return
        if not self.can_transition(to_phase):
            logger.warning("[%s] invalid transition %s -> %s (%s)", self.label, self.phase.value, to_phase.value, reason)
            raise InvalidTransitionError(
                f"No se puede pasar de '{self.phase.value}' a '{to_phase.value}'.", step=self.step
            )
        logger.debug("[%s] %s -> %s (%s)", self.label, self.phase.value, to_phase.value, reason)
        self.history.append((self.phase.value, to_phase.value, reason))
        self.phase = to_phase

    def _restore(self, phase: StepPhase, reason: str) -> None:
        logger.debug("[%s] rollback %s -> %s (%s)", self.label, self.phase.value, phase.value, reason)
        self.history.append((self.phase.value, phase.value, f"rollback: {reason}"))
        self.phase = phase

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def require(self, phases: Iterable[StepPhase], action: str) -> None:
        """Refuse *action* unless the machine is idle in one of *phases*."""

        allowed = set(phases)
        if self.phase is StepPhase.GENERATING:
            raise InvalidTransitionError(f"Hay una solicitud en curso; '{action}' no está disponible.", step=self.step)
        if self.phase not in allowed:
            raise InvalidTransitionError(
                f"'{action}' no está disponible en la fase '{self.phase.value}'.", step=self.step
            )

    def require_revealed(self, action: str) -> None:
        if self.is_animating:
            raise InvalidTransitionError(f"Espera a que termine de mostrarse el texto para '{action}'.", step=self.step)

    def validate(self, condition: bool, message: str) -> None:
        """Raise a validation error (and record it) when *condition* is false."""

        if condition:
            return
        self.error = StepErrorInfo(StepValidationError.kind, message)
        raise StepValidationError(message, step=self.step)

    def sync_seed(self, has_seed: bool) -> None:
        """Move between EMPTY and READY as the seed input changes."""

        if self.phase is StepPhase.EMPTY and has_seed:
            self.transition(StepPhase.READY, "seed provided")
        elif self.phase is StepPhase.READY and not has_seed:
            self.transition(StepPhase.EMPTY, "seed cleared")

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def run_request(
        self,
        action: str,
        call: Callable[[], T],
        *,
        success_phase: StepPhase | None = StepPhase.DISPLAYED,
        failure_message: str = GENERIC_FAILURE_MESSAGE,
        rate_limit_message: str = RATE_LIMIT_MESSAGE,
        animate: bool = True,
    ) -> T:
        """Run one AI call inside GENERATING, rolling back on failure."""

        previous = self.phase
        self.transition(StepPhase.GENERATING, action)
        self.error = None
        self.is_animating = False
        logger.info("[%s] requesting %s", self.label, action)
        try:
            result = call()
        except Exception as exc:
            error = classify_failure(
                exc,
                step=self.step,
                failure_message=failure_message,
                rate_limit_message=rate_limit_message,
            )
            if isinstance(error, RateLimitError):
                logger.warning("[%s] %s rate limited: %s", self.label, action, exc)
            else:
                logger.error("[%s] %s failed: %s", self.label, action, exc, exc_info=True)
            self._restore(previous, action)
            self.error = StepErrorInfo(error.kind, error.message)
            raise error from exc
        if success_phase is not None:
            self.transition(success_phase, f"{action} done")
        self.is_animating = animate
        return result

    def fail(self, error: WizardError) -> None:
        """Record an error that did not come from ``run_request``."""

        self.error = StepErrorInfo(error.kind, error.message)

    # ------------------------------------------------------------------
    # Reveal
    # ------------------------------------------------------------------

    def finish_reveal(self) -> bool:
        """Mark the animated reveal as done; returns True only the first time."""

        if not self.is_animating:
            return False
        self.is_animating = False
        logger.debug("[%s] reveal complete", self.label)
        return True

    def snapshot(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "is_animating": self.is_animating,
            "error": self.error.to_dict() if self.error else None,
        }


class VariantReveal:
    """Reveal variants strictly one after another.

    Variant ``i + 1`` only becomes visible after variant ``i`` signalled that its
    reveal finished.
    """

    def __init__(self, options: List[str] | None = None) -> None:
        self.options: List[str] = list(options or [])
        self.animating_index = 0
        self.selected_index: Optional[int] = None

    def reset(self, options: List[str]) -> None:
        self.options = list(options)
        self.animating_index = 0
        self.selected_index = None

    @property
    def visible(self) -> List[str]:
        return self.options[: self.animating_index + 1]

    @property
    def all_revealed(self) -> bool:
        return self.animating_index >= len(self.options)

    @property
    def current(self) -> Optional[str]:
        if self.all_revealed:
            return None
        return self.options[self.animating_index]

    def complete(self, index: int) -> bool:
        """Advance when the variant currently animating finishes; stale signals are ignored."""

        if index != self.animating_index or self.all_revealed:
            return False
        self.animating_index += 1
        return True

    def select(self, index: int) -> str:
        if index < 0 or index >= len(self.options):
            raise StepValidationError("La opción seleccionada no existe.")
        if index > self.animating_index:
            raise InvalidTransitionError("Esa opción aún no se ha mostrado.")
        self.selected_index = index
        return self.options[index]

    @property
    def selected(self) -> Optional[str]:
        if self.selected_index is None:
            return None
        return self.options[self.selected_index]

    def clear(self) -> None:
        self.options = []
        self.animating_index = 0
        self.selected_index = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "options": self.visible,
            "total": len(self.options),
            "animating_index": self.animating_index,
            "selected_index": self.selected_index,
        }
