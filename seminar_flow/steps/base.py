"""Shared building blocks for wizard step components."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..errors import GENERIC_FAILURE_MESSAGE, RATE_LIMIT_MESSAGE, StepValidationError
from ..lifecycle import StepErrorInfo, StepMachine, StepPhase
from ..llm import GenerativeClient
from ..markup import plain_to_html, sanitize_html, strip_html
from ..schemas import ProjectData
from ..storage import LocalStore

logger = logging.getLogger(__name__)

GENERATE_FROM = (StepPhase.EMPTY, StepPhase.READY, StepPhase.DISPLAYED, StepPhase.ACCEPTED)
REVIEW_PHASES = (StepPhase.DISPLAYED, StepPhase.ACCEPTED)


@dataclass
class StepEnvironment:
    """Collaborators a step needs from the wizard that owns it."""

    client: GenerativeClient
    project: Callable[[], ProjectData]
    report: Callable[[int, Any], None]
    store: LocalStore
    typewriter_ms: int = 15


class TextStage:
    """One AI-generated formatted text with its own life cycle."""

    def __init__(self, step: int, name: str = "main") -> None:
        self.machine = StepMachine(step, name)
        self.content = ""
        self.edited_manually = False

    @property
    def phase(self) -> StepPhase:
        return self.machine.phase

    @property
    def has_content(self) -> bool:
        return bool(self.content.strip())

    def generate(
        self,
        action: str,
        call: Callable[[], str],
        *,
        success_phase: StepPhase = StepPhase.DISPLAYED,
        failure_message: str = GENERIC_FAILURE_MESSAGE,
        rate_limit_message: str = RATE_LIMIT_MESSAGE,
    ) -> str:
        """Run *call* and store its sanitised markup as the new content."""

        self.machine.require(GENERATE_FROM, action)
        self.machine.require_revealed(action)
        self.machine.sync_seed(True)
        html = self.machine.run_request(
            action,
            lambda: sanitize_html(call()),
            success_phase=success_phase,
            failure_message=failure_message,
            rate_limit_message=rate_limit_message,
        )
        self.content = html
        self.edited_manually = False
        return html

    def show(self, html: str, *, animate: bool = False) -> None:
        """Display locally produced markup (fallbacks, restored values)."""

        if self.machine.phase is StepPhase.EMPTY:
            self.machine.sync_seed(True)
        if self.machine.phase is not StepPhase.DISPLAYED:
            self.machine.transition(StepPhase.DISPLAYED, "shown")
        self.content = sanitize_html(html)
        self.machine.is_animating = animate and bool(self.content)

    def begin_edit(self) -> str:
        self.machine.require(REVIEW_PHASES, "editar")
        self.machine.require_revealed("editar")
        self.machine.transition(StepPhase.EDITING, "edit")
        return strip_html(self.content)

    def save_edit(self, text: str) -> str:
        self.machine.require((StepPhase.EDITING,), "guardar")
        self.content = plain_to_html(text)
        self.edited_manually = True
        self.machine.transition(StepPhase.DISPLAYED, "edit saved")
        self.machine.is_animating = False
        return self.content

    def cancel_edit(self) -> None:
        self.machine.require((StepPhase.EDITING,), "cancelar")
        self.machine.transition(StepPhase.DISPLAYED, "edit cancelled")

    def accept(self, message: str = "No hay contenido para aceptar.") -> bool:
        """Freeze the content; returns False when it was already accepted."""

        self.machine.require(REVIEW_PHASES, "aceptar")
        self.machine.require_revealed("aceptar")
        if self.machine.phase is StepPhase.ACCEPTED:
            return False
        self.machine.validate(self.has_content, message)
        self.machine.transition(StepPhase.ACCEPTED, "accepted")
        return True

    def reopen(self) -> None:
        self.machine.require((StepPhase.ACCEPTED,), "reabrir")
        self.machine.transition(StepPhase.DISPLAYED, "reopened")

    def snapshot(self) -> Dict[str, Any]:
        data = self.machine.snapshot()
        data["content"] = self.content
        data["edited_manually"] = self.edited_manually
        return data


class StepComponent:
    """Base class for the fifteen step components.

    Subclasses register their ``TextStage`` objects in ``self.stages``; the first
    one is the stage the step's phase and typewriter default to.
    """

    number = 0
    accept_label = "Aceptar"

    def __init__(self, env: StepEnvironment) -> None:
        self.env = env
        self.stages: Dict[str, TextStage] = {}
        self.accepted_payload: Any = None

    def add_stage(self, name: str) -> TextStage:
        stage = TextStage(self.number, name)
        self.stages[name] = stage
        return stage

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    @property
    def client(self) -> GenerativeClient:
        return self.env.client

    @property
    def project(self) -> ProjectData:
        return self.env.project()

    @property
    def student_name(self) -> str:
        profile = self.project.profile
        return profile.nombre if profile else "estudiante"

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def main(self) -> TextStage:
        return next(iter(self.stages.values()))

    @property
    def phase(self) -> StepPhase:
        return self.main.phase

    @property
    def busy(self) -> bool:
        return any(stage.machine.busy for stage in self.stages.values())

    @property
    def error(self) -> Optional[StepErrorInfo]:
        for stage in self.stages.values():
            if stage.machine.error:
                return stage.machine.error
        return None

    def stage(self, name: str) -> TextStage:
        try:
            return self.stages[name]
        except KeyError:
            raise StepValidationError(f"El paso {self.number} no tiene la sección '{name}'.", step=self.number) from None

    def data(self) -> Dict[str, Any]:
        return {name: stage.snapshot() for name, stage in self.stages.items()}

    # ------------------------------------------------------------------
    # Typewriter hooks
    # ------------------------------------------------------------------

    def reveal_content(self, target: str = "main", index: int | None = None) -> str:
        return self.stage(target).content

    def reveal_complete(self, target: str = "main", index: int | None = None) -> bool:
        finished = self.stage(target).machine.finish_reveal()
        if finished:
            self.on_revealed(target)
        return finished

    def on_revealed(self, target: str) -> None:
        """Hook run once when a stage's reveal completes."""

    # ------------------------------------------------------------------
    # Edit / accept
    # ------------------------------------------------------------------

    def begin_edit(self, target: str = "main") -> str:
        return self.stage(target).begin_edit()

    def save_edit(self, text: str, target: str = "main") -> str:
        return self.stage(target).save_edit(text)

    def cancel_edit(self, target: str = "main") -> None:
        self.stage(target).cancel_edit()

    def payload(self) -> Any:
        return self.main.content

    def accept(self) -> Any:
        if self.main.accept():
            self._report(self.payload())
        return self.accepted_payload

    def reopen(self, target: str = "main") -> None:
        self.stage(target).reopen()

    def _report(self, payload: Any) -> None:
        logger.info("Step %s accepted", self.number)
        self.accepted_payload = payload
        self.env.report(self.number, payload)
