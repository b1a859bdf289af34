"""Step 6: user research (summary, persona, interview guides)."""

from __future__ import annotations

from typing import Any, Dict

from ..errors import InvalidTransitionError, StepValidationError
from ..lifecycle import StepPhase
from ..markup import markdown_bold_to_html, newlines_to_breaks
from ..prompts import interview_guide_prompt, persona_prompt, project_summary_prompt
from ..schemas import UserResearchData
from .base import REVIEW_PHASES, StepComponent, StepEnvironment, TextStage

SUMMARY_FAILURE_MESSAGE = "Error al generar el resumen del proyecto. Intenta recargar."
PERSONA_FAILURE_MESSAGE = "Error al generar el User Persona. Inténtalo de nuevo."
GUIDE_FAILURE_MESSAGE = "Error al generar la guía. Inténtalo de nuevo."
SUMMARY_REQUIRED_MESSAGE = "Primero genera el resumen del proyecto."
INPUTS_REQUIRED_MESSAGE = "Por favor, completa necesidades, comportamientos y frustraciones para crear el User Persona."
PERSONA_REQUIRED_MESSAGE = "Acepta el User Persona antes de generar las guías de entrevista."

GUIDE_KINDS = ("qualitative", "quantitative")


class UserResearchStep(StepComponent):
    number = 6

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.summary = self.add_stage("summary")
        self.persona = self.add_stage("persona")
        self.guides = {kind: self.add_stage(kind) for kind in GUIDE_KINDS}
        self.needs = ""
        self.behaviors = ""
        self.pains = ""

    @property
    def phase(self) -> StepPhase:
        if all(guide.phase is StepPhase.ACCEPTED for guide in self.guides.values()):
            return StepPhase.ACCEPTED
        if self.persona.phase is not StepPhase.EMPTY:
            return self.persona.phase
        return self.summary.phase

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def generate_summary(self) -> str:
        spec = project_summary_prompt(self.project)
        return self.summary.generate(
            "resumen",
            lambda: markdown_bold_to_html(newlines_to_breaks(self.client.generate_text(spec))),
            failure_message=SUMMARY_FAILURE_MESSAGE,
        )

    def begin_edit(self, target: str = "main") -> str:
        if target == "summary" and self.persona.has_content:
            raise InvalidTransitionError("El resumen ya no se puede editar tras crear el User Persona.", step=self.number)
        return super().begin_edit(self._target(target))

    def save_edit(self, text: str, target: str = "main") -> str:
        return super().save_edit(text, self._target(target))

    def cancel_edit(self, target: str = "main") -> None:
        super().cancel_edit(self._target(target))

    def reveal_content(self, target: str = "main", index: int | None = None) -> str:
        return super().reveal_content(self._target(target), index)

    def reveal_complete(self, target: str = "main", index: int | None = None) -> bool:
        return super().reveal_complete(self._target(target), index)

    def _target(self, target: str) -> str:
        return "persona" if target == "main" else target

    # ------------------------------------------------------------------
    # Persona
    # ------------------------------------------------------------------

    def set_inputs(self, needs: str | None = None, behaviors: str | None = None, pains: str | None = None) -> None:
        if needs is not None:
            self.needs = needs
        if behaviors is not None:
            self.behaviors = behaviors
        if pains is not None:
            self.pains = pains

    def generate_persona(self, iteration: bool = False) -> str:
        machine = self.persona.machine
        machine.require(
            (StepPhase.EMPTY, StepPhase.READY, StepPhase.DISPLAYED, StepPhase.ACCEPTED), "crear User Persona"
        )
        machine.validate(self.summary.has_content and not self.summary.machine.busy, SUMMARY_REQUIRED_MESSAGE)
        machine.validate(
            all(value.strip() for value in (self.needs, self.behaviors, self.pains)), INPUTS_REQUIRED_MESSAGE
        )
        if iteration:
            machine.require(REVIEW_PHASES, "iterar")
        spec = persona_prompt(self.summary.content, self.needs, self.behaviors, self.pains, iteration=iteration)
        return self.persona.generate(
            "iterar User Persona" if iteration else "crear User Persona",
            lambda: self.client.generate_text(spec),
            failure_message=PERSONA_FAILURE_MESSAGE,
        )

    def accept_persona(self) -> str:
        self.persona.accept()
        return self.persona.content

    # ------------------------------------------------------------------
    # Interview guides
    # ------------------------------------------------------------------

    def guide(self, kind: str) -> TextStage:
        if kind not in self.guides:
            raise StepValidationError(f"Tipo de guía desconocido: '{kind}'.", step=self.number)
        return self.guides[kind]

    def generate_guide(self, kind: str, robustify: bool = False) -> str:
        stage = self.guide(kind)
        stage.machine.validate(self.persona.phase is StepPhase.ACCEPTED, PERSONA_REQUIRED_MESSAGE)
        if robustify:
            stage.machine.require(REVIEW_PHASES, "robustecer")
            spec = interview_guide_prompt(self.persona.content, kind, previous_guide=stage.content)
        else:
            stage.machine.require((StepPhase.EMPTY, StepPhase.READY), "generar guía")
            spec = interview_guide_prompt(self.persona.content, kind)
        return stage.generate(
            f"robustecer guía {kind}" if robustify else f"generar guía {kind}",
            lambda: self.client.generate_text(spec),
            failure_message=GUIDE_FAILURE_MESSAGE,
        )

    def accept_guide(self, kind: str) -> Any:
        """Accept one guide; the step itself is accepted once both guides are."""

        if self.guide(kind).accept() and all(g.phase is StepPhase.ACCEPTED for g in self.guides.values()):
            self._report(self.payload())
        return self.accepted_payload

    def accept(self) -> Any:
        for kind in GUIDE_KINDS:
            self.accept_guide(kind)
        return self.accepted_payload

    def payload(self) -> UserResearchData:
        return UserResearchData(
            persona=self.persona.content,
            needs=self.needs,
            behaviors=self.behaviors,
            pains=self.pains,
            qualitative_guide=self.guides["qualitative"].content,
            quantitative_guide=self.guides["quantitative"].content,
        )

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["inputs"] = {"needs": self.needs, "behaviors": self.behaviors, "pains": self.pains}
        return data
