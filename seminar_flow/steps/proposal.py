"""Step 12: project proposal articulated from the student's value proposition."""

from __future__ import annotations

from typing import Any, Dict

from ..errors import GenerationError, RateLimitError
from ..lifecycle import StepPhase
from ..prompts import PROPOSAL_INTRO_FALLBACK, proposal_intro_prompt, proposal_prompt
from .base import REVIEW_PHASES, StepComponent, StepEnvironment

INTRO_FAILURE_MESSAGE = "No se pudo generar el resumen introductorio. Se usará un texto estándar."
VALUE_PROPOSITION_REQUIRED_MESSAGE = "Por favor, escribe tu propuesta de valor."
PROPOSAL_FAILURE_MESSAGE = "Error al articular las propuestas."


class ProjectProposalStep(StepComponent):
    number = 12

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.proposal = self.add_stage("main")
        self.intro = self.add_stage("intro")
        self.value_proposition = ""

    def generate_intro(self) -> str:
        """Summarise earlier findings; a standard text is used when the request fails."""

        spec = proposal_intro_prompt(self.project)
        try:
            return self.intro.generate(
                "resumen introductorio",
                lambda: self.client.generate_text(spec),
                failure_message=INTRO_FAILURE_MESSAGE,
                rate_limit_message=INTRO_FAILURE_MESSAGE,
            )
        except (RateLimitError, GenerationError) as exc:
            self.intro.show(PROPOSAL_INTRO_FALLBACK)
            self.intro.machine.fail(exc)
            return self.intro.content

    def set_value_proposition(self, text: str) -> None:
        self.value_proposition = text
        self.proposal.machine.sync_seed(bool(text.strip()))

    def articulate(self, iteration: bool = False) -> str:
        machine = self.proposal.machine
        machine.require(
            (StepPhase.EMPTY, StepPhase.READY, StepPhase.DISPLAYED, StepPhase.ACCEPTED), "articular propuesta"
        )
        machine.validate(bool(self.value_proposition.strip()), VALUE_PROPOSITION_REQUIRED_MESSAGE)
        if iteration:
            machine.require(REVIEW_PHASES, "iterar")
        spec = proposal_prompt(self.project, self.value_proposition.strip(), iteration=iteration)
        return self.proposal.generate(
            "iterar propuesta" if iteration else "articular propuesta",
            lambda: self.client.generate_text(spec),
            failure_message=PROPOSAL_FAILURE_MESSAGE,
        )

    def payload(self) -> str:
        return self.proposal.content

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["value_proposition"] = self.value_proposition
        return data
