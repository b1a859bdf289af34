"""Step 13: rubric evaluation and the main improvement gaps."""

from __future__ import annotations

from typing import Any

from ..lifecycle import StepPhase
from ..prompts import evaluation_prompt, improvement_gaps_prompt
from ..schemas import EvaluationData
from .base import REVIEW_PHASES, StepComponent, StepEnvironment

EVALUATION_FAILURE_MESSAGE = "Error al realizar la evaluación."
GAPS_FAILURE_MESSAGE = "Error al identificar las brechas."
GAPS_REQUIRED_MESSAGE = "Primero identifica las principales brechas de mejora."


class ProjectEvaluationStep(StepComponent):
    number = 13

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.evaluation = self.add_stage("main")
        self.brechas = self.add_stage("brechas")

    def evaluate(self) -> str:
        spec = evaluation_prompt(self.project)
        return self.evaluation.generate(
            "evaluar proyecto",
            lambda: self.client.generate_text(spec),
            failure_message=EVALUATION_FAILURE_MESSAGE,
        )

    def identify_brechas(self, reprioritize: bool = False) -> str:
        self.evaluation.machine.require(REVIEW_PHASES, "identificar brechas")
        self.evaluation.machine.require_revealed("identificar brechas")
        if reprioritize:
            self.brechas.machine.require(REVIEW_PHASES, "repriorizar")
        spec = improvement_gaps_prompt(self.evaluation.content, reprioritize=reprioritize)
        return self.brechas.generate(
            "repriorizar brechas" if reprioritize else "identificar brechas",
            lambda: self.client.generate_text(spec),
            failure_message=GAPS_FAILURE_MESSAGE,
        )

    @property
    def phase(self) -> StepPhase:
        if self.brechas.phase is StepPhase.ACCEPTED:
            return StepPhase.ACCEPTED
        return self.evaluation.phase

    def accept(self) -> Any:
        self.brechas.machine.validate(self.brechas.has_content, GAPS_REQUIRED_MESSAGE)
        self.evaluation.machine.require(REVIEW_PHASES, "aceptar")
        self.evaluation.machine.require_revealed("aceptar")
        if self.brechas.accept():
            if self.evaluation.phase is StepPhase.DISPLAYED:
                self.evaluation.accept()
            self._report(self.payload())
        return self.accepted_payload

    def payload(self) -> EvaluationData:
        return EvaluationData(evaluation=self.evaluation.content, brechas=self.brechas.content)
