"""Step 15: final report generated from every accepted step."""

from __future__ import annotations

from typing import Any, Dict, List

from ..lifecycle import StepPhase
from ..markup import strip_html
from ..prompts import final_report_prompt
from .base import REVIEW_PHASES, StepComponent, StepEnvironment

REPORT_FAILURE_MESSAGE = "Error al generar el informe."

LOADING_PHRASES: List[str] = [
    "Compilando tu perfil y preferencias...",
    "Analizando la exploración temática...",
    "Sintetizando el marco disciplinar...",
    "Estructurando tu contribución personal...",
    "Integrando la pregunta de investigación y la hipótesis...",
    "Detallando los objetivos del proyecto...",
    "Compilando el análisis de referentes...",
    "Articulando la propuesta de proyecto...",
    "Generando la planificación y carta Gantt...",
    "Dando los toques finales al informe...",
]


def report_filename(nombre: str | None, proposal: str) -> str:
    """``Esto no es una Memoria_{name}_{first five words of the proposal}.pdf``."""

    title = " ".join((strip_html(proposal).strip() or "Mi Proyecto").split()[:5])
    return f"Esto no es una Memoria_{nombre or 'usuario'}_{title}.pdf"


class FinalReportStep(StepComponent):
    number = 15

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.report = self.add_stage("main")

    def generate(self, robustify: bool = False) -> str:
        """Generate the report; the first successful generation accepts step 15.

        Robustifying rewrites the whole document, manual edits included.
        """

        if robustify:
            self.report.machine.require(REVIEW_PHASES, "robustecer")
        else:
            # Once a document exists only robustify may replace it.
            self.report.machine.require((StepPhase.EMPTY, StepPhase.READY), "generar informe")
        spec = final_report_prompt(self.project, robustify=robustify, current_report=self.report.content)
        html = self.report.generate(
            "robustecer informe" if robustify else "generar informe",
            lambda: self.client.generate_text(spec),
            failure_message=REPORT_FAILURE_MESSAGE,
        )
        if not robustify and self.accepted_payload is None:
            self._report(html)
        return html

    def payload(self) -> str:
        return self.report.content

    @property
    def filename(self) -> str:
        project = self.project
        return report_filename(project.profile.nombre if project.profile else None, project.project_proposal)

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["loading_phrases"] = LOADING_PHRASES
        data["filename"] = self.filename
        data["exportable"] = self.report.has_content and self.report.phase is not StepPhase.GENERATING
        return data
