"""Wizard shell: step registry, navigation gating, countdown and aggregate project data."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from .config import Settings
from .errors import InvalidTransitionError, StepValidationError
from .llm import GenerativeClient
from .schemas import ProjectData, StepDefinition, StepSnapshot, TOTAL_STEPS, WizardSnapshot
from .steps import STEP_COMPONENTS, StepComponent, StepEnvironment
from .storage import LocalStore
from .timebox import Timebox

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Step registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StepInfo:
    """Title and default subtitle shown above a step."""

    number: int
    title: str
    subtitle: str


STEP_INFO: Dict[int, StepInfo] = {
    info.number: info
    for info in (
        StepInfo(1, "Bienvenida", "Comencemos por conocerte un poco mejor."),
        StepInfo(
            2,
            "¿Cuál es tu tema?",
            "¿Qué te apasiona? ¿Qué te hace olvidar el tiempo y estar horas en algo? ¿Qué amas? ¿Qué aprecias? "
            "¿Qué cuidas? ¿A qué tema quieres contribuir?",
        ),
        StepInfo(
            3,
            "¿Cómo se vincula tu tema con el diseño?",
            "¿Qué ámbito del diseño está relacionado con tu tema? (Ej: diseño de servicios, diseño especulativo, "
            "diseño industrial, diseño urbano, etc.)",
        ),
        StepInfo(
            4,
            "¿Cómo Ayudar?",
            "Pensemos en cómo tu proyecto o enfoque puede contribuir a resolver el problema detectado. Desde tu "
            "perspectiva, ¿cómo podrías aportar desde el diseño?",
        ),
        StepInfo(
            5,
            "Oportunidad de Diseño",
            "Identifiquemos las oportunidades de diseño. ¿Dónde crees que existen brechas que podrían ser cubiertas "
            "desde el diseño? Piensa en vacíos, necesidades no resueltas o tensiones visibles en tu tema.",
        ),
        StepInfo(
            6,
            "¡Revisa y corrige el prompt de resumen!",
            "El texto a continuación es un resumen generado por IA de todo lo que has trabajado. Puedes editarlo "
            "antes de continuar.",
        ),
        StepInfo(7, "Pregunta de investigación", "Formula la pregunta central que guiará todo tu proyecto."),
        StepInfo(
            8, "Hipótesis", "Define tu suposición inicial. ¿Qué esperas que suceda como resultado de tu proyecto?"
        ),
        StepInfo(9, "Objetivo General", "Establece la meta principal y más amplia de tu investigación."),
        StepInfo(10, "Objetivos Específicos", "Desglosa tu objetivo general en metas más pequeñas y manejables."),
        StepInfo(
            11,
            "Análisis de Referentes",
            "Busca y analiza proyectos y teorías que inspiren y fundamenten tu trabajo.",
        ),
        StepInfo(12, "Proyecto", "Es hora de articular una propuesta de valor clara y definir tu proyecto."),
        StepInfo(
            13,
            "Evaluación",
            "Usemos una rúbrica oficial para evaluar la fortaleza de tu proyecto e identificar mejoras.",
        ),
        StepInfo(
            14,
            "Plan de Trabajo",
            "Organicemos las tareas clave en un cronograma realista para el próximo semestre.",
        ),
        StepInfo(
            15,
            "Informe Final",
            "Reúne todo tu trabajo en un documento final, listo para ser presentado y descargado.",
        ),
    )
}

BANNER_PHRASES: List[str] = [
    "Tu IA, entrenada con lo que te exige tu profesor.",
    "Calendario y normativas universitario integrado.",
    "Investiga con foco, avanza con sentido.",
    "Aprende haciendo, aprende investigando.",
    "Tus fechas clave, siempre presentes.",
    "Fuentes confiables, respuestas precisas.",
    "De la idea al proyecto, con estructura.",
    "Diseña con datos, reflexiona con apoyo.",
]

# Aggregate field filled by each step's accepted payload (steps 2-4 report dicts).
PROJECT_FIELDS: Dict[int, str] = {
    1: "profile",
    5: "projectGapAnalysis",
    6: "userResearchData",
    7: "researchQuestion",
    8: "hypothesis",
    9: "generalObjective",
    10: "specificObjectives",
    11: "referenceAnalysis",
    12: "projectProposal",
    13: "projectEvaluation",
    14: "workPlan",
}

TIMER_FIRST_STEP = 2


def list_step_definitions() -> List[StepDefinition]:
    """Return step metadata in display order."""

    return [StepDefinition(number=n, title=info.title, subtitle=info.subtitle) for n, info in STEP_INFO.items()]


# ---------------------------------------------------------------------------
# Wizard
# ---------------------------------------------------------------------------


class Wizard:
    """State of one student's pass through the fifteen steps."""

    def __init__(
        self,
        session_id: str,
        *,
        client: GenerativeClient,
        store: LocalStore,
        settings: Settings,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.session_id = session_id
        self.store = store
        self.current_step = 1
        self.accepted: Dict[int, bool] = {n: False for n in STEP_INFO}
        self.payloads: Dict[int, Any] = {}
        self.show_design_portals_popup = False
        self.timer = Timebox(settings.step_seconds, extend_by=settings.extend_seconds, clock=clock)
        env = StepEnvironment(
            client=client,
            project=self.project_data,
            report=self.record_acceptance,
            store=store,
            typewriter_ms=settings.typewriter_ms,
        )
        self.components: Dict[int, StepComponent] = {n: cls(env) for n, cls in STEP_COMPONENTS.items()}

        stored_profile = self.components[1].profile
        if stored_profile is not None:
            logger.info("Session %s resumed stored profile for %s", session_id, stored_profile.nombre)
            self.record_acceptance(1, stored_profile)

    # ------------------------------------------------------------------
    # Accepted data
    # ------------------------------------------------------------------

    def record_acceptance(self, step: int, payload: Any) -> None:
        """Store the payload of an accepted step; the accepted flag is never cleared."""

        self.payloads[step] = payload
        self.accepted[step] = True
        logger.debug("Session %s: step %s accepted", self.session_id, step)

    def project_data(self) -> ProjectData:
        """Snapshot of accepted values only."""

        data: Dict[str, Any] = {}
        for step, payload in sorted(self.payloads.items()):
            if isinstance(payload, dict):
                data.update(payload)
            elif step in PROJECT_FIELDS:
                data[PROJECT_FIELDS[step]] = payload
        return ProjectData.model_validate(data)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def component(self, step: int | None = None) -> StepComponent:
        number = self.current_step if step is None else step
        if number not in self.components:
            raise StepValidationError(f"El paso {number} no existe.")
        return self.components[number]

    @property
    def current(self) -> StepComponent:
        return self.components[self.current_step]

    def subtitle(self, step: int | None = None) -> str:
        """Subtitle for *step*, phrased around earlier answers when they exist."""

        number = self.current_step if step is None else step
        project = self.project_data()
        topic = self.components[2].draft.strip()
        if number == 3 and topic:
            return f'Pensando en tu interés por "{topic}", ¿desde qué ámbito del diseño crees que podrías abordarlo mejor?'
        if number == 4 and self.components[3].draft.strip():
            return (
                "A partir de tu reflexión sobre la conexión del diseño con tu tema, pensemos: "
                "¿cómo podrías aportar para generar impacto?"
            )
        if number == 5 and topic:
            return (
                f'Considerando tu tema "{topic}", ¿dónde crees que existen brechas o necesidades no resueltas '
                "que podrían ser cubiertas desde el diseño?"
            )
        if number == 6 and project.project_gap_analysis:
            return (
                "A partir de la oportunidad de diseño que identificaste, revisemos el panorama completo de tu "
                "proyecto para definir a quién entrevistar."
            )
        if number == 7 and project.user_research_data and project.user_research_data.persona:
            return (
                "A partir del perfil de usuario que has definido, formulemos ahora la pregunta de investigación "
                "central."
            )
        if number == 8 and project.research_question:
            return (
                "Con la pregunta de investigación ya definida, ¿cuál es tu predicción? Define tu suposición inicial "
                "sobre los resultados de tu proyecto."
            )
        if number == 9 and project.research_question:
            return (
                "Con tu pregunta de investigación como guía, establece ahora la meta principal y más amplia de tu "
                "proyecto."
            )
        if number == 10 and project.general_objective:
            return "Para lograr tu objetivo general, desglosemos ahora el plan en metas más pequeñas y manejables."
        if number == 11 and any(o.strip() for o in self.components[10].objectives):
            return (
                "Con tus objetivos específicos en mente, busca y analiza proyectos y teorías que inspiren y "
                "fundamenten tu trabajo."
            )
        if number == 12 and project.reference_analysis and project.reference_analysis.references:
            return (
                "Inspirado por los referentes que has analizado, es hora de articular una propuesta de valor clara "
                "y definir tu proyecto."
            )
        return STEP_INFO[number].subtitle

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def next_disabled(self) -> bool:
        if self.current.busy:
            return True
        if self.current_step >= TOTAL_STEPS:
            return True
        if self.current_step == 1:
            return self.components[1].profile is None
        if self.current_step == 2:
            return not self.components[2].draft.strip() or not self.accepted[2]
        return not self.accepted[self.current_step]

    def next(self) -> int:
        if self.next_disabled:
            raise InvalidTransitionError("Completa este paso antes de continuar.", step=self.current_step)
        self._move_to(self.current_step + 1)
        return self.current_step

    def prev(self) -> int:
        if self.current_step > 1:
            self._move_to(self.current_step - 1)
        return self.current_step

    def _move_to(self, step: int) -> None:
        logger.info("Session %s: step %s -> %s", self.session_id, self.current_step, step)
        self.current_step = step
        self.timer.reset()
        self.show_design_portals_popup = False
        if step == 2:
            self.show_design_portals_popup = self.store.consume_portals_popup()

    # ------------------------------------------------------------------
    # Countdown
    # ------------------------------------------------------------------

    @property
    def timer_visible(self) -> bool:
        return self.current_step >= TIMER_FIRST_STEP

    def extend_timer(self) -> None:
        self.timer.extend()

    def continue_after_timeout(self) -> int:
        """Dismiss the time-up prompt and advance when the step allows it."""

        if not self.next_disabled:
            self._move_to(self.current_step + 1)
        return self.current_step

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def step_snapshot(self, step: int | None = None) -> StepSnapshot:
        number = self.current_step if step is None else step
        component = self.component(number)
        error = component.error
        return StepSnapshot(
            step=number,
            title=STEP_INFO[number].title,
            phase=component.phase.value,
            is_animating=component.busy,
            accepted=self.accepted[number],
            error=error.to_dict() if error else None,
            data=component.data(),
        )

    def snapshot(self) -> WizardSnapshot:
        info = STEP_INFO[self.current_step]
        return WizardSnapshot(
            session_id=self.session_id,
            current_step=self.current_step,
            total_steps=TOTAL_STEPS,
            title=info.title,
            subtitle=self.subtitle(),
            accepted_steps=dict(self.accepted),
            next_disabled=self.next_disabled,
            prev_disabled=self.current_step <= 1,
            profile=self.components[1].profile,
            show_design_portals_popup=self.show_design_portals_popup,
            timer=self.timer.state(visible=self.timer_visible),
            step=self.step_snapshot(),
        )
