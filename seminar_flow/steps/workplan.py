"""Step 14: three tasks, key activities and the semester Gantt chart."""

from __future__ import annotations

from typing import Any, Dict, List

from ..errors import InvalidTransitionError, StepValidationError
from ..lifecycle import StepPhase
from ..prompts import gantt_prompt, key_activities_prompt
from ..schemas import WorkPlanData, WorkPlanTask
from .base import StepComponent, StepEnvironment

ACTIVITIES_FAILURE_MESSAGE = "Error al generar las actividades clave."
PLAN_FAILURE_MESSAGE = "Error al generar el plan de trabajo."
TASKS_REQUIRED_MESSAGE = "Por favor, define las tres tareas principales."
ACTIVITIES_PENDING_MESSAGE = "Espera a que terminen de mostrarse las actividades clave."

# Semester weeks as (column label, week number), August to December.
SEMESTER_WEEKS: List[tuple[str, int]] = (
    [(f"Ag-S{n}", n) for n in range(1, 5)]
    + [(f"Sep-S{n}", n + 4) for n in range(1, 5)]
    + [(f"Oct-S{n}", n + 8) for n in range(1, 5)]
    + [(f"Nov-S{n}", n + 12) for n in range(1, 5)]
    + [(f"Dic-S{n}", n + 16) for n in range(1, 4)]
)


class WorkPlanStep(StepComponent):
    number = 14

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.plan = self.add_stage("main")
        self.activities = self.add_stage("activities")
        self.tasks: List[WorkPlanTask] = [WorkPlanTask(id=n) for n in (1, 2, 3)]

    def set_task(self, task_id: int, text: str) -> List[WorkPlanTask]:
        if task_id not in (1, 2, 3):
            raise StepValidationError("Solo hay tres tareas principales.", step=self.number)
        self.tasks = [WorkPlanTask(id=t.id, text=text) if t.id == task_id else t for t in self.tasks]
        return self.tasks

    def generate_activities(self) -> str:
        spec = key_activities_prompt(self.project)
        return self.activities.generate(
            "actividades clave",
            lambda: self.client.generate_text(spec),
            failure_message=ACTIVITIES_FAILURE_MESSAGE,
        )

    @property
    def activities_revealed(self) -> bool:
        return self.activities.has_content and not self.activities.machine.busy

    def generate_plan(self) -> str:
        """Build the Gantt table; refused while a task is blank or activities are still revealing."""

        machine = self.plan.machine
        machine.validate(all(task.text.strip() for task in self.tasks), TASKS_REQUIRED_MESSAGE)
        if not self.activities_revealed:
            machine.fail(InvalidTransitionError(ACTIVITIES_PENDING_MESSAGE, step=self.number))
            raise InvalidTransitionError(ACTIVITIES_PENDING_MESSAGE, step=self.number)
        gaps = self.project.project_evaluation.brechas if self.project.project_evaluation else ""
        spec = gantt_prompt(self.tasks, gaps)
        return self.plan.generate(
            "carta Gantt",
            lambda: self.client.generate_text(spec),
            failure_message=PLAN_FAILURE_MESSAGE,
        )

    def payload(self) -> WorkPlanData:
        return WorkPlanData(tasks=list(self.tasks), gantt_chart=self.plan.content)

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["tasks"] = [task.model_dump() for task in self.tasks]
        data["weeks"] = [label for label, _ in SEMESTER_WEEKS]
        data["activities_revealed"] = self.activities_revealed
        return data

    @property
    def phase(self) -> StepPhase:
        if self.plan.phase is StepPhase.EMPTY and self.activities.phase is not StepPhase.EMPTY:
            return self.activities.phase
        return self.plan.phase
