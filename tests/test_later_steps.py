from __future__ import annotations

import pytest

from seminar_flow.errors import InvalidTransitionError, StepValidationError
from seminar_flow.journey import Wizard
from seminar_flow.prompts import PROPOSAL_INTRO_FALLBACK
from seminar_flow.steps.report import report_filename
from seminar_flow.steps.workplan import SEMESTER_WEEKS, TASKS_REQUIRED_MESSAGE

from conftest import FakeClient

GANTT = (
    '<table><tr><th>Tarea</th><th>Ag-S1</th></tr>'
    '<tr><td>Investigar</td><td style="background-color: #4CAF50;"></td></tr></table>'
)


# ---------------------------------------------------------------------------
# Step 6
# ---------------------------------------------------------------------------


def test_user_research_flow(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[6]
    fake_client.queue(
        "**Tema:** agua\nPúblico: barrios",
        "<p>Persona: Rosa, 67 años</p>",
        "<ol><li>¿Cómo usas el agua?</li></ol>",
        "<ol><li>Del 1 al 5...</li></ol>",
    )

    step.generate_summary()
    assert "<strong>Tema:</strong> agua<br>" in step.summary.content
    step.reveal_complete("summary")

    with pytest.raises(StepValidationError):
        step.generate_persona()

    step.set_inputs(needs="Acceso", behaviors="Acarrea baldes", pains="Cortes")
    step.generate_persona()
    step.reveal_complete()

    with pytest.raises(StepValidationError):
        step.generate_guide("qualitative")

    step.accept_persona()
    with pytest.raises(InvalidTransitionError):
        step.begin_edit("summary")

    for kind in ("qualitative", "quantitative"):
        step.generate_guide(kind)
        step.reveal_complete(kind)

    step.accept_guide("qualitative")
    assert wizard.accepted[6] is False
    step.accept_guide("quantitative")

    research = wizard.project_data().user_research_data
    assert wizard.accepted[6] is True
    assert research.persona == "<p>Persona: Rosa, 67 años</p>"
    assert research.pains == "Cortes"
    assert "1 al 5" in research.quantitative_guide


def test_unknown_guide_kind(wizard: Wizard) -> None:
    with pytest.raises(StepValidationError):
        wizard.components[6].generate_guide("mixta")


# ---------------------------------------------------------------------------
# Steps 12-13
# ---------------------------------------------------------------------------


def test_proposal_intro_falls_back_on_failure(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[12]
    fake_client.queue(RuntimeError("boom"))

    assert step.generate_intro() == PROPOSAL_INTRO_FALLBACK
    assert step.error.kind == "generation"


def test_value_proposition_required(wizard: Wizard, fake_client: FakeClient) -> None:
    with pytest.raises(StepValidationError):
        wizard.components[12].articulate()

    assert fake_client.calls == []


def test_evaluation_accepts_with_gaps(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[13]
    fake_client.queue("<table><tr><td>Criterio</td></tr></table>", "<ol><li>Brecha 1</li></ol>")

    step.evaluate()
    with pytest.raises(InvalidTransitionError):
        step.identify_brechas()
    with pytest.raises(StepValidationError):
        step.accept()

    step.reveal_complete()
    step.identify_brechas()
    step.reveal_complete("brechas")
    step.accept()

    evaluation = wizard.project_data().project_evaluation
    assert wizard.accepted[13] is True
    assert evaluation.brechas == "<ol><li>Brecha 1</li></ol>"
    assert evaluation.evaluation.startswith("<table>")


# ---------------------------------------------------------------------------
# Step 14
# ---------------------------------------------------------------------------


def test_plan_requires_all_three_tasks(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[14]
    fake_client.queue("<ul><li>Actividad</li></ul>", GANTT)
    step.generate_activities()
    step.reveal_complete("activities")
    step.set_task(1, "Investigar")
    step.set_task(2, "Prototipar")

    with pytest.raises(StepValidationError) as excinfo:
        step.generate_plan()
    assert excinfo.value.message == TASKS_REQUIRED_MESSAGE
    assert len(fake_client.calls) == 1

    step.set_task(3, "Testear")
    step.generate_plan()
    step.reveal_complete()
    step.accept()

    work_plan = wizard.project_data().work_plan
    assert [task.text for task in work_plan.tasks] == ["Investigar", "Prototipar", "Testear"]
    assert 'style="background-color: #4CAF50;"' in work_plan.gantt_chart


def test_plan_waits_for_activities(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[14]
    for task_id in (1, 2, 3):
        step.set_task(task_id, f"Tarea {task_id}")

    with pytest.raises(InvalidTransitionError):
        step.generate_plan()
    assert fake_client.calls == []


def test_semester_has_nineteen_weeks() -> None:
    assert len(SEMESTER_WEEKS) == 19
    assert SEMESTER_WEEKS[0] == ("Ag-S1", 1)
    assert SEMESTER_WEEKS[-1] == ("Dic-S3", 19)


# ---------------------------------------------------------------------------
# Step 15
# ---------------------------------------------------------------------------


def test_report_filename() -> None:
    proposal = "<p>Una plataforma de talleres comunitarios para barrios</p>"

    assert report_filename("Ana", proposal) == "Esto no es una Memoria_Ana_Una plataforma de talleres comunitarios.pdf"
    assert report_filename(None, "") == "Esto no es una Memoria_usuario_Mi Proyecto.pdf"


def test_report_is_accepted_on_generation_and_robustify_replaces_edits(
    wizard: Wizard, fake_client: FakeClient
) -> None:
    step = wizard.components[15]
    fake_client.queue("<h1>Informe</h1><p>Primera versión</p>", "<h1>Informe</h1><p>Versión robusta</p>")

    step.generate()
    assert wizard.accepted[15] is True
    assert step.data()["exportable"] is True

    step.reveal_complete()
    step.begin_edit()
    step.save_edit("Mi edición manual")
    step.generate(robustify=True)

    assert "Mi edición manual" in fake_client.calls[-1][1].user_prompt
    assert step.report.content == "<h1>Informe</h1><p>Versión robusta</p>"


def test_existing_report_is_only_replaced_by_robustify(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[15]
    fake_client.queue("<h1>Informe</h1><p>Primera versión</p>")
    step.generate()
    step.reveal_complete()

    with pytest.raises(InvalidTransitionError):
        step.generate()

    assert len(fake_client.calls) == 1
    assert step.report.content == "<h1>Informe</h1><p>Primera versión</p>"
