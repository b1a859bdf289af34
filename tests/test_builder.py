from __future__ import annotations

import pytest

from seminar_flow.errors import InvalidTransitionError, StepValidationError
from seminar_flow.journey import Wizard
from seminar_flow.lifecycle import StepPhase
from seminar_flow.prompts import OPTION_DELIMITER
from seminar_flow.steps.builder import BASELINE_OPTION_LABEL, OBJECTIVES_REQUIRED_MESSAGE

from conftest import FakeClient

QUESTION_FIELDS = {
    "intervention": "una app de acompañamiento",
    "aspect": "la adherencia a tratamientos",
    "user": "adultos mayores",
    "context": "Santiago",
}


def _fill(step, values) -> None:
    for key, value in values.items():
        step.set_field(key, value)


def test_composed_sentence_can_be_accepted_directly(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[7]
    _fill(step, QUESTION_FIELDS)

    step.accept()

    assert fake_client.calls == []
    assert wizard.accepted[7] is True
    assert wizard.project_data().research_question == (
        "¿Cómo puede una app de acompañamiento mejorar la adherencia a tratamientos "
        "para adultos mayores en Santiago?"
    )


def test_missing_field_blocks_acceptance(wizard: Wizard) -> None:
    step = wizard.components[7]
    step.set_field("intervention", "una app")

    assert "[un aspecto]" in step.composed
    with pytest.raises(StepValidationError):
        step.accept()
    assert wizard.accepted[7] is False


def test_unknown_field_is_rejected(wizard: Wizard) -> None:
    with pytest.raises(StepValidationError):
        wizard.components[9].set_field("nope", "x")


def test_improve_then_robustify_then_pick_option(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[7]
    _fill(step, QUESTION_FIELDS)
    fake_client.queue(
        '"¿Cómo podría una app mejorar la adherencia?"',
        f"Opción uno{OPTION_DELIMITER}Opción dos{OPTION_DELIMITER}Opción tres",
    )

    assert step.improve() == "¿Cómo podría una app mejorar la adherencia?"
    step.reveal_complete()
    step.robustify()

    assert step.phase is StepPhase.SELECTING_VARIANT
    assert step.options.visible == ["Opción uno"]
    assert step.busy

    step.select_option(0)
    for index in range(3):
        step.reveal_complete("option", index)
    step.reveal_complete("final")
    step.accept()

    assert wizard.project_data().research_question == "Opción uno"
    assert step.phase is StepPhase.ACCEPTED


def test_manual_edit_of_composed_sentence(wizard: Wizard) -> None:
    step = wizard.components[8]
    _fill(step, {"action": "se usan talleres", "result": "mejora la participación", "reason": "la confianza"})

    assert step.begin_edit() == (
        "Si se usan talleres, entonces mejora la participación debido a la confianza."
    )
    step.save_edit("Si se usan talleres, entonces sube la participación.")
    step.accept()

    assert wizard.project_data().hypothesis == "Si se usan talleres, entonces sube la participación."
    assert step.data()["accept_label"] == "Aceptar hipótesis"


def test_objectives_require_all_three(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[10]
    step.set_objective(0, "Investigar")
    step.set_objective(1, "Diseñar")

    with pytest.raises(StepValidationError) as excinfo:
        step.correct_syntax()

    assert excinfo.value.message == OBJECTIVES_REQUIRED_MESSAGE
    assert fake_client.calls == []


def test_objectives_correct_refine_and_accept_option(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[10]
    for index, text in enumerate(["investigar a", "codiseñar b", "evaluar c"]):
        step.set_objective(index, text)
    fake_client.queue(
        "1. Investigar A\n2. Co-diseñar B\n3. Evaluar C",
        f"1. X1\n2. X2\n3. X3{OPTION_DELIMITER}1. Y1\n2. Y2\n3. Y3",
    )

    assert step.correct_syntax() == ["Investigar A", "Co-diseñar B", "Evaluar C"]
    step.refine()

    options = step.data()["options"]
    assert options["labels"] == [BASELINE_OPTION_LABEL]
    assert options["total"] == 3
    assert step.options.options[0] == "Investigar A\nCo-diseñar B\nEvaluar C"

    step.reveal_complete("option", 0)
    step.select_option(1)
    step.reveal_complete("option", 1)
    step.reveal_complete("option", 2)
    step.reveal_complete("final")
    step.accept()

    assert wizard.project_data().specific_objectives == ["X1", "X2", "X3"]
    assert step.data()["accept_label"] == "Aceptar objetivo"


def test_improved_sentence_is_stored_as_plain_text(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[7]
    _fill(step, QUESTION_FIELDS)
    fake_client.queue("<script>alert(1)</script>¿Pregunta <img src=x onerror=alert(2)>?")

    assert step.improve() == "¿Pregunta ?"

    assert step.text.content == "<p>¿Pregunta ?</p>"
    assert "<script" not in step.reveal_content()


def test_robustified_options_are_reduced_to_text(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[8]
    _fill(step, {"action": "se usan talleres", "result": "mejora la participación", "reason": "la confianza"})
    fake_client.queue(
        f"<iframe src=evil></iframe>Uno{OPTION_DELIMITER}Dos & <b>tres</b>{OPTION_DELIMITER}Cuatro"
    )

    step.robustify()
    assert step.options.options == ["Uno", "Dos & tres", "Cuatro"]

    step.reveal_complete("option", 0)
    assert step.reveal_content("option", 1) == "<p>Dos &amp; tres</p>"
    step.reveal_complete("option", 1)
    step.reveal_complete("option", 2)
    step.select_option(0)
    step.reveal_complete("final")
    step.accept()

    assert step.text.content == "<p>Uno</p>"
    assert wizard.project_data().hypothesis == "Uno"


def test_accept_waits_for_every_option_reveal(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[9]
    _fill(step, {"verb": "Diseñar", "what": "un taller", "purpose": "fomentar el reciclaje"})
    fake_client.queue(f"A{OPTION_DELIMITER}B{OPTION_DELIMITER}C")
    step.robustify()
    step.reveal_complete("option", 0)

    with pytest.raises(InvalidTransitionError):
        step.accept()
    assert wizard.accepted[9] is False

    step.reveal_complete("option", 1)
    step.reveal_complete("option", 2)
    step.accept()

    assert wizard.accepted[9] is True
