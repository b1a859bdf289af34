from __future__ import annotations

import pytest

from seminar_flow.errors import GenerationError, InvalidTransitionError, RateLimitError, StepValidationError
from seminar_flow.lifecycle import StepMachine, StepPhase, VariantReveal


def _ready_machine() -> StepMachine:
    machine = StepMachine(step=3)
    machine.sync_seed(True)
    return machine


def test_seed_moves_between_empty_and_ready() -> None:
    machine = StepMachine(step=2)

    machine.sync_seed(True)
    assert machine.phase is StepPhase.READY
    machine.sync_seed(False)
    assert machine.phase is StepPhase.EMPTY


def test_successful_request_displays_and_animates() -> None:
    machine = _ready_machine()

    result = machine.run_request("generar", lambda: "<p>ok</p>")

    assert result == "<p>ok</p>"
    assert machine.phase is StepPhase.DISPLAYED
    assert machine.busy
    assert machine.finish_reveal() is True
    assert machine.finish_reveal() is False
    assert not machine.busy


def test_rate_limit_rolls_back_with_specific_message() -> None:
    machine = _ready_machine()

    def call() -> str:
        raise RuntimeError("Error code: 429 - RESOURCE_EXHAUSTED")

    with pytest.raises(RateLimitError):
        machine.run_request("generar", call, rate_limit_message="Espera un momento.")

    assert machine.phase is StepPhase.READY
    assert machine.error is not None
    assert machine.error.to_dict() == {"kind": "rate_limit", "message": "Espera un momento."}


def test_generic_failure_rolls_back_to_previous_phase() -> None:
    machine = _ready_machine()
    machine.run_request("generar", lambda: "x")
    machine.finish_reveal()

    def call() -> str:
        raise ValueError("boom")

    with pytest.raises(GenerationError) as excinfo:
        machine.run_request("iterar", call, failure_message="Error al iterar.")

    assert excinfo.value.message == "Error al iterar."
    assert machine.phase is StepPhase.DISPLAYED
    assert machine.error.kind == "generation"


def test_validation_records_error_without_transition() -> None:
    machine = StepMachine(step=4)

    with pytest.raises(StepValidationError):
        machine.validate(False, "Por favor, escribe tu reflexión para continuar.")

    assert machine.phase is StepPhase.EMPTY
    assert machine.error.kind == "validation"


def test_invalid_transition_is_refused() -> None:
    machine = StepMachine(step=5)

    with pytest.raises(InvalidTransitionError):
        machine.transition(StepPhase.ACCEPTED)


def test_require_refuses_actions_while_generating() -> None:
    machine = _ready_machine()
    machine.transition(StepPhase.GENERATING)

    with pytest.raises(InvalidTransitionError):
        machine.require((StepPhase.READY, StepPhase.GENERATING), "editar")


def test_variants_reveal_one_after_another() -> None:
    reveal = VariantReveal()
    reveal.reset(["A", "B", "C"])

    assert reveal.visible == ["A"]
    assert reveal.complete(1) is False
    with pytest.raises(InvalidTransitionError):
        reveal.select(2)

    assert reveal.complete(0) is True
    assert reveal.visible == ["A", "B"]
    reveal.complete(1)
    reveal.complete(2)

    assert reveal.all_revealed
    assert reveal.select(2) == "C"
    assert reveal.selected == "C"
    with pytest.raises(StepValidationError):
        reveal.select(3)
