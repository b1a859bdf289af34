from __future__ import annotations

import pytest

from seminar_flow.errors import RateLimitError, StepValidationError
from seminar_flow.journey import Wizard

from conftest import FakeClient


def _references(category: str) -> list[dict[str, str]]:
    return [
        {
            "name": f"{category} {n}",
            "author": "Estudio Uno",
            "source": "https://example.org",
            "description": "Proyecto de referencia.",
            "relevance": "Aporta un enfoque participativo.",
        }
        for n in (1, 2)
    ]


def _categories(step, *names: str) -> None:
    for index, name in enumerate(names):
        step.set_category(index, name)


def test_benchmark_waits_for_every_category(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[11]
    _categories(step, "A", "B", "C")
    fake_client.queue(_references("A"), _references("B"))

    step.search(0)
    step.search(1)

    assert step.can_generate_benchmark is False
    with pytest.raises(StepValidationError):
        step.generate_benchmark()
    assert len(fake_client.calls) == 2

    fake_client.queue(_references("C"), "<p>Análisis comparativo</p>")
    step.search(2)

    assert step.can_generate_benchmark is True
    step.generate_benchmark()
    step.reveal_complete()
    step.accept()

    analysis = wizard.project_data().reference_analysis
    assert analysis.categories == ["A", "B", "C"]
    assert [ref.name for ref in analysis.references] == ["A 1", "A 2", "B 1", "B 2", "C 1", "C 2"]
    assert analysis.benchmark == "<p>Análisis comparativo</p>"


def test_renamed_category_needs_a_new_search(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[11]
    _categories(step, "A", "B")
    fake_client.queue(_references("A"), _references("B"))
    step.search(0)
    step.search(1)
    assert step.can_generate_benchmark

    step.set_category(1, "D")

    assert step.can_generate_benchmark is False
    assert list(step.current_results()) == ["A"]


def test_blank_category_search_is_refused(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[11]

    with pytest.raises(StepValidationError):
        step.search(0)

    assert fake_client.calls == []


def test_search_rate_limit_names_the_category(wizard: Wizard, fake_client: FakeClient) -> None:
    step = wizard.components[11]
    _categories(step, "Biomimética")
    fake_client.queue(RuntimeError("Error code: 429"))

    with pytest.raises(RateLimitError) as excinfo:
        step.search(0)

    assert "Biomimética" in excinfo.value.message
    assert step.error.kind == "rate_limit"
    assert step.results == {}
