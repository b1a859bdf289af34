"""Step 11: reference search per category and the comparative benchmark."""

from __future__ import annotations

from typing import Any, Dict, List

from ..errors import InvalidTransitionError, StepValidationError
from ..lifecycle import StepMachine, StepPhase
from ..prompts import REFERENCE_SCHEMA, benchmark_prompt, reference_search_prompt
from ..schemas import Reference, ReferenceAnalysisData
from .base import REVIEW_PHASES, StepComponent, StepEnvironment

CATEGORY_COUNT = 3
CATEGORY_REQUIRED_MESSAGE = "Por favor, escribe una categoría antes de buscar."
BENCHMARK_GATE_MESSAGE = "Busca referentes para todas las categorías antes de generar el análisis."
BENCHMARK_FAILURE_MESSAGE = "Error generando el análisis."
BENCHMARK_RATE_LIMIT_MESSAGE = "Límite de solicitudes alcanzado. No se pudo generar el análisis."


class ReferenceAnalysisStep(StepComponent):
    number = 11

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.benchmark = self.add_stage("main")
        self.search_machine = StepMachine(self.number, "search")
        self.categories: List[str] = [""] * CATEGORY_COUNT
        self.results: Dict[str, List[Reference]] = {}

    @property
    def phase(self) -> StepPhase:
        if self.benchmark.phase is StepPhase.EMPTY:
            return self.search_machine.phase
        return self.benchmark.phase

    @property
    def busy(self) -> bool:
        return super().busy or self.search_machine.busy

    @property
    def error(self):
        return self.search_machine.error or super().error

    def set_category(self, index: int, value: str) -> None:
        if not 0 <= index < CATEGORY_COUNT:
            raise StepValidationError("Solo hay tres categorías.", step=self.number)
        self.categories[index] = value

    @property
    def active_categories(self) -> List[str]:
        return [category.strip() for category in self.categories if category.strip()]

    def search(self, index: int) -> List[Reference]:
        """Find exactly two references for one category; replaces earlier results."""

        if not 0 <= index < CATEGORY_COUNT:
            raise StepValidationError("Solo hay tres categorías.", step=self.number)
        category = self.categories[index].strip()
        machine = self.search_machine
        if self.benchmark.phase is StepPhase.GENERATING:
            raise InvalidTransitionError("Hay un análisis en curso.", step=self.number)
        machine.require((StepPhase.EMPTY, StepPhase.READY, StepPhase.DISPLAYED), "buscar referentes")
        machine.validate(bool(category), CATEGORY_REQUIRED_MESSAGE)
        machine.sync_seed(True)
        spec = reference_search_prompt(category, self.project.topic)
        references = machine.run_request(
            f"buscar referentes '{category}'",
            lambda: [Reference.model_validate(item) for item in self.client.generate_json(spec, REFERENCE_SCHEMA)],
            failure_message=f'Error buscando para "{category}"',
            rate_limit_message=f'Límite de solicitudes alcanzado para "{category}". Espera un momento.',
            animate=False,
        )
        self.results[category] = references
        return references

    @property
    def can_generate_benchmark(self) -> bool:
        return all(self.results.get(category) for category in self.active_categories)

    def current_results(self) -> Dict[str, List[Reference]]:
        return {category: self.results[category] for category in self.active_categories if category in self.results}

    def generate_benchmark(self, iteration: bool = False) -> str:
        machine = self.benchmark.machine
        if self.search_machine.phase is StepPhase.GENERATING:
            raise InvalidTransitionError("Hay una búsqueda de referentes en curso.", step=self.number)
        machine.validate(self.can_generate_benchmark, BENCHMARK_GATE_MESSAGE)
        if iteration:
            machine.require(REVIEW_PHASES, "iterar")
        results = {
            category: [reference.model_dump() for reference in references]
            for category, references in self.current_results().items()
        }
        spec = benchmark_prompt(results, self.project.topic, iteration=iteration)
        return self.benchmark.generate(
            "iterar análisis" if iteration else "generar análisis",
            lambda: self.client.generate_text(spec),
            failure_message=BENCHMARK_FAILURE_MESSAGE,
            rate_limit_message=BENCHMARK_RATE_LIMIT_MESSAGE,
        )

    def payload(self) -> ReferenceAnalysisData:
        references = [reference for refs in self.current_results().values() for reference in refs]
        return ReferenceAnalysisData(categories=list(self.categories), references=references, benchmark=self.benchmark.content)

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["categories"] = list(self.categories)
        data["results"] = {
            category: [reference.model_dump() for reference in references] for category, references in self.results.items()
        }
        data["search"] = self.search_machine.snapshot()
        data["can_generate_benchmark"] = self.can_generate_benchmark
        return data
