"""Step 5: design opportunity (gap -> variants -> developed concept)."""

from __future__ import annotations

from typing import Any, Dict

from ..lifecycle import StepPhase, VariantReveal
from ..markup import sanitize_html, split_variants
from ..prompts import VARIANT_DELIMITER, design_variants_prompt, develop_variant_prompt, reformulate_prompt
from .base import StepComponent, StepEnvironment

GAP_REQUIRED_MESSAGE = "Por favor, describe una brecha u oportunidad para continuar."
VARIANTS_FAILURE_MESSAGE = "No se pudieron generar las variantes conceptuales. Intenta de nuevo."
DEVELOP_FAILURE_MESSAGE = "No se pudo desarrollar la variante. Inténtalo de nuevo."
ITERATE_FAILURE_MESSAGE = "Error al iterar. Intenta de nuevo."


class DesignOpportunityStep(StepComponent):
    """Gap input, three conceptual variants revealed in turn, then one developed."""

    number = 5

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.concept = self.add_stage("main")
        self.gap = ""
        self.variants = VariantReveal()

    @property
    def busy(self) -> bool:
        revealing = self.concept.phase is StepPhase.SELECTING_VARIANT and not self.variants.all_revealed
        return super().busy or revealing

    def set_gap(self, text: str) -> None:
        self.gap = text
        self.concept.machine.sync_seed(bool(text.strip()))

    def generate_variants(self) -> list[str]:
        machine = self.concept.machine
        machine.require(
            (StepPhase.EMPTY, StepPhase.READY, StepPhase.DISPLAYED, StepPhase.SELECTING_VARIANT, StepPhase.ACCEPTED),
            "generar variantes",
        )
        machine.validate(bool(self.gap.strip()), GAP_REQUIRED_MESSAGE)
        spec = design_variants_prompt(self.project, self.gap.strip())
        machine.sync_seed(True)
        variants = machine.run_request(
            "generar variantes",
            lambda: [sanitize_html(v) for v in split_variants(self.client.generate_text(spec), VARIANT_DELIMITER)],
            success_phase=StepPhase.SELECTING_VARIANT,
            failure_message=VARIANTS_FAILURE_MESSAGE,
            animate=False,
        )
        self.variants.reset(variants)
        self.concept.content = ""
        return variants

    def reveal_content(self, target: str = "main", index: int | None = None) -> str:
        if target == "variant":
            if index is None or not 0 <= index < len(self.variants.options):
                return ""
            return self.variants.options[index]
        return super().reveal_content(target, index)

    def reveal_complete(self, target: str = "main", index: int | None = None) -> bool:
        if target == "variant":
            return self.variants.complete(index if index is not None else -1)
        return super().reveal_complete(target, index)

    def select_variant(self, index: int) -> str:
        """Pick a revealed variant and ask the AI to develop it into a paragraph."""

        machine = self.concept.machine
        machine.require((StepPhase.SELECTING_VARIANT,), "seleccionar variante")
        variant = self.variants.select(index)
        spec = develop_variant_prompt(self.project.topic, variant)
        html = machine.run_request(
            "desarrollar variante",
            lambda: sanitize_html(self.client.generate_text(spec)),
            failure_message=DEVELOP_FAILURE_MESSAGE,
        )
        self.concept.content = html
        self.concept.edited_manually = False
        return html

    def iterate(self) -> str:
        machine = self.concept.machine
        machine.require((StepPhase.DISPLAYED, StepPhase.ACCEPTED), "iterar")
        machine.require_revealed("iterar")
        spec = reformulate_prompt(self.concept.content)
        return self.concept.generate(
            "iterar", lambda: self.client.generate_text(spec), failure_message=ITERATE_FAILURE_MESSAGE
        )

    def payload(self) -> str:
        return self.concept.content

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["gap"] = self.gap
        data["variants"] = self.variants.snapshot()
        data["selected_variant"] = self.variants.selected
        return data
