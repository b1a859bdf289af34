"""Structured content builder: template fields -> sentence (steps 7-9) and objectives (step 10)."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Any, Callable, Dict, List, Tuple

from ..errors import InvalidTransitionError, StepValidationError
from ..lifecycle import StepPhase, VariantReveal
from ..markup import numbered_lines, plain_to_html, split_variants, strip_html, strip_numbering
from ..prompts import (
    OPTION_DELIMITER,
    correct_objectives_prompt,
    improve_text_prompt,
    refine_objectives_prompt,
    robustify_prompt,
)
from .base import StepComponent, StepEnvironment

BUILDER_RATE_LIMIT_MESSAGE = "Límite de solicitudes alcanzado. Por favor, espera un momento."
IMPROVE_FAILURE_MESSAGE = "Error al mejorar el texto."
ROBUSTIFY_FAILURE_MESSAGE = "Error al generar opciones."
CORRECT_FAILURE_MESSAGE = "Error al corregir la sintaxis"
REFINE_FAILURE_MESSAGE = "Error al refinar los objetivos"
FIELDS_REQUIRED_MESSAGE = "Por favor, completa todos los campos antes de continuar."
OBJECTIVES_REQUIRED_MESSAGE = "Por favor, completa los tres objetivos específicos."
BASELINE_OPTION_LABEL = "Mantener propuesta corregida"

SELECTABLE = (StepPhase.READY, StepPhase.DISPLAYED, StepPhase.SELECTING_VARIANT, StepPhase.ACCEPTED)


@dataclass(frozen=True)
class FieldSpec:
    key: str
    label: str
    placeholder: str


@dataclass(frozen=True)
class BuilderTemplate:
    """Fill-in-the-blank sentence; blank fields render as bracketed placeholders."""

    fields: Tuple[FieldSpec, ...]
    compose: Callable[[Dict[str, str]], str]
    accept_label: str

    @property
    def keys(self) -> List[str]:
        return [field.key for field in self.fields]


def _value(values: Dict[str, str], key: str, placeholder: str) -> str:
    return values.get(key, "").strip() or placeholder


def _plain_options(raw: str) -> List[str]:
    """Split an options response and reduce every option to plain text."""

    options = [strip_html(option).strip() for option in split_variants(raw, OPTION_DELIMITER)]
    return split_variants(OPTION_DELIMITER.join(options), OPTION_DELIMITER)


RESEARCH_QUESTION_TEMPLATE = BuilderTemplate(
    fields=(
        FieldSpec("intervention", "Intervención", "[un proyecto]"),
        FieldSpec("aspect", "Aspecto a mejorar", "[un aspecto]"),
        FieldSpec("user", "Usuario", "[un usuario]"),
        FieldSpec("context", "Contexto", "[un contexto]"),
    ),
    compose=lambda v: (
        f"¿Cómo puede {_value(v, 'intervention', '[un proyecto]')} mejorar {_value(v, 'aspect', '[un aspecto]')} "
        f"para {_value(v, 'user', '[un usuario]')} en {_value(v, 'context', '[un contexto]')}?"
    ),
    accept_label="Aceptar pregunta",
)

HYPOTHESIS_TEMPLATE = BuilderTemplate(
    fields=(
        FieldSpec("action", "Acción", "[se implementa una acción]"),
        FieldSpec("result", "Resultado", "[se observará un resultado]"),
        FieldSpec("reason", "Razón", "[una razón]"),
    ),
    compose=lambda v: (
        f"Si {_value(v, 'action', '[se implementa una acción]')}, entonces "
        f"{_value(v, 'result', '[se observará un resultado]')} debido a {_value(v, 'reason', '[una razón]')}."
    ),
    accept_label="Aceptar hipótesis",
)

GENERAL_OBJECTIVE_TEMPLATE = BuilderTemplate(
    fields=(
        FieldSpec("verb", "Verbo", "[Verbo]"),
        FieldSpec("what", "Qué se hará", "[qué se hará]"),
        FieldSpec("purpose", "Para qué", "[lograr qué finalidad]"),
    ),
    compose=lambda v: (
        f"{_value(v, 'verb', '[Verbo]')} {_value(v, 'what', '[qué se hará]')} "
        f"para {_value(v, 'purpose', '[lograr qué finalidad]')}."
    ),
    accept_label="Aceptar objetivo",
)

OBJECTIVE_FIELDS = (
    FieldSpec(
        "specific1",
        "Fundamentos del Conocimiento (Investigar y Comprender)",
        "Ej: Investigar las necesidades tecnológicas de los artesanos",
    ),
    FieldSpec(
        "specific2",
        "Aplicación y Conexión (Experimentar y Analizar)",
        "Ej: Co-diseñar los flujos de interacción de la plataforma con usuarios piloto",
    ),
    FieldSpec(
        "specific3",
        "Pensamiento Crítico y Creación (Evaluar y Crear)",
        "Ej: Desarrollar y testear un prototipo funcional de la herramienta",
    ),
)


class OptionBuilderStep(StepComponent):
    """Shared option selection for the builder steps.

    Options are revealed one after another; the selected option becomes the
    final text, which is itself revealed before it can be edited or accepted.
    """

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.text = self.add_stage("main")
        self.options = VariantReveal()
        self.final = ""

    @property
    def machine(self):
        return self.text.machine

    @property
    def busy(self) -> bool:
        revealing = self.machine.phase is StepPhase.SELECTING_VARIANT and not self.options.all_revealed
        return super().busy or revealing

    def _options_request(self, action: str, call: Callable[[], List[str]], failure_message: str) -> List[str]:
        self.machine.require(SELECTABLE, action)
        self.machine.require_revealed(action)
        options = self.machine.run_request(
            action,
            call,
            success_phase=StepPhase.SELECTING_VARIANT,
            failure_message=failure_message,
            rate_limit_message=BUILDER_RATE_LIMIT_MESSAGE,
            animate=False,
        )
        self.options.reset(options)
        self.final = ""
        return options

    def select_option(self, index: int) -> str:
        self.machine.require((StepPhase.SELECTING_VARIANT,), "seleccionar opción")
        self.machine.require_revealed("seleccionar opción")
        self.final = self.options.select(index)
        self.machine.is_animating = True
        return self.final

    def reveal_content(self, target: str = "main", index: int | None = None) -> str:
        if target == "option":
            if index is None or not 0 <= index < len(self.options.options):
                return ""
            return plain_to_html(self.options.options[index])
        if target == "final":
            return plain_to_html(self.final) if self.final else ""
        return plain_to_html(self.current_text())

    def reveal_complete(self, target: str = "main", index: int | None = None) -> bool:
        if target == "option":
            return self.options.complete(index if index is not None else -1)
        return self.machine.finish_reveal()

    def begin_edit(self, target: str = "main") -> str:
        if target != "final":
            return self.begin_base_edit()
        self.machine.require((StepPhase.SELECTING_VARIANT,), "editar")
        self.machine.require_revealed("editar")
        self.machine.validate(bool(self.final), "Selecciona una opción antes de editarla.")
        self.machine.transition(StepPhase.EDITING, "edit final")
        return self.final

    def save_edit(self, text: str, target: str = "main") -> str:
        self.machine.require((StepPhase.EDITING,), "guardar")
        if target == "final":
            self.final = text.strip()
            self.machine.transition(StepPhase.SELECTING_VARIANT, "final edited")
        else:
            self.save_base_edit(text)
            self.machine.transition(StepPhase.DISPLAYED, "edit saved")
        self.text.edited_manually = True
        return self.current_text()

    def cancel_edit(self, target: str = "main") -> None:
        self.machine.require((StepPhase.EDITING,), "cancelar")
        back = StepPhase.SELECTING_VARIANT if target == "final" else StepPhase.DISPLAYED
        self.machine.transition(back, "edit cancelled")

    def begin_base_edit(self) -> str:
        raise NotImplementedError

    def save_base_edit(self, text: str) -> None:
        raise NotImplementedError

    def current_text(self) -> str:
        raise NotImplementedError

    def accept(self) -> Any:
        self.machine.require(SELECTABLE, "aceptar")
        self.machine.require_revealed("aceptar")
        if self.machine.phase is StepPhase.SELECTING_VARIANT and not self.options.all_revealed:
            raise InvalidTransitionError("Espera a que se muestren todas las opciones para 'aceptar'.", step=self.number)
        if self.machine.phase is StepPhase.ACCEPTED:
            return self.accepted_payload
        payload = self.payload()
        self.machine.validate(self.ready_to_accept(), self.required_message())
        self.machine.transition(StepPhase.ACCEPTED, "accepted")
        self.text.content = plain_to_html(self.current_text())
        self._report(payload)
        return payload

    def ready_to_accept(self) -> bool:
        return True

    def required_message(self) -> str:
        return FIELDS_REQUIRED_MESSAGE

    def options_snapshot(self) -> Dict[str, Any]:
        return self.options.snapshot()

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["options"] = self.options_snapshot()
        data["final"] = self.final
        data["accept_label"] = self.accept_label
        return data


class SentenceBuilderStep(OptionBuilderStep):
    """Steps 7-9: compose, improve, robustify into three options, accept."""

    template: BuilderTemplate = RESEARCH_QUESTION_TEMPLATE

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.values: Dict[str, str] = {key: "" for key in self.template.keys}
        self.composed_override: str | None = None
        self.improved = ""

    @property
    def accept_label(self) -> str:
        return self.template.accept_label

    @property
    def composed(self) -> str:
        if self.composed_override is not None:
            return self.composed_override
        return self.template.compose(self.values)

    def current_text(self) -> str:
        return self.final or self.improved or self.composed

    def set_field(self, key: str, value: str) -> str:
        if key not in self.values:
            raise StepValidationError(f"Campo desconocido: '{key}'.", step=self.number)
        self.values[key] = value
        self.composed_override = None
        self.machine.sync_seed(any(v.strip() for v in self.values.values()))
        return self.composed

    def ready_to_accept(self) -> bool:
        if self.final or self.composed_override is not None:
            return bool(self.current_text().strip())
        return all(v.strip() for v in self.values.values())

    def improve(self) -> str:
        self.machine.require((StepPhase.READY, StepPhase.DISPLAYED, StepPhase.ACCEPTED), "mejorar")
        self.machine.require_revealed("mejorar")
        self.machine.validate(self.ready_to_accept(), FIELDS_REQUIRED_MESSAGE)
        spec = improve_text_prompt(self.composed)
        improved = self.machine.run_request(
            "mejorar",
            lambda: strip_html(self.client.generate_text(spec)).strip().strip('"'),
            failure_message=IMPROVE_FAILURE_MESSAGE,
            rate_limit_message=BUILDER_RATE_LIMIT_MESSAGE,
        )
        self.improved = improved
        self.final = ""
        self.text.content = plain_to_html(improved)
        return improved

    def robustify(self) -> List[str]:
        self.machine.validate(self.ready_to_accept(), FIELDS_REQUIRED_MESSAGE)
        spec = robustify_prompt(self.student_name, self.project.topic, self.improved or self.composed)
        return self._options_request(
            "robustecer",
            lambda: _plain_options(self.client.generate_text(spec)),
            ROBUSTIFY_FAILURE_MESSAGE,
        )

    def begin_base_edit(self) -> str:
        self.machine.require((StepPhase.READY, StepPhase.DISPLAYED, StepPhase.ACCEPTED), "editar")
        self.machine.require_revealed("editar")
        if self.machine.phase is StepPhase.READY:
            self.machine.transition(StepPhase.DISPLAYED, "composed shown")
        self.machine.transition(StepPhase.EDITING, "edit composed")
        return self.composed

    def save_base_edit(self, text: str) -> None:
        self.composed_override = text.strip()
        self.improved = ""
        self.final = ""

    def payload(self) -> str:
        return self.current_text().strip()

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["fields"] = [
            {"key": f.key, "label": f.label, "value": self.values[f.key]} for f in self.template.fields
        ]
        data["composed"] = self.composed
        data["improved"] = self.improved
        return data


class ResearchQuestionStep(SentenceBuilderStep):
    number = 7
    template = RESEARCH_QUESTION_TEMPLATE


class HypothesisStep(SentenceBuilderStep):
    number = 8
    template = HYPOTHESIS_TEMPLATE


class GeneralObjectiveStep(SentenceBuilderStep):
    number = 9
    template = GENERAL_OBJECTIVE_TEMPLATE


class SpecificObjectivesStep(OptionBuilderStep):
    """Step 10: three objectives, syntax correction and refinement sets."""

    number = 10
    accept_label = "Aceptar objetivo"

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.objectives: List[str] = ["", "", ""]
        self.corrected: List[str] = []

    def set_objective(self, index: int, value: str) -> List[str]:
        if not 0 <= index < len(self.objectives):
            raise StepValidationError("Solo hay tres objetivos específicos.", step=self.number)
        self.objectives[index] = value
        self.machine.sync_seed(any(o.strip() for o in self.objectives))
        return self.objectives

    @property
    def baseline(self) -> List[str]:
        return self.corrected or [o.strip() for o in self.objectives]

    def current_lines(self) -> List[str]:
        if self.final:
            return numbered_lines(self.final)
        return self.baseline

    def current_text(self) -> str:
        return "\n".join(f"{i}. {line}" for i, line in enumerate(self.current_lines(), start=1))

    def ready_to_accept(self) -> bool:
        lines = self.current_lines()
        return len(lines) > 0 and all(line.strip() for line in lines)

    def required_message(self) -> str:
        return OBJECTIVES_REQUIRED_MESSAGE

    def correct_syntax(self) -> List[str]:
        self.machine.require((StepPhase.READY, StepPhase.DISPLAYED, StepPhase.ACCEPTED), "corregir sintaxis")
        self.machine.validate(all(o.strip() for o in self.objectives), OBJECTIVES_REQUIRED_MESSAGE)
        spec = correct_objectives_prompt(self.objectives)
        corrected = self.machine.run_request(
            "corregir sintaxis",
            lambda: numbered_lines(strip_html(self.client.generate_text(spec))),
            failure_message=CORRECT_FAILURE_MESSAGE,
            rate_limit_message=BUILDER_RATE_LIMIT_MESSAGE,
            animate=False,
        )
        self.corrected = corrected
        self.final = ""
        return corrected

    def refine(self) -> List[str]:
        """Ask for three alternative sets; the baseline is always offered first."""

        self.machine.validate(all(o.strip() for o in self.objectives), OBJECTIVES_REQUIRED_MESSAGE)
        baseline = self.baseline
        project = self.project
        spec = refine_objectives_prompt(baseline, project.general_objective, project.research_question)
        return self._options_request(
            "refinar objetivos",
            lambda: ["\n".join(baseline)] + _plain_options(self.client.generate_text(spec)),
            REFINE_FAILURE_MESSAGE,
        )

    def begin_base_edit(self) -> str:
        raise StepValidationError("Edita los objetivos directamente en sus campos.", step=self.number)

    def reveal_content(self, target: str = "main", index: int | None = None) -> str:
        if target in ("option", "final"):
            text = self.final if target == "final" else (
                self.options.options[index] if index is not None and 0 <= index < len(self.options.options) else ""
            )
            return "<br>".join(escape(line, quote=False) for line in text.split("\n")) if text else ""
        return super().reveal_content(target, index)

    def payload(self) -> List[str]:
        return [strip_numbering(line) for line in self.current_lines() if strip_numbering(line)]

    def options_snapshot(self) -> Dict[str, Any]:
        snapshot = self.options.snapshot()
        snapshot["labels"] = [
            BASELINE_OPTION_LABEL if i == 0 else f"Opción {i}" for i in range(len(snapshot["options"]))
        ]
        return snapshot

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["fields"] = [
            {"key": f.key, "label": f.label, "placeholder": f.placeholder, "value": self.objectives[i]}
            for i, f in enumerate(OBJECTIVE_FIELDS)
        ]
        data["corrected"] = self.corrected
        return data
