"""Profile and the draft -> AI content -> edit/iterate/accept steps (1-4)."""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..errors import GenerationError, RateLimitError
from ..lifecycle import StepPhase
from ..markup import extract_bibliography
from ..prompts import (
    disciplinary_scope_prompt,
    personal_contribution_prompt,
    theme_exploration_prompt,
    welcome_fallback,
    welcome_prompt,
)
from ..schemas import Profile
from .base import StepComponent, StepEnvironment

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Step 1
# ---------------------------------------------------------------------------

PROFILE_REQUIRED_MESSAGE = "Por favor, completa tu nombre y pronombres para continuar."
WELCOME_RATE_LIMIT_MESSAGE = (
    "Se ha superado el límite de solicitudes a la IA. Por favor, espera un momento. "
    "Usaremos un mensaje estándar para continuar."
)
WELCOME_FAILURE_MESSAGE = "No se pudo generar la bienvenida. Usaremos un mensaje estándar."


class ProfileStep(StepComponent):
    """Collect the student's profile and greet them as 'Ágora'."""

    number = 1

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.welcome = self.add_stage("welcome")
        self.profile: Profile | None = env.store.load_profile()
        if self.profile is not None:
            self.accepted_payload = self.profile

    def submit(self, name: str, pronoun: str, preference: str = "") -> Profile:
        """Persist the profile, accept step 1 and fetch the welcome message.

        A failed welcome request falls back to a standard message; the error is
        still recorded on the step.
        """

        machine = self.welcome.machine
        machine.require(
            (StepPhase.EMPTY, StepPhase.READY, StepPhase.DISPLAYED, StepPhase.ACCEPTED), "crear perfil"
        )
        machine.require_revealed("crear perfil")
        machine.validate(bool(name.strip() and pronoun.strip()), PROFILE_REQUIRED_MESSAGE)
        profile = Profile(nombre=name.strip(), pronombres=pronoun.strip(), preferencias=preference.strip())
        self.env.store.save_profile(profile)
        self.profile = profile
        self._report(profile)

        spec = welcome_prompt(profile.nombre, profile.pronombres, profile.preferencias)
        try:
            self.welcome.generate(
                "bienvenida",
                lambda: self.client.generate_text(spec),
                failure_message=WELCOME_FAILURE_MESSAGE,
                rate_limit_message=WELCOME_RATE_LIMIT_MESSAGE,
            )
        except (RateLimitError, GenerationError) as exc:
            self.welcome.show(welcome_fallback(profile.nombre), animate=True)
            machine.fail(exc)
        return profile

    def payload(self) -> Any:
        return self.profile

    def accept(self) -> Any:
        return self.accepted_payload

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["profile"] = self.profile.model_dump() if self.profile else None
        return data


# ---------------------------------------------------------------------------
# Steps 2-4
# ---------------------------------------------------------------------------


class ContentStep(StepComponent):
    """Student draft -> AI-enriched content, with edit/iterate/accept."""

    draft_required_message = ""
    failure_message = "Hubo un error al contactar la IA. Por favor, intenta de nuevo."

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.answer = self.add_stage("main")
        self.draft = ""

    def set_draft(self, text: str) -> None:
        self.draft = text
        self.answer.machine.sync_seed(bool(text.strip()))

    def build_prompt(self, iteration: bool):
        raise NotImplementedError

    def generate(self, iteration: bool = False) -> str:
        self.answer.machine.require(
            (StepPhase.EMPTY, StepPhase.READY, StepPhase.DISPLAYED, StepPhase.ACCEPTED), "generar"
        )
        self.answer.machine.validate(bool(self.draft.strip()), self.draft_required_message)
        if iteration:
            self.answer.machine.require((StepPhase.DISPLAYED, StepPhase.ACCEPTED), "iterar")
        spec = self.build_prompt(iteration)
        action = "iterar" if iteration else "generar"
        return self.answer.generate(
            action,
            lambda: self.client.generate_text(spec),
            failure_message=self.failure_message,
        )

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["draft"] = self.draft
        return data


class ThemeExplorationStep(ContentStep):
    """Step 2: topic exploration; accepted as soon as the reveal completes."""

    number = 2
    draft_required_message = "Por favor, escribe tu tema antes de continuar."

    def __init__(self, env: StepEnvironment) -> None:
        super().__init__(env)
        self.bibliography = ""

    @property
    def topic(self) -> str:
        return self.draft

    def build_prompt(self, iteration: bool):
        return theme_exploration_prompt(self.student_name, self.draft, iteration=iteration)

    def generate(self, iteration: bool = False) -> str:
        html = super().generate(iteration)
        main_text, self.bibliography = extract_bibliography(html)
        self.answer.content = main_text
        return main_text

    def on_revealed(self, target: str) -> None:
        if self.answer.phase is StepPhase.DISPLAYED:
            self.answer.machine.transition(StepPhase.ACCEPTED, "revealed")
            self._report(self.payload())

    def save_edit(self, text: str, target: str = "main") -> str:
        html = super().save_edit(text, target)
        self.on_revealed(target)
        return html

    def payload(self) -> Dict[str, str]:
        return {"topic": self.draft.strip(), "themeExplorationAiResponse": self.answer.content}

    def data(self) -> Dict[str, Any]:
        data = super().data()
        data["bibliography"] = self.bibliography
        return data


class DisciplinaryScopeStep(ContentStep):
    number = 3
    draft_required_message = "Por favor, completa tu reflexión para continuar."

    def build_prompt(self, iteration: bool):
        project = self.project
        return disciplinary_scope_prompt(
            self.student_name,
            project.topic,
            project.theme_exploration_ai_response,
            self.draft,
            iteration=iteration,
        )

    def payload(self) -> Dict[str, str]:
        return {"disciplinaryScopeUserInput": self.draft, "disciplinaryScopeAiResponse": self.answer.content}


class PersonalContributionStep(ContentStep):
    number = 4
    draft_required_message = "Por favor, escribe tu reflexión para continuar."
    failure_message = "Hubo un error al generar la sugerencia. Intenta de nuevo."

    def build_prompt(self, iteration: bool):
        project = self.project
        return personal_contribution_prompt(
            self.student_name,
            project.topic,
            project.theme_exploration_ai_response,
            project.disciplinary_scope_ai_response,
            self.draft,
            iteration=iteration,
        )

    def payload(self) -> Dict[str, str]:
        return {"personalContribution": self.draft, "personalContributionAiResponse": self.answer.content}
