"""Request-scoped lookups shared by the routers."""

from __future__ import annotations

from typing import Type, TypeVar

from fastapi import Request

from ..errors import StepValidationError
from ..journey import Wizard
from ..llm import GenerativeClient
from ..memory import SessionMemory
from ..steps import StepComponent

C = TypeVar("C", bound=StepComponent)


def get_sessions(request: Request) -> SessionMemory:
    return request.app.state.sessions


def get_client(request: Request) -> GenerativeClient:
    return request.app.state.ai_client


def get_wizard(session_id: str, request: Request) -> Wizard:
    """Resolve ``{session_id}`` from the path into its wizard (404 when unknown)."""

    return request.app.state.sessions.get(session_id)


def build_wizard(request: Request, session_id: str) -> Wizard:
    state = request.app.state
    return Wizard(session_id, client=state.ai_client, store=state.store, settings=state.settings)


def step_of(wizard: Wizard, step: int, kind: Type[C]) -> C:
    """Return step *step* when it is a *kind* component; other steps reject the action."""

    component = wizard.component(step)
    if not isinstance(component, kind):
        raise StepValidationError(f"El paso {step} no admite esta acción.", step=step)
    return component
