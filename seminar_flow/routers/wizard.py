"""Session and navigation endpoints for the wizard."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request

from ..journey import BANNER_PHRASES, Wizard, list_step_definitions
from ..memory import SessionMemory
from ..schemas import SessionRequest, StepDefinition, StepSnapshot, WizardSnapshot
from .dependencies import build_wizard, get_sessions, get_wizard


router = APIRouter(prefix="/wizard", tags=["wizard"])


@router.get("/health")
async def healthcheck() -> dict[str, str]:
    """Simple health check endpoint."""

    return {"status": "ok"}


@router.get("/steps", response_model=list[StepDefinition])
async def list_steps() -> list[StepDefinition]:
    """Expose step metadata to the UI."""

    return list_step_definitions()


@router.get("/banner")
async def banner_phrases() -> dict[str, list[str]]:
    return {"phrases": BANNER_PHRASES}


@router.post("/sessions", response_model=WizardSnapshot, status_code=201)
async def create_session(
    request: Request,
    payload: Optional[SessionRequest] = None,
    sessions: SessionMemory = Depends(get_sessions),
) -> WizardSnapshot:
    """Start a wizard; a stored profile is picked up automatically."""

    session_id = payload.session_id if payload else None
    wizard = sessions.create(lambda sid: build_wizard(request, sid), session_id)
    return wizard.snapshot()


@router.get("/sessions/{session_id}", response_model=WizardSnapshot)
async def fetch_session(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    return wizard.snapshot()


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str, sessions: SessionMemory = Depends(get_sessions)) -> dict[str, str]:
    sessions.drop(session_id)
    return {"status": "deleted"}


@router.get("/sessions/{session_id}/project")
async def fetch_project(wizard: Wizard = Depends(get_wizard)) -> Dict[str, Any]:
    """Accepted values of every step, keyed the way the prompts embed them."""

    return wizard.project_data().as_prompt_json()


@router.get("/sessions/{session_id}/steps/{step}", response_model=StepSnapshot)
async def fetch_step(step: int, wizard: Wizard = Depends(get_wizard)) -> StepSnapshot:
    return wizard.step_snapshot(step)


# ---------------------------------------------------------------------------
# Navigation and countdown
# ---------------------------------------------------------------------------


@router.post("/sessions/{session_id}/next", response_model=WizardSnapshot)
async def next_step(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    wizard.next()
    return wizard.snapshot()


@router.post("/sessions/{session_id}/prev", response_model=WizardSnapshot)
async def previous_step(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    wizard.prev()
    return wizard.snapshot()


@router.post("/sessions/{session_id}/timer/extend", response_model=WizardSnapshot)
async def extend_timer(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    wizard.extend_timer()
    return wizard.snapshot()


@router.post("/sessions/{session_id}/timer/continue", response_model=WizardSnapshot)
async def continue_after_timeout(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    wizard.continue_after_timeout()
    return wizard.snapshot()
