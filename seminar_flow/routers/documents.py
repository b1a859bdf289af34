"""Typewriter stream, read-aloud audio and PDF export."""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response, StreamingResponse

from ..errors import StepValidationError
from ..export import render_report_pdf
from ..journey import Wizard
from ..llm import GenerativeClient
from ..schemas import WizardSnapshot
from ..speech import SPEECH_MEDIA_TYPE, read_aloud
from ..steps.report import FinalReportStep
from ..typewriter import Typewriter
from .dependencies import get_client, get_wizard, step_of


router = APIRouter(prefix="/wizard/sessions/{session_id}", tags=["documents"])


@router.get("/steps/{step}/reveal")
async def stream_reveal(
    step: int,
    request: Request,
    target: str = "main",
    index: int | None = None,
    wizard: Wizard = Depends(get_wizard),
) -> StreamingResponse:
    """Stream a step's formatted text segment by segment; the end of the stream completes the reveal."""

    component = wizard.component(step)
    typewriter = Typewriter(
        component.reveal_content(target, index),
        on_complete=lambda: component.reveal_complete(target, index),
        speed_ms=request.app.state.settings.typewriter_ms,
    )
    return StreamingResponse(typewriter.stream(), media_type="text/plain; charset=utf-8")


@router.post("/steps/{step}/reveal/complete", response_model=WizardSnapshot)
async def complete_reveal(
    step: int, target: str = "main", index: int | None = None, wizard: Wizard = Depends(get_wizard)
) -> WizardSnapshot:
    """Signal that the client finished revealing the text on its own."""

    wizard.component(step).reveal_complete(target, index)
    return wizard.snapshot()


@router.post("/steps/{step}/speech")
def speak_step(
    step: int,
    target: str = "main",
    index: int | None = None,
    wizard: Wizard = Depends(get_wizard),
    client: GenerativeClient = Depends(get_client),
) -> Response:
    audio = read_aloud(client, wizard.component(step).reveal_content(target, index), step=step)
    return Response(content=audio, media_type=SPEECH_MEDIA_TYPE)


@router.get("/report.pdf")
def download_report(wizard: Wizard = Depends(get_wizard)) -> Response:
    """Export the final report; only available once it has been generated."""

    report = step_of(wizard, 15, FinalReportStep)
    if not report.data()["exportable"]:
        raise StepValidationError("Genera el informe antes de descargarlo.", step=15)
    filename = report.filename
    pdf = render_report_pdf(report.report.content, title=filename[: -len(".pdf")])
    fallback = filename.encode("ascii", "ignore").decode("ascii").replace('"', "")
    disposition = f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
    return Response(content=pdf, media_type="application/pdf", headers={"Content-Disposition": disposition})
