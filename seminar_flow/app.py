"""Application factory for the Boost Seminario FastAPI backend."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .errors import WizardError
from .llm import GenerativeClient, get_generative_client
from .logging_config import configure_logging
from .memory import SessionMemory
from .routers import documents, steps, wizard
from .storage import LocalStore

logger = logging.getLogger(__name__)


async def wizard_error_handler(request: Request, exc: WizardError) -> JSONResponse:
    """Turn any step failure into ``{"error", "detail", "step"}``."""

    logger.debug("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.message, "step": exc.step},
    )


def create_app(
    ai_client: GenerativeClient | None = None,
    store: LocalStore | None = None,
    settings: Settings | None = None,
    sessions: SessionMemory | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = settings or get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(
        title="Boost Seminario Backend",
        version="0.1.0",
        description="Guided 15-step wizard that helps design students draft their seminar project.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_origin_regex=r"http://localhost:\d+$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )
    app.state.settings = settings
    app.state.ai_client = ai_client or get_generative_client(settings)
    app.state.store = store or LocalStore(settings.storage_path)
    app.state.sessions = sessions or SessionMemory()
    app.add_exception_handler(WizardError, wizard_error_handler)
    app.include_router(wizard.router)
    app.include_router(steps.router)
    app.include_router(documents.router)
    return app


app = create_app()
