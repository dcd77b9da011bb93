"""FastAPI application factory."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agenttime.agent_core import get_logger
from .routes import router
from .service import AgentService
from .settings import Settings

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, service: Optional[AgentService] = None) -> FastAPI:
    """Create the HTTP application.

    Args:
        settings: Service settings. Read from the environment when omitted.
        service: Pre-built runtime, e.g. with stub providers in tests. Built from the settings
            when omitted.
    """
    settings = settings or (service.settings if service else Settings())
    service = service or AgentService.from_settings(settings)

    app = FastAPI(title="AgentTime")
    app.state.settings = settings
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    logger.info(
        f"AgentTime app created (model provider: {settings.model_provider}, "
        f"Google OAuth: {'configured' if settings.google_configured else 'not configured'})."
    )
    return app
