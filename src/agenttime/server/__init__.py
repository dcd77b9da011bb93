"""HTTP transport for the agent runtime."""

from .app import create_app
from .service import AgentService, build_provider
from .settings import Settings

__all__ = ["create_app", "AgentService", "build_provider", "Settings"]
