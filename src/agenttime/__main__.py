"""Run the AgentTime HTTP service: ``python -m agenttime``."""

import uvicorn
from dotenv import load_dotenv

from agenttime.agent_core import get_logger, setup_logging
from agenttime.server import Settings, create_app

logger = get_logger(__name__)


def main() -> None:
    load_dotenv()
    settings = Settings()
    setup_logging(settings.log_level)

    app = create_app(settings)
    logger.info(f"AgentTime server running on http://localhost:{settings.port}")
    logger.info(f"Anthropic API: {'Configured' if settings.anthropic_api_key else 'Not configured'}")
    if not settings.google_configured:
        logger.info("Google OAuth: Not configured (add GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET to .env)")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
