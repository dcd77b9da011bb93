"""Wires the agent runtime together from settings."""

from typing import AsyncGenerator, Optional

from agenttime.agent_core import get_logger
from agenttime.agent_core.agent import execute_task
from agenttime.agent_core.base import ModelProvider
from agenttime.agent_core.events.stream import Event
from agenttime.agent_core.tools import ToolExecutor, ToolRegistry, default_handlers, default_registry
from agenttime.integrations import GmailProvider, GoogleCalendarProvider, GoogleOAuthClient, TokenStore, WebClient
from .settings import Settings

logger = get_logger(__name__)


def build_provider(settings: Settings) -> ModelProvider:
    """Instantiate the configured model provider.

    SDK imports stay local so only the selected provider's client is constructed.
    """
    if settings.model_provider == "openai":
        from openai import AsyncOpenAI

        from agenttime.llm_impl.openai_api import OpenAIProvider

        return OpenAIProvider(
            AsyncOpenAI(api_key=settings.openai_api_key),
            model_name=settings.model_name or "gpt-4o",
            max_tokens=settings.max_tokens,
        )

    if settings.model_provider == "gemini":
        from google import genai

        from agenttime.llm_impl.gemini import GeminiProvider

        return GeminiProvider(
            genai.Client(api_key=settings.gemini_api_key).aio,
            model_name=settings.model_name or "gemini-2.5-flash",
            max_tokens=settings.max_tokens,
        )

    from anthropic import AsyncAnthropic

    from agenttime.llm_impl.anthropic import AnthropicProvider

    return AnthropicProvider(
        AsyncAnthropic(api_key=settings.anthropic_api_key),
        model_name=settings.model_name or "claude-sonnet-4-20250514",
        max_tokens=settings.max_tokens,
    )


class AgentService:
    """Process-wide collaborators shared by all executions.

    Only the token store is mutable; the registry, executor and provider are read-only after
    construction. ``oauth`` is None when no Google client credentials are configured.
    """

    def __init__(
        self,
        settings: Settings,
        provider: ModelProvider,
        tokens: TokenStore,
        executor: ToolExecutor,
        registry: Optional[ToolRegistry] = None,
        oauth: Optional[GoogleOAuthClient] = None,
    ) -> None:
        self.settings = settings
        self.provider = provider
        self.tokens = tokens
        self.executor = executor
        self.registry = registry or default_registry()
        self.oauth = oauth

    @classmethod
    def from_settings(cls, settings: Settings) -> "AgentService":
        registry = default_registry()
        handlers = default_handlers(
            mail=GmailProvider(),
            calendar=GoogleCalendarProvider(),
            web=WebClient(),
            time_zone=settings.calendar_timezone,
            page_fetch_timeout=settings.page_fetch_timeout,
        )
        tokens = TokenStore(
            settings.token_file,
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
        )
        oauth = None
        if settings.google_client_id and settings.google_client_secret and settings.google_redirect_uri:
            oauth = GoogleOAuthClient(
                settings.google_client_id, settings.google_client_secret, settings.google_redirect_uri
            )
        else:
            logger.warning("Google OAuth client is not configured. Gmail and Calendar cannot be connected.")
        if not settings.model_configured:
            logger.warning(f"No API key configured for model provider '{settings.model_provider}'.")
        return cls(
            settings=settings,
            provider=build_provider(settings),
            tokens=tokens,
            executor=ToolExecutor(handlers, registry=registry, tool_timeout=settings.tool_timeout),
            registry=registry,
            oauth=oauth,
        )

    def execute(
        self, task: str, agent_name: str, agent_role: str, principal: Optional[str]
    ) -> AsyncGenerator[Event, None]:
        logger.info(f"Executing task for agent '{agent_name}' ({agent_role}).")
        return execute_task(
            task,
            agent_name,
            agent_role,
            principal,
            provider=self.provider,
            executor=self.executor,
            registry=self.registry,
            credentials=self.tokens,
        )
