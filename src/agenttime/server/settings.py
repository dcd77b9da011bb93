"""Service configuration, read from the environment and an optional ``.env`` file."""

import logging
from typing import Literal, Optional

import pydantic_settings
from pydantic import field_validator, model_validator

from agenttime.agent_core.tools.execution.handlers import local_timezone_name

ModelProviderName = Literal["anthropic", "openai", "gemini"]

DEFAULT_MODELS = {
    "anthropic": "claude-sonnet-4-20250514",
    "openai": "gpt-4o",
    "gemini": "gemini-2.5-flash",
}


class Settings(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", protected_namespaces=()
    )

    model_provider: ModelProviderName = "anthropic"
    model_name: Optional[str] = None
    max_tokens: int = 4096

    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None

    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_redirect_uri: Optional[str] = None
    token_file: str = ".tokens.json"

    frontend_url: str = "http://localhost:3000"
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    calendar_timezone: Optional[str] = None
    page_fetch_timeout: float = 10.0
    tool_timeout: Optional[float] = None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{value}'.")
        return level

    @model_validator(mode="after")
    def fill_defaults(self) -> "Settings":
        if not self.model_name:
            self.model_name = DEFAULT_MODELS[self.model_provider]
        if not self.calendar_timezone:
            self.calendar_timezone = local_timezone_name()
        if not self.google_redirect_uri:
            self.google_redirect_uri = f"http://localhost:{self.port}/auth/google/callback"
        return self

    @property
    def google_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def model_configured(self) -> bool:
        """True when the selected provider has an API key."""
        return bool(getattr(self, f"{self.model_provider}_api_key"))
