"""Collect concrete model provider implementations."""

from .anthropic import AnthropicProvider
from .gemini import GeminiProvider
from .openai_api import OpenAIProvider

__all__ = [
    "AnthropicProvider",
    "GeminiProvider",
    "OpenAIProvider",
]
