"""Expose the OpenAI chat-completions model provider."""

from .core import OpenAIProvider

__all__ = ["OpenAIProvider"]
