"""Expose the Anthropic Messages API model provider."""

from .core import AnthropicProvider

__all__ = ["AnthropicProvider"]
