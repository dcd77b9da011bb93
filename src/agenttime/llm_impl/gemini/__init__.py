"""Expose the Gemini model provider."""

from .core import GeminiProvider

__all__ = ["GeminiProvider"]
