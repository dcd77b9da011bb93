"""Expose provider-agnostic conversation models shared by the driver and providers."""

from .models import ContentSegment, ConversationTurn, TextSegment, ToolCallSegment, ToolResultSegment

__all__ = [
    "ContentSegment",
    "ConversationTurn",
    "TextSegment",
    "ToolCallSegment",
    "ToolResultSegment",
]
