"""Tool-related data models."""

from .models import ToolSpec
from .tool_call import ToolCall, ToolResult

__all__ = ["ToolSpec", "ToolCall", "ToolResult"]
