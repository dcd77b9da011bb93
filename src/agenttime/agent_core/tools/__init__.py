from .models import ToolCall, ToolResult, ToolSpec
from .registry import ToolRegistry, build_tool_spec, default_registry
from .execution import ToolExecutor, ToolHandler, default_handlers
from .schema import SchemaValidator

__all__ = [
    "ToolCall",
    "ToolResult",
    "ToolSpec",
    "ToolRegistry",
    "build_tool_spec",
    "default_registry",
    "ToolExecutor",
    "ToolHandler",
    "default_handlers",
    "SchemaValidator",
]
