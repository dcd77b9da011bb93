from .executor import ToolExecutor
from .handlers import ToolHandler, default_handlers

__all__ = ["ToolExecutor", "ToolHandler", "default_handlers"]
