"""AgentTime - scheduled tasks delegated to a tool-using AI agent."""

from .agent_core import (
    ConversationDriver,
    ConversationTurn,
    EventStream,
    ModelProvider,
    ToolExecutor,
    ToolRegistry,
    default_handlers,
    default_registry,
    execute_task,
    get_logger,
    setup_logging,
)
from .integrations import TokenStore

__all__ = [
    "ConversationDriver",
    "ConversationTurn",
    "EventStream",
    "ModelProvider",
    "ToolExecutor",
    "ToolRegistry",
    "default_handlers",
    "default_registry",
    "execute_task",
    "get_logger",
    "setup_logging",
    "TokenStore",
]
