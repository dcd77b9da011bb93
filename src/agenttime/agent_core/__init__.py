"""Public exports for the provider-agnostic agent runtime."""

from .logger import get_logger, setup_logging
from .exceptions import (
    AgentTimeError,
    LLMToolError,
    ToolRegistrationError,
    ToolNotFoundError,
    ToolExecutionError,
    ToolValidationError,
    ModelProviderError,
    ExecutionCancelledError,
    IntegrationError,
)
from .messages import ConversationTurn, TextSegment, ToolCallSegment, ToolResultSegment
from .events import CompletionEvent, EventStream, LogEvent, Severity, encode_sse
from .tools import (
    SchemaValidator,
    ToolCall,
    ToolExecutor,
    ToolHandler,
    ToolRegistry,
    ToolResult,
    ToolSpec,
    build_tool_spec,
    default_handlers,
    default_registry,
)
from .base import Completion, ModelProvider, StopReason
from .agent import MAX_ROUNDS, ConversationDriver, DriverState, build_system_directive, execute_task

__all__ = [
    "get_logger",
    "setup_logging",
    "AgentTimeError",
    "LLMToolError",
    "ToolRegistrationError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "ToolValidationError",
    "ModelProviderError",
    "ExecutionCancelledError",
    "IntegrationError",
    "ConversationTurn",
    "TextSegment",
    "ToolCallSegment",
    "ToolResultSegment",
    "CompletionEvent",
    "EventStream",
    "LogEvent",
    "Severity",
    "encode_sse",
    "SchemaValidator",
    "ToolCall",
    "ToolExecutor",
    "ToolHandler",
    "ToolRegistry",
    "ToolResult",
    "ToolSpec",
    "build_tool_spec",
    "default_handlers",
    "default_registry",
    "Completion",
    "ModelProvider",
    "StopReason",
    "MAX_ROUNDS",
    "ConversationDriver",
    "DriverState",
    "build_system_directive",
    "execute_task",
]
