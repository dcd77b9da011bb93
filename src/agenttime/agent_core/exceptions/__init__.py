"""Export the exception hierarchy used across tool execution and orchestration paths."""

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

__all__ = [
    "AgentTimeError",
    "LLMToolError",
    "ToolRegistrationError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "ToolValidationError",
    "ModelProviderError",
    "ExecutionCancelledError",
    "IntegrationError",
]
