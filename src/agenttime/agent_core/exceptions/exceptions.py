"""
Custom exception classes for the AgentTime agent runtime.

Tool-level failures are normally carried as data (an ``{"error": ...}`` payload) and
fed back to the model. The exceptions below mark the places where that is not possible:
building the tool catalog, executor faults, and orchestration faults that end an
execution.
"""


class AgentTimeError(Exception):
    """Base exception for all AgentTime errors."""

    pass


class LLMToolError(AgentTimeError):
    """Base exception for all tool-related errors."""

    pass


class ToolRegistrationError(LLMToolError):
    """Raised when there is an error registering a tool."""

    pass


class ToolNotFoundError(LLMToolError):
    """Raised when a requested tool is not found in the registry."""

    pass


class ToolExecutionError(LLMToolError):
    """Raised when a tool fails during execution."""

    pass


class ToolValidationError(LLMToolError):
    """Raised when a tool definition or its schema is invalid."""

    pass


class ModelProviderError(AgentTimeError):
    """Raised when the model provider cannot produce a usable completion."""

    pass


class ExecutionCancelledError(AgentTimeError):
    """Raised when an execution is cancelled between rounds."""

    def __init__(self, message: str = "Execution cancelled") -> None:
        super().__init__(message)


class IntegrationError(AgentTimeError):
    """Raised when an integration collaborator (token store, provider client) fails."""

    pass
