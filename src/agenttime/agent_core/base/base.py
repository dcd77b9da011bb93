"""Core abstractions for model provider implementations."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Coroutine, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel

from ..exceptions import ModelProviderError
from ..logger import get_logger
from ..messages import ConversationTurn, TextSegment, ToolCallSegment
from ..tools.models import ToolSpec

logger = get_logger(__name__)


ProviderResT = TypeVar("ProviderResT")

StopReason = Literal["end_turn", "tool_use", "max_tokens", "other"]


class Completion(BaseModel, Generic[ProviderResT]):
    """Normalized completion returned by provider implementations.

    Attributes:
        segments: Ordered text and tool-call segments of the assistant's reply.
        stop_reason: Normalized stop indicator.
        raw: Provider-specific response payload for advanced use cases.
    """

    segments: List[Union[TextSegment, ToolCallSegment]]
    stop_reason: StopReason = "other"
    raw: Optional[ProviderResT] = None

    @property
    def tool_calls(self) -> List[ToolCallSegment]:
        return [s for s in self.segments if isinstance(s, ToolCallSegment)]

    def to_turn(self) -> ConversationTurn:
        """The completion as an assistant turn for the conversation history."""
        return ConversationTurn(role="assistant", segments=list(self.segments))


class ModelProvider(ABC, Generic[ProviderResT]):
    """Abstract base class for model providers.

    A provider is stateless with respect to a conversation: every call receives the full
    system directive, tool catalog and history, so one instance can serve concurrent
    executions.
    """

    name: str = "generic"

    def __init__(self, max_retries: int = 3, base_retry_delay: float = 1.0):
        self.max_retries = max_retries
        self.base_retry_delay = base_retry_delay

    async def _execute_with_retry(
        self,
        func: Callable[..., Coroutine[Any, Any, Completion[ProviderResT]]],
        *args,
        **kwargs,
    ) -> Completion[ProviderResT]:
        """
        Executes a function with retry logic.

        Args:
            func: The asynchronous function to execute.
            *args: Positional arguments for the function.
            **kwargs: Keyword arguments for the function.

        Returns:
            The result of the function call.

        Raises:
            Exception: The last encountered exception if all retries fail.
        """
        delay = self.base_retry_delay
        for attempt in range(self.max_retries + 1):
            try:
                return await func(*args, **kwargs)
            except ModelProviderError:
                # Malformed responses are not transient.
                raise
            except Exception as e:
                if attempt == self.max_retries:
                    raise e

                logger.warning(f"API Error (Retry: {attempt + 1}/{self.max_retries}): {e}. Waiting {delay}s...")
                await asyncio.sleep(delay)
                delay *= 2  # Exponential backoff

        msg = f"Failed to get response after {self.max_retries} retries."
        logger.error(msg)
        raise ModelProviderError(msg)

    async def complete(
        self, system_directive: str, tools: List[ToolSpec], history: List[ConversationTurn]
    ) -> Completion[ProviderResT]:
        """
        Requests one model completion.

        Args:
            system_directive: The system prompt for this execution.
            tools: The full tool catalog, in registry order.
            history: The conversation so far (provider-agnostic format).

        Returns:
            The normalized completion.

        Raises:
            ModelProviderError: If the provider fails after all retries.
        """
        try:
            return await self._execute_with_retry(self._complete_impl, system_directive, tools, history)
        except ModelProviderError:
            raise
        except Exception as e:
            logger.error(f"Model provider '{self.name}' failed: {e}")
            raise ModelProviderError(str(e) or type(e).__name__) from e

    @abstractmethod
    async def _complete_impl(
        self, system_directive: str, tools: List[ToolSpec], history: List[ConversationTurn]
    ) -> Completion[ProviderResT]:
        pass
