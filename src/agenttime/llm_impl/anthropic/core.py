import json
from typing import Any, Dict, List

from anthropic import AsyncAnthropic
from anthropic.types import Message

from agenttime.agent_core import get_logger
from agenttime.agent_core.base import Completion, ModelProvider, StopReason
from agenttime.agent_core.messages import ConversationTurn, TextSegment, ToolCallSegment, ToolResultSegment
from agenttime.agent_core.tools.models import ToolSpec

logger = get_logger(__name__)

_STOP_REASONS: Dict[str, StopReason] = {
    "end_turn": "end_turn",
    "tool_use": "tool_use",
    "max_tokens": "max_tokens",
}


class AnthropicProvider(ModelProvider[Message]):
    """
    Model provider for Anthropic's Messages API.

    Tool results are sent as ``tool_result`` blocks in a user turn, tagged by ``tool_use_id``;
    results of executor faults carry ``is_error``.
    """

    name = "anthropic"

    def __init__(
        self,
        client: AsyncAnthropic,
        model_name: str = "claude-sonnet-4-20250514",
        max_tokens: int = 4096,
        temp: float | None = None,
        max_retries: int = 3,
        base_retry_delay: float = 1.0,
    ):
        """
        Args:
            client: The initialized AsyncAnthropic client.
            model_name: The Claude model to use.
            max_tokens: The maximum number of tokens to generate per completion.
            temp: Optional sampling temperature. The API default is used when None.
            max_retries: Retries for failed API calls.
            base_retry_delay: Initial backoff delay in seconds.
        """
        super().__init__(max_retries=max_retries, base_retry_delay=base_retry_delay)
        self.client = client
        self.model = model_name
        self.max_tokens = max_tokens
        self.temperature = temp
        logger.info(f"Initialized AnthropicProvider with model='{model_name}', max_tokens={max_tokens}")

    async def _complete_impl(
        self, system_directive: str, tools: List[ToolSpec], history: List[ConversationTurn]
    ) -> Completion[Message]:
        request: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system_directive,
            "tools": self.convert_tools(tools),
            "messages": self.convert_history(history),
        }
        if self.temperature is not None:
            request["temperature"] = self.temperature

        response = await self.client.messages.create(**request)
        return self.parse_response(response)

    @staticmethod
    def convert_tools(tools: List[ToolSpec]) -> List[Dict[str, Any]]:
        return [{"name": t.name, "description": t.description, "input_schema": t.input_schema} for t in tools]

    @staticmethod
    def convert_history(history: List[ConversationTurn]) -> List[Dict[str, Any]]:
        """Convert provider-agnostic turns into Anthropic message params."""
        messages: List[Dict[str, Any]] = []
        for turn in history:
            blocks: List[Dict[str, Any]] = []
            for segment in turn.segments:
                if isinstance(segment, TextSegment):
                    blocks.append({"type": "text", "text": segment.text})
                elif isinstance(segment, ToolCallSegment):
                    blocks.append({"type": "tool_use", "id": segment.id, "name": segment.name, "input": segment.arguments})
                elif isinstance(segment, ToolResultSegment):
                    block: Dict[str, Any] = {
                        "type": "tool_result",
                        "tool_use_id": segment.tool_call_id,
                        "content": json.dumps(segment.payload),
                    }
                    if segment.is_error:
                        block["is_error"] = True
                    blocks.append(block)

            if len(blocks) == 1 and blocks[0]["type"] == "text":
                messages.append({"role": turn.role, "content": blocks[0]["text"]})
            else:
                messages.append({"role": turn.role, "content": blocks})
        return messages

    @staticmethod
    def parse_response(response: Message) -> Completion[Message]:
        segments: List[TextSegment | ToolCallSegment] = []
        for block in response.content:
            if block.type == "text":
                segments.append(TextSegment(text=block.text))
            elif block.type == "tool_use":
                arguments = block.input if isinstance(block.input, dict) else {}
                segments.append(ToolCallSegment(id=block.id, name=block.name, arguments=arguments))
            else:
                logger.debug(f"Ignoring content block of type '{block.type}'.")

        stop_reason = _STOP_REASONS.get(response.stop_reason or "", "other")
        return Completion(segments=segments, stop_reason=stop_reason, raw=response)
