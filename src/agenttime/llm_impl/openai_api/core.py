import json
from typing import Any, Dict, Iterable, List, Union, cast

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion, ChatCompletionToolParam

from agenttime.agent_core import get_logger
from agenttime.agent_core.base import Completion, ModelProvider, StopReason
from agenttime.agent_core.exceptions import ModelProviderError
from agenttime.agent_core.messages import ConversationTurn, TextSegment, ToolCallSegment, ToolResultSegment
from agenttime.agent_core.tools.models import ToolSpec

logger = get_logger(__name__)

_FINISH_REASONS: Dict[str, StopReason] = {
    "stop": "end_turn",
    "tool_calls": "tool_use",
    "function_call": "tool_use",
    "length": "max_tokens",
}


def _encode_arguments(arguments: Union[Dict[str, Any], str]) -> str:
    """Arguments the model sent undecodable are echoed back verbatim."""
    return arguments if isinstance(arguments, str) else json.dumps(arguments)


class OpenAIProvider(ModelProvider[ChatCompletion]):
    """
    Model provider for OpenAI's chat completions API.

    Each tool result becomes its own ``role: "tool"`` message following the assistant message
    that requested it.
    """

    name = "openai"

    def __init__(
        self,
        client: AsyncOpenAI,
        model_name: str = "gpt-4o",
        max_tokens: int = 4096,
        temp: float = 1.0,
        max_retries: int = 3,
        base_retry_delay: float = 1.0,
    ):
        """
        Args:
            client: The initialized AsyncOpenAI client.
            model_name: The identifier for the OpenAI model to use.
            max_tokens: The maximum number of tokens to generate in the response.
            temp: The temperature for text generation, controlling randomness.
            max_retries: Retries for failed API calls.
            base_retry_delay: Initial backoff delay in seconds.
        """
        super().__init__(max_retries=max_retries, base_retry_delay=base_retry_delay)
        self.client: AsyncOpenAI = client
        self.model: str = model_name
        self.max_tokens = max_tokens
        self.temperature = temp

    async def _complete_impl(
        self, system_directive: str, tools: List[ToolSpec], history: List[ConversationTurn]
    ) -> Completion[ChatCompletion]:
        messages: List[Dict[str, Any]] = [{"role": "system", "content": system_directive}]
        messages.extend(self.convert_history(history))

        # We need to cast messages because the library expects a specific union of message types
        # but we are using List[Dict[str, Any]] which is structurally compatible.
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=cast(Iterable[Any], messages),
            tools=self.convert_tools(tools),  # type: ignore[arg-type]
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return self.parse_response(response)

    @staticmethod
    def convert_tools(tools: List[ToolSpec]) -> List[ChatCompletionToolParam]:
        return [
            {
                "type": "function",
                "function": {"name": t.name, "description": t.description, "parameters": t.input_schema},
            }
            for t in tools
        ]

    @staticmethod
    def convert_history(history: List[ConversationTurn]) -> List[Dict[str, Any]]:
        """
        Converts provider-agnostic turns to OpenAI chat messages.

        Args:
            history: The conversation turns.

        Returns:
            List of OpenAI message dictionaries.
        """
        openai_history: List[Dict[str, Any]] = []
        for turn in history:
            if turn.role == "assistant":
                msg: Dict[str, Any] = {"role": "assistant", "content": turn.text or None}
                if turn.tool_calls:
                    msg["tool_calls"] = [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {"name": call.name, "arguments": _encode_arguments(call.arguments)},
                        }
                        for call in turn.tool_calls
                    ]
                openai_history.append(msg)
                continue

            for result in turn.tool_results:
                openai_history.append(
                    {"role": "tool", "tool_call_id": result.tool_call_id, "content": json.dumps(result.payload)}
                )
            if turn.text:
                openai_history.append({"role": "user", "content": turn.text})
        return openai_history

    @staticmethod
    def parse_response(response: ChatCompletion) -> Completion[ChatCompletion]:
        if not response.choices:
            raise ModelProviderError("OpenAI returned a completion without choices.")

        choice = response.choices[0]
        segments: List[TextSegment | ToolCallSegment] = []
        if choice.message.content:
            segments.append(TextSegment(text=choice.message.content))

        for tool_call in choice.message.tool_calls or []:
            if tool_call.type != "function":
                continue
            raw_arguments = tool_call.function.arguments or "{}"
            try:
                arguments = json.loads(raw_arguments)
            except json.JSONDecodeError as e:
                logger.warning(f"Undecodable arguments for '{tool_call.function.name}': {e}")
                arguments = raw_arguments
            if not isinstance(arguments, dict):
                arguments = raw_arguments
            segments.append(ToolCallSegment(id=tool_call.id, name=tool_call.function.name, arguments=arguments))

        stop_reason = _FINISH_REASONS.get(choice.finish_reason or "", "other")
        return Completion(segments=segments, stop_reason=stop_reason, raw=response)
