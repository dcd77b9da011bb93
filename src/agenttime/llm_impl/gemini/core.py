import uuid
from typing import Any, List, Optional

from google.genai import types
from google.genai.client import AsyncClient
from google.genai.types import GenerateContentResponse

from agenttime.agent_core import get_logger
from agenttime.agent_core.base import Completion, ModelProvider, StopReason
from agenttime.agent_core.messages import ConversationTurn, TextSegment, ToolCallSegment, ToolResultSegment
from agenttime.agent_core.tools.models import ToolSpec
from .schema_sanitizer import sanitize

logger = get_logger(__name__)


class GeminiProvider(ModelProvider[GenerateContentResponse]):
    """
    Model provider for Google's Gemini models.

    Gemini has no system role in the history: the directive goes into the request config.
    Function calls without an id get a generated one so results can still be correlated.
    """

    name = "gemini"

    def __init__(
        self,
        aclient: AsyncClient,
        model_name: str = "gemini-2.5-flash",
        max_tokens: int = 4096,
        temp: float = 1.0,
        max_retries: int = 3,
        base_retry_delay: float = 1.0,
    ):
        """
        Initializes the Gemini model provider.

        Args:
            aclient: The initialized async Google GenAI client (``genai.Client(...).aio``).
            model_name: The identifier for the Gemini model to use.
            max_tokens: The maximum number of tokens to generate in the response.
            temp: The temperature for text generation, controlling randomness.
            max_retries: Retries for failed API calls.
            base_retry_delay: Initial backoff delay in seconds.
        """
        super().__init__(max_retries=max_retries, base_retry_delay=base_retry_delay)
        self.client: AsyncClient = aclient
        self.model: str = model_name
        self.max_tokens = max_tokens
        self.temperature = temp
        logger.info(f"Initialized GeminiProvider with model='{model_name}', temp={temp}, max_tokens={max_tokens}")

    async def _complete_impl(
        self, system_directive: str, tools: List[ToolSpec], history: List[ConversationTurn]
    ) -> Completion[GenerateContentResponse]:
        tool_obj = self.convert_tools(tools)
        config = types.GenerateContentConfig(
            system_instruction=system_directive,
            temperature=self.temperature,
            max_output_tokens=self.max_tokens,
            tools=[tool_obj] if tool_obj else None,
        )
        response = await self.client.models.generate_content(
            model=self.model,
            contents=self.convert_history(history),  # type: ignore[arg-type]
            config=config,
        )
        return self.parse_response(response)

    @staticmethod
    def convert_tools(tools: List[ToolSpec]) -> Optional[types.Tool]:
        if not tools:
            return None
        declarations = []
        for tool in tools:
            if tool.input_schema.get("properties"):
                declarations.append(
                    types.FunctionDeclaration(
                        name=tool.name, description=tool.description, parameters=sanitize(tool.input_schema)
                    )
                )
            else:
                declarations.append(types.FunctionDeclaration(name=tool.name, description=tool.description))
        return types.Tool(function_declarations=declarations)

    @staticmethod
    def convert_history(history: List[ConversationTurn]) -> List[types.Content]:
        """
        Converts provider-agnostic turns to Gemini Content objects.

        Args:
            history: The conversation turns.

        Returns:
            List of Gemini Content objects.
        """
        contents = []
        for turn in history:
            parts: List[types.Part] = []
            for segment in turn.segments:
                if isinstance(segment, TextSegment):
                    parts.append(types.Part(text=segment.text))
                elif isinstance(segment, ToolCallSegment):
                    parts.append(
                        types.Part(
                            function_call=types.FunctionCall(id=segment.id, name=segment.name, args=segment.arguments)
                        )
                    )
                elif isinstance(segment, ToolResultSegment):
                    parts.append(
                        types.Part(
                            function_response=types.FunctionResponse(
                                id=segment.tool_call_id, name=segment.name, response=segment.payload
                            )
                        )
                    )
            contents.append(types.Content(role="model" if turn.role == "assistant" else "user", parts=parts))
        return contents

    @staticmethod
    def parse_response(response: GenerateContentResponse) -> Completion[GenerateContentResponse]:
        candidate = response.candidates[0] if response.candidates else None
        parts: List[Any] = (candidate.content.parts or []) if candidate and candidate.content else []

        segments: List[TextSegment | ToolCallSegment] = []
        for part in parts:
            if part.function_call:
                call = part.function_call
                segments.append(
                    ToolCallSegment(
                        id=call.id or f"call_{uuid.uuid4().hex[:12]}",
                        name=call.name or "",
                        arguments=dict(call.args or {}),
                    )
                )
            elif part.text:
                segments.append(TextSegment(text=part.text))

        stop_reason: StopReason
        if any(isinstance(s, ToolCallSegment) for s in segments):
            # Gemini reports STOP for function calls too
            stop_reason = "tool_use"
        elif candidate is not None and candidate.finish_reason == types.FinishReason.STOP:
            stop_reason = "end_turn"
        elif candidate is not None and candidate.finish_reason == types.FinishReason.MAX_TOKENS:
            stop_reason = "max_tokens"
        else:
            stop_reason = "other"
        return Completion(segments=segments, stop_reason=stop_reason, raw=response)
