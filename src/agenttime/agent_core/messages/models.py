"""Provider-agnostic conversation models.

A conversation is an append-only list of ``ConversationTurn`` objects. Each turn carries an
ordered list of content segments; providers translate these to and from their wire formats.
"""

from typing import Annotated, Any, Dict, List, Literal, Union

from pydantic import BaseModel, Field


class TextSegment(BaseModel):
    """Plain text produced by the model or the user."""

    type: Literal["text"] = "text"
    text: str


class ToolCallSegment(BaseModel):
    """A tool invocation requested by the model.

    Attributes:
        id: Opaque correlation token, echoed back by the matching ``ToolResultSegment``.
        name: Name of the requested tool.
        arguments: Structured arguments as produced by the model, or the raw string when the
            model emitted arguments that do not decode to a JSON object.
    """

    type: Literal["tool_call"] = "tool_call"
    id: str
    name: str
    arguments: Union[Dict[str, Any], str] = Field(default_factory=dict)


class ToolResultSegment(BaseModel):
    """The outcome of one tool invocation, tagged to its call id.

    Attributes:
        tool_call_id: Correlation token of the originating ``ToolCallSegment``.
        name: Name of the tool that produced the result.
        payload: Success value or ``{"error": ...}`` domain error.
        is_error: True only when the invocation itself raised (executor fault).
    """

    type: Literal["tool_result"] = "tool_result"
    tool_call_id: str
    name: str
    payload: Dict[str, Any]
    is_error: bool = False


ContentSegment = Annotated[Union[TextSegment, ToolCallSegment, ToolResultSegment], Field(discriminator="type")]


class ConversationTurn(BaseModel):
    """One turn of the conversation."""

    role: Literal["user", "assistant"]
    segments: List[ContentSegment]

    @classmethod
    def user_text(cls, text: str) -> "ConversationTurn":
        return cls(role="user", segments=[TextSegment(text=text)])

    @property
    def text(self) -> str:
        """Concatenated text of all text segments."""
        return "".join(s.text for s in self.segments if isinstance(s, TextSegment))

    @property
    def tool_calls(self) -> List[ToolCallSegment]:
        return [s for s in self.segments if isinstance(s, ToolCallSegment)]

    @property
    def tool_results(self) -> List[ToolResultSegment]:
        return [s for s in self.segments if isinstance(s, ToolResultSegment)]
