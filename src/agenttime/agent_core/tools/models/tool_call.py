"""Data models for tool invocation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Union

from ...messages import ToolCallSegment, ToolResultSegment


@dataclass(frozen=True)
class ToolCall:
    """A normalized tool call request taken from a model completion."""

    call_id: str
    name: str
    arguments: Union[Dict[str, Any], str] = field(default_factory=dict)

    @classmethod
    def from_segment(cls, segment: ToolCallSegment) -> "ToolCall":
        return cls(
            call_id=segment.id,
            name=segment.name,
            arguments=segment.arguments if isinstance(segment.arguments, str) else dict(segment.arguments),
        )


@dataclass(frozen=True)
class ToolResult:
    """The outcome of executing a tool call.

    ``payload`` carries domain errors in-band as ``{"error": ...}``. ``is_error`` is set
    only for executor faults, i.e. when the handler raised.
    """

    name: str
    payload: Dict[str, Any]
    call_id: str = ""
    is_error: bool = False

    @property
    def error(self) -> str | None:
        value = self.payload.get("error")
        return str(value) if value is not None else None

    def to_segment(self) -> ToolResultSegment:
        return ToolResultSegment(
            tool_call_id=self.call_id,
            name=self.name,
            payload=self.payload,
            is_error=self.is_error,
        )
