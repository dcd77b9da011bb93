"""Execution events streamed to the client while a task runs."""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision and a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class LogEvent(BaseModel):
    """A human-readable line for the client's execution log."""

    kind: Literal["log"] = "log"
    message: str
    severity: Severity = Severity.INFO
    timestamp: datetime = Field(default_factory=_utcnow)

    def to_wire(self) -> Dict[str, Any]:
        return {
            "eventType": "log",
            "message": self.message,
            "type": self.severity.value,
            "timestamp": format_timestamp(self.timestamp),
        }


class CompletionEvent(BaseModel):
    """Terminal event of an execution. Exactly one is emitted, and it is always last."""

    kind: Literal["completion"] = "completion"
    success: bool
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)

    def to_wire(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"eventType": "complete", "success": self.success}
        if self.error is not None:
            data["error"] = self.error
        data["timestamp"] = format_timestamp(self.timestamp)
        return data


ExecutionEvent = Annotated[Union[LogEvent, CompletionEvent], Field(discriminator="kind")]
