"""Single-producer event channel between the driver and the transport."""

import asyncio
import json
from typing import AsyncIterator, Optional, Union

from ..exceptions import AgentTimeError
from ..logger import get_logger
from .models import CompletionEvent, LogEvent, Severity

logger = get_logger(__name__)

Event = Union[LogEvent, CompletionEvent]

_CLOSED = object()


class EventStream:
    """
    Ordered, one-shot channel of execution events.

    The driver is the only writer. The transport drains the stream with ``async for``; the
    iteration ends after the completion event. Events are never replayed: once drained they
    are gone.
    """

    def __init__(self) -> None:
        self._queue: "asyncio.Queue[object]" = asyncio.Queue()
        self._completed = False
        self._closed = False

    @property
    def completed(self) -> bool:
        """True once a completion event has been emitted."""
        return self._completed

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, event: Event) -> None:
        """Push an event to the subscriber.

        Raises:
            AgentTimeError: If the stream is already closed or completed.
        """
        if self._closed or self._completed:
            raise AgentTimeError(f"Cannot emit '{event.kind}' event: the stream is already finished.")
        self._queue.put_nowait(event)
        if isinstance(event, CompletionEvent):
            self._completed = True
            self.close()

    def log(self, message: str, severity: Severity = Severity.INFO) -> None:
        self.emit(LogEvent(message=message, severity=severity))

    def complete(self, success: bool, error: Optional[str] = None) -> None:
        self.emit(CompletionEvent(success=success, error=error))

    def close(self) -> None:
        """End iteration for the subscriber after the already queued events."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[Event]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item  # type: ignore[misc]


def encode_sse(event: Event) -> str:
    """Encode an event as a single Server-Sent Events ``data:`` frame."""
    return f"data: {json.dumps(event.to_wire())}\n\n"
