"""Execution events and the stream that carries them to the client."""

from .models import CompletionEvent, ExecutionEvent, LogEvent, Severity, format_timestamp
from .stream import EventStream, encode_sse

__all__ = [
    "CompletionEvent",
    "ExecutionEvent",
    "LogEvent",
    "Severity",
    "format_timestamp",
    "EventStream",
    "encode_sse",
]
