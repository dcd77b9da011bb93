"""Tool registry and the built-in tool catalog."""

from .base import ToolRegistry, build_tool_spec
from .catalog import (
    DEFAULT_TOOL_SPECS,
    CREATE_CALENDAR_EVENT,
    FETCH_WEBPAGE,
    GET_CALENDAR_EVENTS,
    GET_EMAILS,
    LOG_PROGRESS,
    SEND_EMAIL,
    WEB_SEARCH,
    default_registry,
)

__all__ = [
    "ToolRegistry",
    "build_tool_spec",
    "DEFAULT_TOOL_SPECS",
    "CREATE_CALENDAR_EVENT",
    "FETCH_WEBPAGE",
    "GET_CALENDAR_EVENTS",
    "GET_EMAILS",
    "LOG_PROGRESS",
    "SEND_EMAIL",
    "WEB_SEARCH",
    "default_registry",
]
