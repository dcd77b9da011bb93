"""Per-tool handlers, one class per tool name."""

from typing import List, Optional

from .....integrations import CalendarProvider, MailProvider, WebClient
from .base import Summary, ToolHandler
from .calendar import CreateCalendarEventHandler, GetCalendarEventsHandler, local_timezone_name
from .mail import GetEmailsHandler, SendEmailHandler, build_raw_message, extract_body
from .progress import LogProgressHandler
from .web import FetchWebpageHandler, WebSearchHandler, extract_text, parse_search_results


def default_handlers(
    mail: MailProvider,
    calendar: CalendarProvider,
    web: WebClient,
    time_zone: Optional[str] = None,
    page_fetch_timeout: float = 10.0,
) -> List[ToolHandler]:
    """Handlers for every tool of the default catalog, in catalog order."""
    return [
        GetEmailsHandler(mail),
        SendEmailHandler(mail),
        LogProgressHandler(),
        GetCalendarEventsHandler(calendar),
        CreateCalendarEventHandler(calendar, time_zone=time_zone),
        WebSearchHandler(web),
        FetchWebpageHandler(web, timeout=page_fetch_timeout),
    ]


__all__ = [
    "Summary",
    "ToolHandler",
    "CreateCalendarEventHandler",
    "GetCalendarEventsHandler",
    "local_timezone_name",
    "GetEmailsHandler",
    "SendEmailHandler",
    "build_raw_message",
    "extract_body",
    "LogProgressHandler",
    "FetchWebpageHandler",
    "WebSearchHandler",
    "extract_text",
    "parse_search_results",
    "default_handlers",
]
