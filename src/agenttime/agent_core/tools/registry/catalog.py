"""The default tool catalog: argument models and the specs built from them."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .base import ToolRegistry, build_tool_spec


class _ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GetEmailsArgs(_ToolArgs):
    """Retrieve emails from Gmail inbox. Can filter by query."""

    query: Optional[str] = Field(
        default=None, description='Gmail search query (e.g., "is:unread", "from:someone@email.com")'
    )
    max_results: Optional[int] = Field(
        default=None, alias="maxResults", description="Maximum number of emails to retrieve (default 10)"
    )


class SendEmailArgs(_ToolArgs):
    """Send an email via Gmail"""

    to: str = Field(description="Recipient email address")
    subject: str = Field(description="Email subject line")
    body: str = Field(description="Email body content")


class LogProgressArgs(_ToolArgs):
    """Log progress or status update for the current task"""

    message: str = Field(description="Progress message to log")
    type: Optional[Literal["info", "success", "warning", "error"]] = Field(
        default=None, description="Type of log message"
    )


class GetCalendarEventsArgs(_ToolArgs):
    """Retrieve events from Google Calendar. Can specify time range and calendar."""

    time_min: Optional[str] = Field(
        default=None,
        alias="timeMin",
        description='Start time for events (ISO 8601 format, e.g., "2024-01-15T00:00:00Z"). Defaults to now.',
    )
    time_max: Optional[str] = Field(
        default=None, alias="timeMax", description="End time for events (ISO 8601 format). Defaults to 7 days from now."
    )
    max_results: Optional[int] = Field(
        default=None, alias="maxResults", description="Maximum number of events to retrieve (default 10)"
    )
    calendar_id: Optional[str] = Field(
        default=None, alias="calendarId", description='Calendar ID to query (default "primary")'
    )


class CreateCalendarEventArgs(_ToolArgs):
    """Create a new event on Google Calendar"""

    summary: str = Field(description="Event title/summary")
    description: Optional[str] = Field(default=None, description="Event description")
    start_time: str = Field(
        alias="startTime", description='Start time (ISO 8601 format, e.g., "2024-01-15T10:00:00-08:00")'
    )
    end_time: str = Field(alias="endTime", description="End time (ISO 8601 format)")
    location: Optional[str] = Field(default=None, description="Event location (optional)")
    attendees: Optional[List[str]] = Field(
        default=None, description="List of attendee email addresses (optional)"
    )


class WebSearchArgs(_ToolArgs):
    """Search the web for information on a topic. Use this for research tasks to find current news, articles, and information."""

    query: str = Field(description="The search query to find information about")
    max_results: Optional[int] = Field(
        default=None, alias="maxResults", description="Maximum number of results to return (default 5)"
    )


class FetchWebpageArgs(_ToolArgs):
    """Fetch and read the content of a webpage. Use this to get detailed information from a specific URL."""

    url: str = Field(description="The URL of the webpage to fetch")


GET_EMAILS = build_tool_spec("get_emails", GetEmailsArgs)
SEND_EMAIL = build_tool_spec("send_email", SendEmailArgs)
LOG_PROGRESS = build_tool_spec("log_progress", LogProgressArgs)
GET_CALENDAR_EVENTS = build_tool_spec("get_calendar_events", GetCalendarEventsArgs)
CREATE_CALENDAR_EVENT = build_tool_spec("create_calendar_event", CreateCalendarEventArgs)
WEB_SEARCH = build_tool_spec("web_search", WebSearchArgs)
FETCH_WEBPAGE = build_tool_spec("fetch_webpage", FetchWebpageArgs)

DEFAULT_TOOL_SPECS = (
    GET_EMAILS,
    SEND_EMAIL,
    LOG_PROGRESS,
    GET_CALENDAR_EVENTS,
    CREATE_CALENDAR_EVENT,
    WEB_SEARCH,
    FETCH_WEBPAGE,
)


def default_registry() -> ToolRegistry:
    """Build the registry holding every built-in tool."""
    return ToolRegistry(DEFAULT_TOOL_SPECS)
