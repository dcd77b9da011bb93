"""Google Calendar read/create handlers."""

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .....integrations import CalendarProvider
from ....events import Severity
from ....exceptions import IntegrationError
from ....logger import get_logger
from ...registry import CREATE_CALENDAR_EVENT, GET_CALENDAR_EVENTS
from .base import Summary, ToolHandler

logger = get_logger(__name__)

DEFAULT_CALENDAR_ID = "primary"
DEFAULT_MAX_RESULTS = 10
DEFAULT_WINDOW = timedelta(days=7)


def _is_zone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def local_timezone_name() -> str:
    """IANA name of the host's local time zone, or ``UTC`` when it cannot be determined."""
    candidates = [os.environ.get("TZ", "").lstrip(":")]

    timezone_file = Path("/etc/timezone")
    if timezone_file.is_file():
        candidates.append(timezone_file.read_text(encoding="utf-8").strip())

    localtime = Path("/etc/localtime")
    if localtime.is_symlink():
        target = str(localtime.resolve())
        if "zoneinfo/" in target:
            candidates.append(target.split("zoneinfo/", 1)[1])

    for name in candidates:
        if name and _is_zone(name):
            return name
    return "UTC"


def _isoformat_utc(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class GetCalendarEventsHandler(ToolHandler):
    spec = GET_CALENDAR_EVENTS
    integration = "Google Calendar"

    def __init__(self, calendar: CalendarProvider) -> None:
        self.calendar = calendar

    async def invoke(self, arguments: Dict[str, Any], credential: Any) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        try:
            items = await self.calendar.list_events(
                credential,
                calendar_id=arguments.get("calendarId") or DEFAULT_CALENDAR_ID,
                time_min=arguments.get("timeMin") or _isoformat_utc(now),
                time_max=arguments.get("timeMax") or _isoformat_utc(now + DEFAULT_WINDOW),
                max_results=arguments.get("maxResults") or DEFAULT_MAX_RESULTS,
            )
        except IntegrationError as e:
            return {"error": str(e)}

        events = [self._flatten(item) for item in items]
        return {"events": events, "count": len(events)}

    @staticmethod
    def _flatten(event: Dict[str, Any]) -> Dict[str, Any]:
        start = event.get("start") or {}
        end = event.get("end") or {}
        attendees = event.get("attendees")
        return {
            "id": event.get("id"),
            "summary": event.get("summary"),
            "description": event.get("description"),
            "location": event.get("location"),
            "start": start.get("dateTime") or start.get("date"),
            "end": end.get("dateTime") or end.get("date"),
            "attendees": (
                [{"email": a.get("email"), "name": a.get("displayName"), "status": a.get("responseStatus")} for a in attendees]
                if attendees is not None
                else None
            ),
            "htmlLink": event.get("htmlLink"),
        }

    def summarize(self, arguments: Dict[str, Any], payload: Dict[str, Any]) -> Optional[Summary]:
        if "events" not in payload:
            return None
        return f"Retrieved {len(payload['events'])} calendar events", Severity.SUCCESS


class CreateCalendarEventHandler(ToolHandler):
    spec = CREATE_CALENDAR_EVENT
    integration = "Google Calendar"

    def __init__(self, calendar: CalendarProvider, time_zone: Optional[str] = None) -> None:
        """
        Args:
            calendar: Calendar provider client.
            time_zone: IANA zone attached to start and end. Defaults to the host's local zone.
        """
        self.calendar = calendar
        self.time_zone = time_zone or local_timezone_name()

    async def invoke(self, arguments: Dict[str, Any], credential: Any) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "summary": arguments.get("summary"),
            "description": arguments.get("description"),
            "location": arguments.get("location"),
            "start": {"dateTime": arguments.get("startTime"), "timeZone": self.time_zone},
            "end": {"dateTime": arguments.get("endTime"), "timeZone": self.time_zone},
        }
        attendees = arguments.get("attendees") or []
        if attendees:
            body["attendees"] = [{"email": email} for email in attendees]

        try:
            created = await self.calendar.insert_event(
                credential,
                calendar_id=DEFAULT_CALENDAR_ID,
                body=body,
                send_updates="all" if attendees else "none",
            )
        except IntegrationError as e:
            return {"error": str(e)}

        return {
            "success": True,
            "eventId": created.get("id"),
            "htmlLink": created.get("htmlLink"),
            "summary": created.get("summary"),
            "start": (created.get("start") or {}).get("dateTime"),
            "end": (created.get("end") or {}).get("dateTime"),
        }

    def summarize(self, arguments: Dict[str, Any], payload: Dict[str, Any]) -> Optional[Summary]:
        if not payload.get("success"):
            return None
        return f'Calendar event created: "{payload.get("summary")}"', Severity.SUCCESS
