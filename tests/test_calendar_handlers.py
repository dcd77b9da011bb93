from datetime import datetime, timedelta, timezone
from zoneinfo import available_timezones

import pytest

from agenttime.agent_core.events import Severity
from agenttime.agent_core.tools.execution.handlers import (
    CreateCalendarEventHandler,
    GetCalendarEventsHandler,
    local_timezone_name,
)

from conftest import FakeCalendar

CREDENTIAL = object()


def require_zone(name: str) -> None:
    if name not in available_timezones():
        pytest.skip(f"time zone data for {name} is not installed")


def parse_utc(value: str) -> datetime:
    assert value.endswith("Z")
    return datetime.fromisoformat(value[:-1]).replace(tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_get_events_defaults_to_next_seven_days(fake_calendar: FakeCalendar) -> None:
    handler = GetCalendarEventsHandler(fake_calendar)
    payload = await handler.invoke({}, CREDENTIAL)

    assert payload == {"events": [], "count": 0}
    request = fake_calendar.list_calls[0]
    assert request["calendar_id"] == "primary"
    assert request["max_results"] == 10

    window = parse_utc(request["time_max"]) - parse_utc(request["time_min"])
    assert abs(window - timedelta(days=7)) < timedelta(seconds=1)
    assert abs(parse_utc(request["time_min"]) - datetime.now(timezone.utc)) < timedelta(minutes=1)


@pytest.mark.asyncio
async def test_get_events_passes_explicit_range() -> None:
    calendar = FakeCalendar()
    await GetCalendarEventsHandler(calendar).invoke(
        {"timeMin": "2024-01-15T00:00:00Z", "timeMax": "2024-01-16T00:00:00Z", "maxResults": 3, "calendarId": "team"},
        CREDENTIAL,
    )

    assert calendar.list_calls == [
        {
            "calendar_id": "team",
            "time_min": "2024-01-15T00:00:00Z",
            "time_max": "2024-01-16T00:00:00Z",
            "max_results": 3,
        }
    ]


@pytest.mark.asyncio
async def test_get_events_flattens_events() -> None:
    calendar = FakeCalendar(
        items=[
            {
                "id": "e1",
                "summary": "Standup",
                "start": {"dateTime": "2024-01-15T09:00:00+01:00"},
                "end": {"dateTime": "2024-01-15T09:15:00+01:00"},
                "attendees": [{"email": "a@example.com", "displayName": "Ann", "responseStatus": "accepted"}],
                "htmlLink": "https://calendar.google.com/e1",
            },
            {"id": "e2", "summary": "Holiday", "start": {"date": "2024-01-20"}, "end": {"date": "2024-01-21"}},
        ]
    )
    handler = GetCalendarEventsHandler(calendar)
    payload = await handler.invoke({}, CREDENTIAL)

    first, second = payload["events"]
    assert first["start"] == "2024-01-15T09:00:00+01:00"
    assert first["attendees"] == [{"email": "a@example.com", "name": "Ann", "status": "accepted"}]
    assert second["start"] == "2024-01-20"
    assert second["attendees"] is None
    assert payload["count"] == 2
    assert handler.summarize({}, payload) == ("Retrieved 2 calendar events", Severity.SUCCESS)


@pytest.mark.asyncio
async def test_create_event_without_attendees_sends_no_updates() -> None:
    calendar = FakeCalendar()
    handler = CreateCalendarEventHandler(calendar, time_zone="Europe/Berlin")
    payload = await handler.invoke(
        {"summary": "Focus time", "startTime": "2024-01-15T10:00:00", "endTime": "2024-01-15T11:00:00"},
        CREDENTIAL,
    )

    insert = calendar.inserts[0]
    assert insert["calendar_id"] == "primary"
    assert insert["send_updates"] == "none"
    assert "attendees" not in insert["body"]
    assert insert["body"]["start"] == {"dateTime": "2024-01-15T10:00:00", "timeZone": "Europe/Berlin"}
    assert payload == {
        "success": True,
        "eventId": "evt-1",
        "htmlLink": "https://calendar.google.com/event?eid=evt-1",
        "summary": "Focus time",
        "start": "2024-01-15T10:00:00",
        "end": "2024-01-15T11:00:00",
    }
    assert handler.summarize({}, payload) == ('Calendar event created: "Focus time"', Severity.SUCCESS)


@pytest.mark.asyncio
async def test_create_event_with_attendees_notifies_them() -> None:
    calendar = FakeCalendar()
    await CreateCalendarEventHandler(calendar, time_zone="UTC").invoke(
        {
            "summary": "Review",
            "startTime": "2024-01-15T10:00:00Z",
            "endTime": "2024-01-15T11:00:00Z",
            "attendees": ["a@example.com", "b@example.com"],
        },
        CREDENTIAL,
    )

    insert = calendar.inserts[0]
    assert insert["send_updates"] == "all"
    assert insert["body"]["attendees"] == [{"email": "a@example.com"}, {"email": "b@example.com"}]


@pytest.mark.asyncio
async def test_create_event_with_empty_attendee_list_sends_no_updates() -> None:
    calendar = FakeCalendar()
    await CreateCalendarEventHandler(calendar, time_zone="UTC").invoke(
        {"summary": "Solo", "startTime": "s", "endTime": "e", "attendees": []}, CREDENTIAL
    )

    assert calendar.inserts[0]["send_updates"] == "none"
    assert "attendees" not in calendar.inserts[0]["body"]


def test_local_timezone_honours_tz_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    require_zone("America/New_York")
    monkeypatch.setenv("TZ", "America/New_York")
    assert local_timezone_name() == "America/New_York"


def test_create_handler_defaults_to_local_zone(monkeypatch: pytest.MonkeyPatch) -> None:
    require_zone("Asia/Tokyo")
    monkeypatch.setenv("TZ", "Asia/Tokyo")
    assert CreateCalendarEventHandler(FakeCalendar()).time_zone == "Asia/Tokyo"
