"""Gmail and Google Calendar provider clients.

The handlers only see the ``MailProvider`` / ``CalendarProvider`` protocols. The Google
implementations run the blocking discovery client in a worker thread and turn API
rejections (``HttpError``) into ``IntegrationError`` so they reach the model as domain errors.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Protocol, TypeVar

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..agent_core.exceptions import IntegrationError
from ..agent_core.logger import get_logger
from .credentials import Credential

logger = get_logger(__name__)

T = TypeVar("T")


class MailProvider(Protocol):
    async def list_messages(self, credential: Credential, *, query: str, max_results: int) -> List[Dict[str, Any]]:
        """Return message stubs (``{"id": ..., "threadId": ...}``) matching the query."""
        ...

    async def get_message(self, credential: Credential, message_id: str) -> Dict[str, Any]:
        """Return one message in Gmail's ``full`` format."""
        ...

    async def send_message(self, credential: Credential, raw: str) -> Dict[str, Any]:
        """Submit a base64url-encoded RFC 2822 message."""
        ...


class CalendarProvider(Protocol):
    async def list_events(
        self,
        credential: Credential,
        *,
        calendar_id: str,
        time_min: str,
        time_max: str,
        max_results: int,
    ) -> List[Dict[str, Any]]:
        """Return single events in the window ordered by start time."""
        ...

    async def insert_event(
        self, credential: Credential, *, calendar_id: str, body: Dict[str, Any], send_updates: str
    ) -> Dict[str, Any]:
        """Create an event and return the created resource."""
        ...


async def _call_google(api_name: str, request: Callable[[], T]) -> T:
    try:
        return await asyncio.to_thread(request)
    except HttpError as e:
        status = getattr(e.resp, "status", "?")
        reason = getattr(e, "reason", None) or str(e)
        msg = f"{api_name} API error ({status}): {reason}"
        logger.warning(msg)
        raise IntegrationError(msg) from e


class GmailProvider:
    """``MailProvider`` backed by the Gmail v1 API."""

    def __init__(self, service_factory: Optional[Callable[[Credential], Any]] = None) -> None:
        self._service_factory = service_factory or self._build_service

    @staticmethod
    def _build_service(credential: Credential) -> Any:
        return build("gmail", "v1", credentials=credential, cache_discovery=False)

    async def list_messages(self, credential: Credential, *, query: str, max_results: int) -> List[Dict[str, Any]]:
        service = self._service_factory(credential)
        response = await _call_google(
            "Gmail",
            lambda: service.users().messages().list(userId="me", maxResults=max_results, q=query).execute(),
        )
        return list(response.get("messages") or [])

    async def get_message(self, credential: Credential, message_id: str) -> Dict[str, Any]:
        service = self._service_factory(credential)
        return await _call_google(
            "Gmail",
            lambda: service.users().messages().get(userId="me", id=message_id, format="full").execute(),
        )

    async def send_message(self, credential: Credential, raw: str) -> Dict[str, Any]:
        service = self._service_factory(credential)
        return await _call_google(
            "Gmail",
            lambda: service.users().messages().send(userId="me", body={"raw": raw}).execute(),
        )


class GoogleCalendarProvider:
    """``CalendarProvider`` backed by the Google Calendar v3 API."""

    def __init__(self, service_factory: Optional[Callable[[Credential], Any]] = None) -> None:
        self._service_factory = service_factory or self._build_service

    @staticmethod
    def _build_service(credential: Credential) -> Any:
        return build("calendar", "v3", credentials=credential, cache_discovery=False)

    async def list_events(
        self,
        credential: Credential,
        *,
        calendar_id: str,
        time_min: str,
        time_max: str,
        max_results: int,
    ) -> List[Dict[str, Any]]:
        service = self._service_factory(credential)
        response = await _call_google(
            "Google Calendar",
            lambda: service.events()
            .list(
                calendarId=calendar_id,
                timeMin=time_min,
                timeMax=time_max,
                maxResults=max_results,
                singleEvents=True,
                orderBy="startTime",
            )
            .execute(),
        )
        return list(response.get("items") or [])

    async def insert_event(
        self, credential: Credential, *, calendar_id: str, body: Dict[str, Any], send_updates: str
    ) -> Dict[str, Any]:
        service = self._service_factory(credential)
        return await _call_google(
            "Google Calendar",
            lambda: service.events().insert(calendarId=calendar_id, body=body, sendUpdates=send_updates).execute(),
        )
