import base64
import os
from typing import Any, Dict, List, Optional, Sequence

import pytest
from dotenv import find_dotenv, load_dotenv

from agenttime.agent_core.base import Completion, ModelProvider, StopReason
from agenttime.agent_core.messages import ConversationTurn, TextSegment, ToolCallSegment
from agenttime.agent_core.tools import ToolExecutor, ToolSpec, default_handlers, default_registry
from agenttime.integrations import WebClient

# Load environment variables from .env file
env_file = find_dotenv()
if not env_file:
    # This is helpful if the test runner is started from a subdirectory
    potential_env = os.path.join(os.getcwd(), ".env")
    if os.path.exists(potential_env):
        env_file = potential_env

if env_file:
    print(f"Loading .env from: {env_file}")
    load_dotenv(env_file)


def text(value: str) -> TextSegment:
    return TextSegment(text=value)


def call(name: str, call_id: str, **arguments: Any) -> ToolCallSegment:
    return ToolCallSegment(id=call_id, name=name, arguments=arguments)


class ScriptedProvider(ModelProvider[None]):
    """Model provider stub that replays a fixed list of completions.

    Every request is recorded with a snapshot of the history it was given. When the script
    runs out, ``default`` (if set) is returned for every further request.
    """

    name = "scripted"

    def __init__(
        self,
        script: Sequence[Completion] = (),
        default: Optional[Completion] = None,
        error: Optional[Exception] = None,
    ) -> None:
        super().__init__(max_retries=0, base_retry_delay=0.0)
        self.script = list(script)
        self.default = default
        self.error = error
        self.requests: List[Dict[str, Any]] = []

    async def _complete_impl(
        self, system_directive: str, tools: List[ToolSpec], history: List[ConversationTurn]
    ) -> Completion[None]:
        self.requests.append(
            {"system": system_directive, "tools": list(tools), "history": [t.model_copy(deep=True) for t in history]}
        )
        if self.error is not None:
            raise self.error
        if self.script:
            return self.script.pop(0)
        if self.default is not None:
            return self.default
        return Completion(segments=[text("Done.")], stop_reason="end_turn")


def completion(*segments: Any, stop_reason: StopReason = "end_turn") -> Completion:
    return Completion(segments=list(segments), stop_reason=stop_reason)


class FakeMail:
    def __init__(self, message_ids: Sequence[str] = (), body: str = "Hello", fail: Optional[Exception] = None) -> None:
        self.message_ids = list(message_ids)
        self.body = body
        self.fail = fail
        self.list_calls: List[Dict[str, Any]] = []
        self.fetched: List[str] = []
        self.sent: List[str] = []

    async def list_messages(self, credential: Any, *, query: str, max_results: int) -> List[Dict[str, Any]]:
        if self.fail is not None:
            raise self.fail
        self.list_calls.append({"query": query, "max_results": max_results})
        return [{"id": message_id, "threadId": f"t-{message_id}"} for message_id in self.message_ids]

    async def get_message(self, credential: Any, message_id: str) -> Dict[str, Any]:
        self.fetched.append(message_id)
        encoded = base64.urlsafe_b64encode(self.body.encode("utf-8")).decode("ascii").rstrip("=")
        return {
            "id": message_id,
            "snippet": f"snippet {message_id}",
            "payload": {
                "headers": [
                    {"name": "Subject", "value": f"Subject {message_id}"},
                    {"name": "From", "value": "alice@example.com"},
                    {"name": "date", "value": "Mon, 15 Jan 2024 10:00:00 +0000"},
                ],
                "mimeType": "multipart/alternative",
                "parts": [
                    {"mimeType": "text/html", "body": {"data": encoded}},
                    {"mimeType": "text/plain", "body": {"data": encoded}},
                ],
            },
        }

    async def send_message(self, credential: Any, raw: str) -> Dict[str, Any]:
        if self.fail is not None:
            raise self.fail
        self.sent.append(raw)
        return {"id": "sent-1"}


class FakeCalendar:
    def __init__(self, items: Sequence[Dict[str, Any]] = ()) -> None:
        self.items = list(items)
        self.list_calls: List[Dict[str, Any]] = []
        self.inserts: List[Dict[str, Any]] = []

    async def list_events(self, credential: Any, **kwargs: Any) -> List[Dict[str, Any]]:
        self.list_calls.append(kwargs)
        return list(self.items)

    async def insert_event(self, credential: Any, **kwargs: Any) -> Dict[str, Any]:
        self.inserts.append(kwargs)
        body = kwargs["body"]
        return {
            "id": "evt-1",
            "htmlLink": "https://calendar.google.com/event?eid=evt-1",
            "summary": body["summary"],
            "start": body["start"],
            "end": body["end"],
        }


class FakeCredentials:
    def __init__(self, known: Optional[Dict[str, Any]] = None) -> None:
        self.known = dict(known or {})
        self.resolved: List[str] = []

    async def resolve(self, principal: str) -> Any:
        self.resolved.append(principal)
        return self.known.get(principal)

    async def invalidate(self, principal: str) -> bool:
        return self.known.pop(principal, None) is not None


@pytest.fixture
def fake_mail() -> FakeMail:
    return FakeMail(message_ids=["m1", "m2"])


@pytest.fixture
def fake_calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def executor(fake_mail: FakeMail, fake_calendar: FakeCalendar, registry) -> ToolExecutor:
    handlers = default_handlers(mail=fake_mail, calendar=fake_calendar, web=WebClient(), time_zone="Europe/Berlin")
    return ToolExecutor(handlers, registry=registry)
