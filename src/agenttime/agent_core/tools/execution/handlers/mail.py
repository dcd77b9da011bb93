"""Gmail read/send handlers."""

import asyncio
import base64
from typing import Any, Dict, List, Optional

from .....integrations import MailProvider
from ....events import Severity
from ....exceptions import IntegrationError
from ....logger import get_logger
from ...registry import GET_EMAILS, SEND_EMAIL
from .base import Summary, ToolHandler

logger = get_logger(__name__)

DEFAULT_QUERY = "is:unread"
DEFAULT_MAX_RESULTS = 10
HYDRATED_MESSAGE_CAP = 5
BODY_CHAR_BUDGET = 500


def _decode_body(data: str) -> str:
    # Gmail strips the base64 padding
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def _iter_parts(payload: Dict[str, Any]):
    for part in payload.get("parts") or []:
        yield part
        yield from _iter_parts(part)


def extract_body(payload: Dict[str, Any]) -> str:
    """Pick the message body: inline body first, then text/plain, then the first text/* part."""
    data = (payload.get("body") or {}).get("data")
    if data:
        return _decode_body(data)

    text_parts = [
        p
        for p in _iter_parts(payload)
        if str(p.get("mimeType", "")).startswith("text/") and (p.get("body") or {}).get("data")
    ]
    plain = next((p for p in text_parts if p.get("mimeType") == "text/plain"), None)
    chosen = plain or (text_parts[0] if text_parts else None)
    if chosen is None:
        return ""
    return _decode_body(chosen["body"]["data"])


def _header(headers: List[Dict[str, Any]], name: str) -> str:
    wanted = name.lower()
    for header in headers:
        if str(header.get("name", "")).lower() == wanted:
            return header.get("value") or ""
    return ""


class GetEmailsHandler(ToolHandler):
    spec = GET_EMAILS
    integration = "Gmail"

    def __init__(self, mail: MailProvider) -> None:
        self.mail = mail

    async def invoke(self, arguments: Dict[str, Any], credential: Any) -> Dict[str, Any]:
        query = arguments.get("query") or DEFAULT_QUERY
        max_results = arguments.get("maxResults") or DEFAULT_MAX_RESULTS

        try:
            stubs = await self.mail.list_messages(credential, query=query, max_results=max_results)
            details = await asyncio.gather(
                *(self.mail.get_message(credential, stub["id"]) for stub in stubs[:HYDRATED_MESSAGE_CAP])
            )
        except IntegrationError as e:
            return {"error": str(e)}

        emails = [self._hydrate(stub["id"], detail) for stub, detail in zip(stubs, details)]
        logger.debug(f"Hydrated {len(emails)} of {len(stubs)} matching message(s).")
        return {"emails": emails, "count": len(stubs)}

    @staticmethod
    def _hydrate(message_id: str, detail: Dict[str, Any]) -> Dict[str, Any]:
        payload = detail.get("payload") or {}
        headers = payload.get("headers") or []
        return {
            "id": message_id,
            "subject": _header(headers, "Subject"),
            "from": _header(headers, "From"),
            "date": _header(headers, "Date"),
            "snippet": detail.get("snippet"),
            "body": extract_body(payload)[:BODY_CHAR_BUDGET],
        }

    def summarize(self, arguments: Dict[str, Any], payload: Dict[str, Any]) -> Optional[Summary]:
        if "emails" not in payload:
            return None
        return f"Retrieved {len(payload['emails'])} emails ({payload['count']} total matching)", Severity.SUCCESS


def build_raw_message(to: str, subject: str, body: str) -> str:
    """Minimal RFC 2822 message, base64url encoded for the Gmail API."""
    content = "\n".join(
        [
            f"To: {to}",
            f"Subject: {subject}",
            "Content-Type: text/plain; charset=utf-8",
            "",
            body,
        ]
    )
    return base64.urlsafe_b64encode(content.encode("utf-8")).decode("ascii")


class SendEmailHandler(ToolHandler):
    spec = SEND_EMAIL
    integration = "Gmail"

    def __init__(self, mail: MailProvider) -> None:
        self.mail = mail

    async def invoke(self, arguments: Dict[str, Any], credential: Any) -> Dict[str, Any]:
        raw = build_raw_message(arguments.get("to", ""), arguments.get("subject", ""), arguments.get("body", ""))
        try:
            sent = await self.mail.send_message(credential, raw)
        except IntegrationError as e:
            return {"error": str(e)}
        return {"success": True, "messageId": sent.get("id")}

    def summarize(self, arguments: Dict[str, Any], payload: Dict[str, Any]) -> Optional[Summary]:
        if not payload.get("success"):
            return None
        return "Email sent successfully", Severity.SUCCESS
