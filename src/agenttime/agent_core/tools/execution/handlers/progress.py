from typing import Any, Dict, Optional

from ....events import Severity
from ...registry import LOG_PROGRESS
from .base import Summary, ToolHandler


class LogProgressHandler(ToolHandler):
    """Pseudo-tool: the model reports progress, the driver relays it to the client verbatim."""

    spec = LOG_PROGRESS

    async def invoke(self, arguments: Dict[str, Any], credential: Any) -> Dict[str, Any]:
        return {"logged": True, "message": arguments.get("message"), "type": arguments.get("type") or "info"}

    def summarize(self, arguments: Dict[str, Any], payload: Dict[str, Any]) -> Optional[Summary]:
        if "error" in payload:
            return None
        try:
            severity = Severity(arguments.get("type") or "info")
        except ValueError:
            severity = Severity.INFO
        return str(arguments.get("message", "")), severity
