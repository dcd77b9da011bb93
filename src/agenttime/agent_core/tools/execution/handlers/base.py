"""Handler interface: one implementation per tool name."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Optional, Tuple

from ....events import Severity
from ...models import ToolSpec

Summary = Tuple[str, Severity]


class ToolHandler(ABC):
    """
    Implements one tool of the catalog.

    Attributes:
        spec: The ToolSpec this handler serves. Dispatch is by ``spec.name``.
        integration: Display name of the integration the tool needs (e.g. ``"Gmail"``), or
            None when the tool works without a credential.
        account: Display name of the account that provides the integration.
    """

    spec: ClassVar[ToolSpec]
    integration: ClassVar[Optional[str]] = None
    account: ClassVar[str] = "Google"

    @property
    def name(self) -> str:
        return self.spec.name

    def not_connected_error(self) -> Dict[str, Any]:
        return {"error": f"{self.integration} not connected. Please connect your {self.account} account first."}

    @abstractmethod
    async def invoke(self, arguments: Dict[str, Any], credential: Any) -> Dict[str, Any]:
        """Run the tool.

        Args:
            arguments: Tool arguments keyed by their wire (camelCase) names.
            credential: The acting principal's credential. Never None for handlers that
                declare an ``integration``.

        Returns:
            The result payload, or ``{"error": ...}`` for domain errors.
        """

    def summarize(self, arguments: Dict[str, Any], payload: Dict[str, Any]) -> Optional[Summary]:
        """Client-facing summary of a successful result, or None to fall back to the generic one."""
        return None
