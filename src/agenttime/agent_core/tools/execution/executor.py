"""Tool executor: dispatches tool calls to their handlers."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Iterable, Optional

from ...events import Severity
from ...exceptions import ToolExecutionError, ToolRegistrationError
from ...logger import get_logger
from ..models import ToolCall, ToolResult
from ..registry import ToolRegistry
from ..schema import SchemaValidator
from .handlers import Summary, ToolHandler

logger = get_logger(__name__)


class ToolExecutor:
    """Maps a tool call to a result payload by delegating to the matching handler.

    Tool-level failures never escape: unknown tools, missing connections and upstream
    rejections are domain errors (``{"error": ...}``), and anything a handler raises
    becomes an error-flagged ``ToolResult``.
    """

    def __init__(
        self,
        handlers: Iterable[ToolHandler],
        registry: Optional[ToolRegistry] = None,
        tool_timeout: Optional[float] = None,
    ) -> None:
        """Initialize the executor.

        Args:
            handlers: One handler per tool name.
            registry: Optional registry. When given, every registered tool must have a handler.
            tool_timeout: Optional timeout in seconds for a single handler call. None means
                the handlers' own transport timeouts apply.

        Raises:
            ToolRegistrationError: On duplicate handlers or registry tools without a handler.
        """
        table: Dict[str, ToolHandler] = {}
        for handler in handlers:
            if handler.name in table:
                msg = f"Handler for tool '{handler.name}' is already registered."
                logger.error(msg)
                raise ToolRegistrationError(msg)
            table[handler.name] = handler

        if registry is not None:
            missing = [name for name in registry.names if name not in table]
            if missing:
                msg = f"No handler registered for tool(s): {', '.join(missing)}"
                logger.error(msg)
                raise ToolRegistrationError(msg)

        self._handlers = table
        self._tool_timeout = tool_timeout

    @property
    def tool_timeout(self) -> Optional[float]:
        return self._tool_timeout

    @property
    def tool_names(self) -> list[str]:
        return list(self._handlers)

    async def invoke(self, name: str, arguments: Any, credential: Any = None, call_id: str = "") -> ToolResult:
        """Run one tool call.

        Args:
            name: Tool name as requested by the model.
            arguments: Raw arguments (dict, JSON string or None).
            credential: The acting principal's credential, or None when not connected.
            call_id: Correlation token copied onto the result.

        Returns:
            The ToolResult. ``is_error`` is set only if the handler raised.
        """
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning(f"Tool '{name}' not found.")
            return ToolResult(name=name, payload={"error": f"Unknown tool: {name}"}, call_id=call_id)

        try:
            function_args = self._normalize_function_args(name, arguments)
        except ToolExecutionError as exc:
            logger.warning(f"Argument normalization failed for '{name}': {exc}")
            return ToolResult(name=name, payload={"error": str(exc)}, call_id=call_id)

        if handler.integration and credential is None:
            logger.info(f"Tool '{name}' needs {handler.integration}, which is not connected.")
            return ToolResult(name=name, payload=handler.not_connected_error(), call_id=call_id)

        function_args = self._advisory_validate(handler, function_args)

        try:
            logger.info(f"Executing tool '{name}'...")
            payload = await self._execute_tool(handler, function_args, credential)
        except Exception as exc:
            msg = str(exc) or type(exc).__name__
            logger.error(f"Tool '{name}' raised: {msg}", exc_info=True)
            return ToolResult(name=name, payload={"error": msg}, call_id=call_id, is_error=True)

        if not isinstance(payload, dict):
            payload = {"result": payload}
        logger.info(f"Tool '{name}' executed.")
        return ToolResult(name=name, payload=payload, call_id=call_id)

    async def invoke_call(self, call: ToolCall, credential: Any = None) -> ToolResult:
        return await self.invoke(call.name, call.arguments, credential, call_id=call.call_id)

    def summarize(self, call: ToolCall, result: ToolResult) -> Optional[Summary]:
        """Client-facing summary line for a tool result.

        Returns:
            ``(message, severity)``, or None when the result warrants no summary.
        """
        if result.is_error:
            return f"Tool execution failed: {result.error}", Severity.ERROR

        handler = self._handlers.get(call.name)
        if handler is not None:
            summary = handler.summarize(call.arguments if isinstance(call.arguments, dict) else {}, result.payload)
            if summary is not None:
                return summary

        if result.error is not None:
            return f"Tool error: {result.error}", Severity.ERROR
        return None

    def _advisory_validate(self, handler: ToolHandler, function_args: Dict[str, Any]) -> Dict[str, Any]:
        """Check arguments against the tool's model without rejecting them.

        Valid arguments are normalized to their wire names; invalid ones pass through unchanged
        so the handler or upstream provider reports the problem.
        """
        args_model = handler.spec.args_model
        if args_model is None:
            return function_args

        issues = SchemaValidator.advisory_issues(args_model, function_args)
        if issues:
            logger.warning(f"Arguments for '{handler.name}' do not match the schema: {'; '.join(issues)}")
            return function_args
        return args_model.model_validate(function_args).model_dump(by_alias=True, exclude_none=True)

    @staticmethod
    def _normalize_function_args(tool_name: str, raw_args: Any) -> Dict[str, Any]:
        """Normalize tool arguments into a dictionary.

        Handles JSON strings, dictionaries, or None values.

        Raises:
            ToolExecutionError: If arguments cannot be parsed or are invalid.
        """
        if raw_args is None or raw_args == "":
            return {}

        if isinstance(raw_args, dict):
            return raw_args

        if isinstance(raw_args, str):
            try:
                parsed = json.loads(raw_args)
            except json.JSONDecodeError as exc:
                raise ToolExecutionError(f"Failed to parse arguments for tool '{tool_name}': {exc}") from exc

            if parsed is None:
                return {}

            if not isinstance(parsed, dict):
                raise ToolExecutionError(
                    f"Failed to parse arguments for tool '{tool_name}': arguments must decode to a JSON object."
                )
            return parsed

        try:
            return dict(raw_args)
        except (TypeError, ValueError) as exc:
            raise ToolExecutionError(f"Failed to parse arguments for tool '{tool_name}': {exc}") from exc

    async def _execute_tool(self, handler: ToolHandler, function_args: Dict[str, Any], credential: Any) -> Any:
        """Execute the handler under the optional timeout.

        Raises:
            ToolExecutionError: If execution times out.
        """
        try:
            return await asyncio.wait_for(handler.invoke(function_args, credential), timeout=self._tool_timeout)
        except asyncio.TimeoutError as exc:
            msg = f"Tool execution timed out after {self._tool_timeout} seconds."
            raise ToolExecutionError(msg) from exc
