"""MCP tools/list and tools/call handlers.

Handles tool-related MCP requests, routing them through the tool registry.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

from mcp_echo_server.audit import AuditLogger
from mcp_echo_server.tools.registry import ToolRegistry


class InvalidToolCallError(Exception):
    """Raised when tools/call params do not describe a tool call."""

    pass


@dataclass
class ToolsListResult:
    """Result of tools/list request."""

    tools: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/list result format.
        """
        return {"tools": self.tools}


@dataclass
class ToolsCallResult:
    """Result of tools/call request."""

    content: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/call result format.
        """
        return {"content": self.content}


class ToolsHandler:
    """Handles tools/list and tools/call MCP requests.

    Failures are raised rather than folded into the result, so the
    caller can answer them on the JSON-RPC error channel.
    """

    def __init__(self, registry: ToolRegistry, audit_logger: AuditLogger | None = None) -> None:
        """Initialize the handler.

        Args:
            registry: Tool registry for listing and routing calls.
            audit_logger: Optional audit trail for tool calls.
        """
        self._registry = registry
        self._audit_logger = audit_logger

    def handle_list(self) -> ToolsListResult:
        """Handle tools/list request.

        Returns:
            ToolsListResult with all registered tools.
        """
        return ToolsListResult(tools=self._registry.list_tools())

    def handle_call(self, params: Any, request_id: Any = None) -> ToolsCallResult:
        """Handle tools/call request.

        Args:
            params: Request params, expected as ``{name, arguments}``.
            request_id: JSON-RPC id of the request, for the audit trail.

        Returns:
            ToolsCallResult with execution result.

        Raises:
            InvalidToolCallError: If params are not a valid tool call.
            ToolNotFoundError: If the named tool is not registered.
            ToolExecutionError: If the tool fails.
        """
        name, arguments = self._parse_call(params)

        if self._audit_logger is None:
            result = self._registry.call_tool(name, arguments)
            return ToolsCallResult(content=result.content)

        audit_id = str(request_id)
        self._audit_logger.log_request(audit_id, name, arguments)
        start = time.perf_counter()
        status = "error"
        try:
            result = self._registry.call_tool(name, arguments)
            status = "success"
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self._audit_logger.log_response(audit_id, status, duration_ms)

        return ToolsCallResult(content=result.content)

    @staticmethod
    def _parse_call(params: Any) -> tuple[str, dict[str, Any]]:
        if not isinstance(params, dict):
            raise InvalidToolCallError("tools/call params must be an object")

        name = params.get("name", "")
        if not isinstance(name, str):
            raise InvalidToolCallError("tools/call name must be a string")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            raise InvalidToolCallError("tools/call arguments must be an object")

        return name, arguments
