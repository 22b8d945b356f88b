"""MCP Server - JSON-RPC dispatcher.

Integrates the transport, lifecycle and tool registry into a complete
MCP server that answers one message at a time.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any

from mcp_echo_server.audit import AuditLogger
from mcp_echo_server.config import ServerConfig
from mcp_echo_server.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    UnsupportedMessageError,
    format_error,
    format_response,
    parse_message,
)
from mcp_echo_server.protocol.lifecycle import LifecycleManager, ProtocolError
from mcp_echo_server.protocol.tools import InvalidToolCallError, ToolsHandler
from mcp_echo_server.protocol.transport import FramingError, StdioTransport
from mcp_echo_server.tools.base import ToolPlugin
from mcp_echo_server.tools.echo import EchoPlugin
from mcp_echo_server.tools.registry import ToolExecutionError, ToolNotFoundError, ToolRegistry

RequestHandler = Callable[[JsonRpcRequest], bytes]
NotificationHandler = Callable[[JsonRpcNotification], None]


def _stderr_log(message: str) -> None:
    sys.stderr.write(f"[mcp] {message}\n")
    sys.stderr.flush()


class MCPServer:
    """MCP Server implementation.

    Provides a complete MCP server that handles:
    - Lifecycle management (initialize before anything else)
    - ping and shutdown acknowledgements
    - Tool listing and execution

    Each instance owns its own session, so every connected peer needs
    its own server.
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        log: Callable[[str], None] | None = None,
        register_builtin_tools: bool = True,
    ) -> None:
        """Initialize the server.

        Args:
            config: Server configuration (defaults to built-in settings).
            log: Diagnostic log sink (defaults to stderr).
            register_builtin_tools: Register the echo tool.
        """
        self._config = config or ServerConfig()
        self._log = log or _stderr_log

        self._audit_logger: AuditLogger | None = None
        if self._config.audit_log_path is not None:
            self._audit_logger = AuditLogger(self._config.audit_log_path)

        self._lifecycle = LifecycleManager(server_info=self._config.server_info)
        self._registry = ToolRegistry()
        self._tools_handler = ToolsHandler(self._registry, self._audit_logger)

        self._request_handlers: dict[str, RequestHandler] = {
            "ping": self._handle_ping,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
            "shutdown": self._handle_shutdown,
        }
        self._notification_handlers: dict[str, NotificationHandler] = {
            "notifications/initialized": self._handle_initialized,
        }

        if register_builtin_tools:
            self.register_plugin(EchoPlugin())

    @property
    def lifecycle(self) -> LifecycleManager:
        return self._lifecycle

    def register_plugin(self, plugin: ToolPlugin) -> None:
        """Register a tool plugin.

        Args:
            plugin: Plugin to register.
        """
        self._registry.register_plugin(plugin)

    def list_tools(self) -> list[dict[str, Any]]:
        """List all registered tools.

        Returns:
            List of tool definitions.
        """
        return self._registry.list_tools()

    def serve(self, transport: StdioTransport) -> FramingError | None:
        """Run the message loop until the input stream ends.

        Reads one message, handles it fully and writes its response (if
        any) before reading the next.

        Args:
            transport: Framed transport to read from and write to.

        Returns:
            None on a clean end of stream, or the FramingError that made
            the stream unreadable.
        """
        while True:
            try:
                payload = transport.read_message()
            except FramingError as e:
                self._log(f"transport error: {e}")
                return e

            if payload is None:
                self._log("EOF received, shutting down")
                return None

            response = self.handle_message(payload)
            if response is not None:
                transport.write_message(response)

    def handle_message(self, raw_message: bytes) -> bytes | None:
        """Handle an incoming JSON-RPC message.

        Args:
            raw_message: Raw frame payload.

        Returns:
            Encoded response, or None when no response is due.
        """
        try:
            message = parse_message(raw_message)
        except JsonRpcError as e:
            self._log(f"failed to parse payload: {e}")
            return format_error(None, e.code, "Unable to parse JSON payload")
        except UnsupportedMessageError as e:
            self._log(f"dropping message: {e}")
            return None

        if isinstance(message, JsonRpcRequest):
            return self._handle_request(message)
        if isinstance(message, JsonRpcNotification):
            self._handle_notification(message)
        elif isinstance(message, JsonRpcResponse):
            self._log(f"ignoring unexpected response with id {message.id!r}")
        return None

    def _handle_notification(self, notification: JsonRpcNotification) -> None:
        handler = self._notification_handlers.get(notification.method)
        if handler is None:
            self._log(f"ignoring notification: {notification.method}")
            return
        handler(notification)

    def _handle_request(self, request: JsonRpcRequest) -> bytes:
        """Route a request and return its response.

        Args:
            request: The request to handle.

        Returns:
            Encoded JSON-RPC response.
        """
        # Only the first initialize is special; a repeat falls through
        if request.method == "initialize" and not self._lifecycle.is_ready:
            return self._handle_initialize(request)

        try:
            self._lifecycle.require_ready()
        except ProtocolError as e:
            return format_error(request.id, INVALID_REQUEST, str(e))

        handler = self._request_handlers.get(request.method)
        if handler is None:
            return format_error(
                request.id, METHOD_NOT_FOUND, f"Method not implemented: {request.method}"
            )
        return handler(request)

    def _handle_initialize(self, request: JsonRpcRequest) -> bytes:
        result = self._lifecycle.handle_initialize(request.params)
        client = self._lifecycle.client_info or {}
        self._log(f"initialized by client {client.get('name', 'unknown')!r}")
        return format_response(request.id, result)

    def _handle_initialized(self, notification: JsonRpcNotification) -> None:
        self._log("client signalled that initialization is complete")

    def _handle_ping(self, request: JsonRpcRequest) -> bytes:
        return format_response(request.id, {"result": "pong"})

    def _handle_tools_list(self, request: JsonRpcRequest) -> bytes:
        result = self._tools_handler.handle_list()
        return format_response(request.id, result.to_dict())

    def _handle_tools_call(self, request: JsonRpcRequest) -> bytes:
        if not request.params:
            return format_error(request.id, INVALID_REQUEST, "Missing params for tools/call")

        try:
            result = self._tools_handler.handle_call(request.params, request.id)
        except (InvalidToolCallError, ToolNotFoundError, ToolExecutionError) as e:
            self._log(f"tools/call failed: {e}")
            return format_error(request.id, INTERNAL_ERROR, str(e))
        return format_response(request.id, result.to_dict())

    def _handle_shutdown(self, request: JsonRpcRequest) -> bytes:
        self._log("shutdown requested")
        return format_response(request.id, {})

    def close(self) -> None:
        """Close the server and release resources."""
        if self._audit_logger is not None:
            self._audit_logger.close()

    def __enter__(self) -> MCPServer:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
