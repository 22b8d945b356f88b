"""MCP Protocol layer: framing, JSON-RPC envelopes, lifecycle and tool requests."""

from mcp_echo_server.protocol.jsonrpc import (
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    UnsupportedMessageError,
    format_error,
    format_notification,
    format_request,
    format_response,
    parse_message,
)
from mcp_echo_server.protocol.lifecycle import LifecycleManager, LifecycleState, ProtocolError
from mcp_echo_server.protocol.tools import (
    InvalidToolCallError,
    ToolsCallResult,
    ToolsHandler,
    ToolsListResult,
)
from mcp_echo_server.protocol.transport import FramingError, StdioTransport

__all__ = [
    "FramingError",
    "InvalidToolCallError",
    "JsonRpcError",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "LifecycleManager",
    "LifecycleState",
    "ProtocolError",
    "StdioTransport",
    "ToolsCallResult",
    "ToolsHandler",
    "ToolsListResult",
    "UnsupportedMessageError",
    "format_error",
    "format_notification",
    "format_request",
    "format_response",
    "parse_message",
]
