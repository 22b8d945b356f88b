"""JSON-RPC 2.0 message parsing and formatting.

Implements the JSON-RPC 2.0 envelope for MCP protocol communication.
Payloads arrive and leave as UTF-8 encoded bytes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class JsonRpcError(Exception):
    """JSON-RPC error with code and message."""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        """Initialize the error.

        Args:
            code: JSON-RPC error code.
            message: Human-readable error message.
            data: Optional additional error data.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


class UnsupportedMessageError(Exception):
    """Raised for well-formed JSON that this server does not answer.

    Covers foreign protocol versions and envelopes carrying neither a
    method nor a result/error. These are dropped without a response.
    """

    pass


@dataclass
class JsonRpcRequest:
    """Represents a JSON-RPC request (has id, possibly null)."""

    id: Any
    method: str
    params: Any = None


@dataclass
class JsonRpcNotification:
    """Represents a JSON-RPC notification (no id)."""

    method: str
    params: Any = None


@dataclass
class JsonRpcResponse:
    """Represents a JSON-RPC response (has result or error)."""

    id: Any
    result: Any = None
    error: dict[str, Any] | None = None


JsonRpcMessage = JsonRpcRequest | JsonRpcNotification | JsonRpcResponse


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_message(raw: bytes) -> JsonRpcMessage:
    """Parse a JSON-RPC message from a frame payload.

    Args:
        raw: UTF-8 encoded JSON payload.

    Returns:
        Parsed request, notification or response.

    Raises:
        JsonRpcError: With PARSE_ERROR if the payload is not a JSON object
            or its method is not a string.
        UnsupportedMessageError: If the version tag is not "2.0" or the
            envelope has no recognisable shape.
    """
    try:
        data = json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise JsonRpcError(PARSE_ERROR, f"Unable to parse JSON payload: {e}") from e

    if not isinstance(data, dict):
        raise JsonRpcError(PARSE_ERROR, "Unable to parse JSON payload: message must be an object")

    version = data.get("jsonrpc")
    if version != JSONRPC_VERSION:
        raise UnsupportedMessageError(f"Unsupported jsonrpc version: {version!r}")

    if "method" in data:
        method = data["method"]
        if not isinstance(method, str):
            raise JsonRpcError(PARSE_ERROR, "Unable to parse JSON payload: method must be a string")

        params = data.get("params")
        if "id" in data:
            return JsonRpcRequest(id=data["id"], method=method, params=params)
        return JsonRpcNotification(method=method, params=params)

    if "result" in data or "error" in data:
        return JsonRpcResponse(id=data.get("id"), result=data.get("result"), error=data.get("error"))

    raise UnsupportedMessageError(f"Unrecognized message shape: {json.dumps(data)}")


def _encode(envelope: dict[str, Any]) -> bytes:
    return json.dumps(envelope, separators=(",", ":"), allow_nan=False).encode("utf-8")


def format_response(msg_id: Any, result: Any) -> bytes:
    """Format a successful JSON-RPC response.

    Args:
        msg_id: Request ID to echo back verbatim.
        result: Result payload.

    Returns:
        UTF-8 encoded JSON.
    """
    return _encode(
        {
            "jsonrpc": JSONRPC_VERSION,
            "id": msg_id,
            "result": result,
        }
    )


def format_error(
    msg_id: Any,
    code: int,
    message: str,
    data: Any | None = None,
) -> bytes:
    """Format a JSON-RPC error response.

    Args:
        msg_id: Request ID (or None for parse errors).
        code: Error code.
        message: Error message.
        data: Optional error data.

    Returns:
        UTF-8 encoded JSON.
    """
    error_obj: dict[str, Any] = {
        "code": code,
        "message": message,
    }
    if data is not None:
        error_obj["data"] = data

    return _encode(
        {
            "jsonrpc": JSONRPC_VERSION,
            "id": msg_id,
            "error": error_obj,
        }
    )


def format_request(msg_id: Any, method: str, params: dict[str, Any] | None = None) -> bytes:
    """Format a JSON-RPC request (client to server).

    Args:
        msg_id: Request identifier.
        method: Method name.
        params: Optional parameters.

    Returns:
        UTF-8 encoded JSON.
    """
    request: dict[str, Any] = {
        "jsonrpc": JSONRPC_VERSION,
        "id": msg_id,
        "method": method,
    }
    if params is not None:
        request["params"] = params

    return _encode(request)


def format_notification(method: str, params: dict[str, Any] | None = None) -> bytes:
    """Format a JSON-RPC notification.

    Args:
        method: Notification method name.
        params: Optional parameters.

    Returns:
        UTF-8 encoded JSON.
    """
    notification: dict[str, Any] = {
        "jsonrpc": JSONRPC_VERSION,
        "method": method,
    }
    if params is not None:
        notification["params"] = params

    return _encode(notification)
