"""Pytest configuration and shared fixtures."""

import json
from collections.abc import Callable
from typing import Any

import pytest

from mcp_echo_server.server import MCPServer


def _encode(message: dict[str, Any]) -> bytes:
    return json.dumps(message).encode("utf-8")


def _frame(payload: bytes) -> bytes:
    return f"Content-Length: {len(payload)}\r\n\r\n".encode("ascii") + payload


def _split_frames(data: bytes) -> list[dict[str, Any]]:
    """Decode every frame in a captured output buffer."""
    messages = []
    while data:
        header, _, rest = data.partition(b"\r\n\r\n")
        assert header.startswith(b"Content-Length: "), header
        length = int(header.split(b":", 1)[1])
        messages.append(json.loads(rest[:length]))
        data = rest[length:]
    return messages


@pytest.fixture
def encode() -> Callable[[dict[str, Any]], bytes]:
    """Serialize a JSON-RPC message to payload bytes."""
    return _encode


@pytest.fixture
def frame() -> Callable[[bytes], bytes]:
    """Wrap a payload in a Content-Length frame."""
    return _frame


@pytest.fixture
def split_frames() -> Callable[[bytes], list[dict[str, Any]]]:
    """Decode all frames written to an output buffer."""
    return _split_frames


@pytest.fixture
def log_lines() -> list[str]:
    """Collects server diagnostics."""
    return []


@pytest.fixture
def server(log_lines: list[str]) -> MCPServer:
    """Create a server with default config, logging into log_lines."""
    return MCPServer(log=log_lines.append)


@pytest.fixture
def initialized_server(server: MCPServer) -> MCPServer:
    """Create a server that has completed the initialize handshake."""
    server.handle_message(
        _encode(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "method": "initialize",
                "params": {
                    "clientInfo": {"name": "test", "version": "1.0"},
                    "capabilities": {},
                },
            }
        )
    )
    server.handle_message(_encode({"jsonrpc": "2.0", "method": "notifications/initialized"}))
    return server
