"""Minimal MCP client that drives a server over STDIO.

Launches the server as a subprocess and exchanges framed JSON-RPC
messages with it through its stdin/stdout pipes.
"""

from __future__ import annotations

import json
import subprocess
from collections.abc import Sequence
from typing import Any

from mcp_echo_server.protocol.jsonrpc import format_notification, format_request
from mcp_echo_server.protocol.transport import StdioTransport


class ClientError(Exception):
    """Raised when the server answers a request with an error."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"{message} (code {code})")
        self.code = code
        self.message = message


class StdioClient:
    """Synchronous MCP client for a subprocess server.

    Requests are answered in order, so each call writes one request and
    reads exactly one response.
    """

    def __init__(
        self,
        command: Sequence[str],
        env: dict[str, str] | None = None,
    ) -> None:
        """Start the server process.

        Args:
            command: Command line that launches the server.
            env: Environment for the server process (defaults to inherited).
        """
        self._process = subprocess.Popen(
            list(command),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            env=env,
        )
        self._transport = StdioTransport(stdin=self._process.stdout, stdout=self._process.stdin)
        self._next_id = 1

    def request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Send a request and wait for its result.

        Args:
            method: Method name.
            params: Optional parameters.

        Returns:
            The ``result`` member of the response.

        Raises:
            ClientError: If the server responds with an error.
            ConnectionError: If the server closes its output first.
        """
        msg_id = self._next_id
        self._next_id += 1
        self._transport.write_message(format_request(msg_id, method, params))

        payload = self._transport.read_message()
        if payload is None:
            raise ConnectionError(f"Server closed the connection before answering {method}")

        response = json.loads(payload)
        if response.get("id") != msg_id:
            raise ConnectionError(f"Response id {response.get('id')!r} does not match {msg_id}")

        if "error" in response:
            error = response["error"]
            raise ClientError(error.get("code", 0), error.get("message", ""))
        return response.get("result")

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a notification (no response expected)."""
        self._transport.write_message(format_notification(method, params))

    def initialize(self, client_name: str = "mcp-echo-client", client_version: str = "0.1.0") -> Any:
        """Perform the initialize handshake.

        Returns:
            The server's initialize result (capabilities and serverInfo).
        """
        result = self.request(
            "initialize",
            {
                "capabilities": {},
                "clientInfo": {"name": client_name, "version": client_version},
            },
        )
        self.notify("notifications/initialized")
        return result

    def ping(self) -> Any:
        return self.request("ping")

    def list_tools(self) -> list[dict[str, Any]]:
        return self.request("tools/list")["tools"]

    def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Call a tool and return its content blocks."""
        result = self.request("tools/call", {"name": name, "arguments": arguments or {}})
        return result["content"]

    def shutdown(self) -> Any:
        return self.request("shutdown")

    def close(self, timeout: float = 5.0) -> int:
        """Close the server's input and wait for it to exit.

        Args:
            timeout: Seconds to wait before killing the process.

        Returns:
            The server's exit status.
        """
        if self._process.stdin and not self._process.stdin.closed:
            self._process.stdin.close()
        try:
            self._process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            self._process.kill()
            self._process.wait()
        if self._process.stdout and not self._process.stdout.closed:
            self._process.stdout.close()
        return self._process.returncode

    def __enter__(self) -> StdioClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
