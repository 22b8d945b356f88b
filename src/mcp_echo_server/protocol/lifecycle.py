"""MCP lifecycle management.

Handles the initialize handshake and tracks session state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_SERVER_NAME = "mcp-echo-server"
DEFAULT_SERVER_VERSION = "0.1.0"


class LifecycleState(Enum):
    """MCP session lifecycle states."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"


class ProtocolError(Exception):
    """Raised when protocol sequencing constraints are violated."""

    pass


@dataclass
class LifecycleManager:
    """Manages the MCP session lifecycle.

    The session moves from UNINITIALIZED to READY exactly once, on the
    first initialize request, and never moves back.
    """

    server_info: dict[str, str] = field(
        default_factory=lambda: {"name": DEFAULT_SERVER_NAME, "version": DEFAULT_SERVER_VERSION}
    )
    capabilities: dict[str, Any] = field(
        default_factory=lambda: {"tools": {"list": True, "call": True}}
    )
    state: LifecycleState = LifecycleState.UNINITIALIZED
    client_info: dict[str, Any] | None = None
    client_capabilities: dict[str, Any] | None = None

    @property
    def is_ready(self) -> bool:
        """Check if the session is ready for operations."""
        return self.state == LifecycleState.READY

    def require_ready(self) -> None:
        """Assert that the session is ready.

        Raises:
            ProtocolError: If initialize has not been handled yet.
        """
        if self.state != LifecycleState.READY:
            raise ProtocolError("Server has not been initialized")

    def handle_initialize(self, params: Any) -> dict[str, Any]:
        """Handle the first initialize request.

        Args:
            params: Initialize request parameters (may be None).

        Returns:
            Initialize response result.

        Raises:
            ProtocolError: If the session is already initialized.
        """
        if self.state != LifecycleState.UNINITIALIZED:
            raise ProtocolError("Server already initialized")

        if isinstance(params, dict):
            self.client_info = params.get("clientInfo")
            self.client_capabilities = params.get("capabilities", {})

        self.state = LifecycleState.READY

        return {
            "capabilities": self.capabilities,
            "serverInfo": self.server_info,
        }
