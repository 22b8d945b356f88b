"""Audit trail for tool invocations.

Appends one JSON object per line for each tools/call request and its
outcome. Argument values under secret-looking keys are redacted.
"""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Argument keys whose values never reach the audit file
REDACTED_KEY = re.compile(r"password|secret|token|credential|api[_-]?key", re.IGNORECASE)


def sanitize_arguments(arguments: dict[str, Any]) -> dict[str, Any]:
    """Copy tool arguments, masking values under secret-looking keys.

    Nested mappings are copied the same way.
    """
    return {key: _mask(key, value) for key, value in arguments.items()}


def _mask(key: str, value: Any) -> Any:
    if REDACTED_KEY.search(key):
        return "[REDACTED]"
    if isinstance(value, dict):
        return sanitize_arguments(value)
    return value


def _get_timestamp() -> str:
    """Get current UTC timestamp in ISO 8601 format."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class AuditLogger:
    """Append-only audit logger with JSON Lines format.

    The log file is flushed after each write.
    """

    def __init__(self, log_path: Path) -> None:
        """Open (or create) the audit log.

        Args:
            log_path: Path to the audit log file. Parent directories are created.
        """
        self._log_path = log_path
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(log_path, "a", encoding="utf-8")  # noqa: SIM115

    @property
    def path(self) -> Path:
        return self._log_path

    def _write_line(self, data: dict[str, Any]) -> None:
        self._file.write(json.dumps(data) + "\n")
        self._file.flush()

    def log_request(self, request_id: str, tool_name: str, arguments: dict[str, Any]) -> None:
        """Log an incoming tool request.

        Args:
            request_id: JSON-RPC id of the request, as a string.
            tool_name: Name of the tool being invoked.
            arguments: Tool arguments (will be sanitized).
        """
        self._write_line(
            {
                "type": "request",
                "timestamp": _get_timestamp(),
                "request_id": request_id,
                "tool_name": tool_name,
                "arguments": sanitize_arguments(arguments),
            }
        )

    def log_response(self, request_id: str, status: str, duration_ms: float) -> None:
        """Log a tool outcome.

        Args:
            request_id: Request identifier to correlate with.
            status: Result status (success/error).
            duration_ms: Execution time in milliseconds.
        """
        self._write_line(
            {
                "type": "response",
                "timestamp": _get_timestamp(),
                "request_id": request_id,
                "result_status": status,
                "execution_time_ms": duration_ms,
            }
        )

    def close(self) -> None:
        """Close the log file."""
        if self._file and not self._file.closed:
            self._file.close()

    def __enter__(self) -> AuditLogger:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
