"""STDIO transport layer for MCP communication.

Frames messages with ``Content-Length`` headers, one payload per frame,
the same way language servers do. The transport knows nothing about
JSON-RPC: it moves opaque byte payloads in and out.
"""

from __future__ import annotations

import sys
from typing import BinaryIO, TextIO

CONTENT_LENGTH = "content-length"

# Default upper bound on a declared payload length (1 MB)
DEFAULT_MAX_MESSAGE_SIZE = 1_048_576

# Upper bound on a single header line, terminator included
MAX_HEADER_LINE_SIZE = 8192


class FramingError(Exception):
    """Raised when the byte stream cannot be split into frames.

    The stream is no longer aligned on a frame boundary once this is
    raised, so the connection has to be abandoned.
    """

    pass


class StdioTransport:
    """STDIO transport for MCP communication.

    Reads framed messages from stdin and writes framed messages to stdout.
    Logging goes to stderr to avoid corrupting the protocol stream.
    """

    def __init__(
        self,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
        stderr: TextIO | None = None,
        max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE,
    ) -> None:
        """Initialize the transport.

        Args:
            stdin: Binary input stream (defaults to sys.stdin.buffer).
            stdout: Binary output stream (defaults to sys.stdout.buffer).
            stderr: Log stream (defaults to sys.stderr).
            max_message_size: Largest Content-Length accepted, in bytes.
        """
        self._stdin = stdin or sys.stdin.buffer
        self._stdout = stdout or sys.stdout.buffer
        self._stderr = stderr or sys.stderr
        self._max_message_size = max_message_size

    def read_message(self) -> bytes | None:
        """Read one framed message from stdin.

        Consumes header lines up to the blank separator line, then exactly
        ``Content-Length`` payload bytes.

        Returns:
            The payload bytes, or None on a clean EOF before any header.

        Raises:
            FramingError: If the headers or payload are malformed or truncated.
        """
        content_length: int | None = None
        saw_header = False

        while True:
            line = self._stdin.readline(MAX_HEADER_LINE_SIZE)
            if not line:
                if saw_header:
                    raise FramingError("Unexpected EOF while reading headers")
                return None
            if len(line) >= MAX_HEADER_LINE_SIZE and not line.endswith(b"\n"):
                raise FramingError(f"Header line exceeds {MAX_HEADER_LINE_SIZE} bytes")

            line = line.rstrip(b"\r\n")
            if not line.strip():
                if not saw_header:
                    continue  # Blank lines between frames
                break

            saw_header = True
            name, sep, value = line.partition(b":")
            if not sep:
                raise FramingError(f"Invalid header line: {line!r}")

            if name.strip().decode("ascii", errors="replace").lower() == CONTENT_LENGTH:
                content_length = self._parse_content_length(value)

        if content_length is None:
            raise FramingError("Missing Content-Length header")

        payload = self._stdin.read(content_length) if content_length else b""
        if len(payload) != content_length:
            raise FramingError(
                f"Unexpected EOF while reading payload: "
                f"expected {content_length} bytes, got {len(payload)}"
            )
        return payload

    def _parse_content_length(self, raw: bytes) -> int:
        """Parse and bound-check a Content-Length header value."""
        value = raw.strip().decode("ascii", errors="replace")
        if not value.isdigit():
            raise FramingError(f"Invalid Content-Length value: {value!r}")

        length = int(value)
        if length > self._max_message_size:
            raise FramingError(
                f"Message too large: {length} bytes exceeds {self._max_message_size} limit"
            )
        return length

    def write_message(self, payload: bytes) -> None:
        """Write one framed message to stdout.

        Args:
            payload: Raw payload bytes. No validation is performed.
        """
        header = f"Content-Length: {len(payload)}\r\n\r\n".encode("ascii")
        self._stdout.write(header + payload)
        self._stdout.flush()

    def log(self, message: str) -> None:
        """Write a log message to stderr.

        Args:
            message: Log message.
        """
        self._stderr.write(f"[mcp] {message}\n")
        self._stderr.flush()
