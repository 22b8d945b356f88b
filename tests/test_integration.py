"""Integration tests for the serving loop and the command-line entry point."""

import io
import sys
from pathlib import Path

import pytest

from mcp_echo_server.cli import main
from mcp_echo_server.protocol.transport import FramingError, StdioTransport
from mcp_echo_server.server import MCPServer


def run_session(server: MCPServer, data: bytes) -> tuple[FramingError | None, bytes]:
    stdout = io.BytesIO()
    transport = StdioTransport(stdin=io.BytesIO(data), stdout=stdout, stderr=io.StringIO())
    return server.serve(transport), stdout.getvalue()


class TestServeLoop:
    """Tests for MCPServer.serve."""

    def test_full_session(self, server: MCPServer, encode, frame, split_frames):
        """Should initialize, echo, acknowledge shutdown and stop at EOF."""
        data = b"".join(
            frame(encode(message))
            for message in [
                {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}},
                {"jsonrpc": "2.0", "method": "notifications/initialized"},
                {
                    "jsonrpc": "2.0",
                    "id": 2,
                    "method": "tools/call",
                    "params": {"name": "echo", "arguments": {"text": "ping"}},
                },
                {"jsonrpc": "2.0", "id": 3, "method": "shutdown"},
            ]
        )

        error, output = run_session(server, data)
        responses = split_frames(output)

        assert error is None
        assert [r["id"] for r in responses] == [1, 2, 3]
        assert responses[0]["result"]["capabilities"]["tools"]["call"] is True
        assert responses[1]["result"] == {"content": [{"type": "text", "text": "ping"}]}
        assert responses[2]["result"] == {}

    def test_responses_follow_request_order(self, server: MCPServer, encode, frame, split_frames):
        """Should answer strictly in the order requests were read."""
        messages = [{"jsonrpc": "2.0", "id": 0, "method": "initialize"}]
        messages += [{"jsonrpc": "2.0", "id": i, "method": "ping"} for i in range(1, 6)]

        _, output = run_session(server, b"".join(frame(encode(m)) for m in messages))

        assert [r["id"] for r in split_frames(output)] == [0, 1, 2, 3, 4, 5]

    def test_parse_error_does_not_end_session(self, server: MCPServer, encode, frame, split_frames):
        """Should answer a bad payload and continue."""
        data = frame(b"{not json") + frame(encode({"jsonrpc": "2.0", "id": 1, "method": "initialize"}))

        error, output = run_session(server, data)
        responses = split_frames(output)

        assert error is None
        assert responses[0]["id"] is None
        assert responses[0]["error"]["code"] == -32700
        assert "result" in responses[1]

    def test_notifications_produce_no_frames(self, server: MCPServer, encode, frame):
        """Should write nothing for notifications."""
        data = frame(encode({"jsonrpc": "2.0", "method": "notifications/initialized"}))
        data += frame(encode({"jsonrpc": "2.0", "method": "whatever"}))

        _, output = run_session(server, data)

        assert output == b""

    def test_framing_error_ends_session(self, server: MCPServer, encode, frame, split_frames):
        """Should stop at the first framing error and return it."""
        data = frame(encode({"jsonrpc": "2.0", "id": 1, "method": "initialize"}))
        data += b"Content-Length: nope\r\n\r\n"
        data += frame(encode({"jsonrpc": "2.0", "id": 2, "method": "ping"}))

        error, output = run_session(server, data)

        assert isinstance(error, FramingError)
        assert [r["id"] for r in split_frames(output)] == [1]

    def test_deeply_nested_payload_does_not_end_session(
        self, server: MCPServer, encode, frame, split_frames
    ):
        """Should answer excessive nesting with a parse error and continue."""
        data = frame(b"[" * 200_000)
        data += frame(encode({"jsonrpc": "2.0", "id": 1, "method": "initialize"}))

        error, output = run_session(server, data)
        responses = split_frames(output)

        assert error is None
        assert responses[0]["id"] is None
        assert responses[0]["error"]["code"] == -32700
        assert responses[1]["id"] == 1
        assert "result" in responses[1]

    def test_nan_id_gets_parse_error(self, server: MCPServer, frame, split_frames):
        """Should answer a NaN id with a parse error in strict JSON."""
        _, output = run_session(server, frame(b'{"jsonrpc":"2.0","id":NaN,"method":"ping"}'))

        assert b"NaN" not in output
        response = split_frames(output)[0]
        assert response["id"] is None
        assert response["error"]["code"] == -32700

    def test_empty_input(self, server: MCPServer, log_lines: list[str]):
        """Should return cleanly on immediate EOF."""
        error, output = run_session(server, b"")

        assert error is None
        assert output == b""
        assert log_lines == ["EOF received, shutting down"]


@pytest.fixture
def stdio(monkeypatch: pytest.MonkeyPatch):
    """Replace process stdio with in-memory buffers."""

    def install(data: bytes) -> io.TextIOWrapper:
        monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))
        stdout = io.TextIOWrapper(io.BytesIO())
        monkeypatch.setattr(sys, "stdout", stdout)
        return stdout

    return install


class TestMain:
    """Tests for the CLI entry point."""

    def test_clean_eof_exits_zero(self, stdio, encode, frame, split_frames):
        """Should exit 0 after the input closes."""
        stdout = stdio(frame(encode({"jsonrpc": "2.0", "id": 1, "method": "initialize"})))

        assert main([]) == 0
        assert split_frames(stdout.buffer.getvalue())[0]["id"] == 1

    def test_framing_error_exits_one(self, stdio):
        """Should exit 1 when the stream cannot be framed."""
        stdio(b"garbage without colon\r\n\r\n")

        assert main([]) == 1

    def test_uses_config_file(self, stdio, encode, frame, split_frames, tmp_path: Path):
        """Should report the configured server identity."""
        config_path = tmp_path / "server.yaml"
        config_path.write_text('version: "1.0"\nserver:\n  name: cli-test\n')
        stdout = stdio(frame(encode({"jsonrpc": "2.0", "id": 1, "method": "initialize"})))

        assert main(["--config", str(config_path)]) == 0
        result = split_frames(stdout.buffer.getvalue())[0]["result"]
        assert result["serverInfo"]["name"] == "cli-test"

    def test_missing_config_exits_one(self, stdio, tmp_path: Path, capsys):
        """Should refuse to start with a missing config file."""
        stdio(b"")

        assert main(["--config", str(tmp_path / "absent.yaml")]) == 1
        assert "Error loading config" in capsys.readouterr().err

    def test_config_size_limit_applies(self, stdio, tmp_path: Path):
        """Should enforce the configured message size limit."""
        config_path = tmp_path / "server.yaml"
        config_path.write_text('version: "1.0"\ntransport:\n  max_message_size: 8\n')
        stdio(b"Content-Length: 9\r\n\r\n123456789")

        assert main(["-c", str(config_path)]) == 1
