"""Command-line entry point for the MCP echo server."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from mcp_echo_server import __version__
from mcp_echo_server.config import ConfigLoadError, ServerConfig, load_config
from mcp_echo_server.protocol.transport import StdioTransport
from mcp_echo_server.server import MCPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-echo-server",
        description="MCP server speaking Content-Length framed JSON-RPC over STDIO",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to server configuration YAML file (default: built-in settings)",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"mcp-echo-server {__version__}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the MCP server.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else ServerConfig()
    except ConfigLoadError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    transport = StdioTransport(max_message_size=config.max_message_size)

    try:
        server = MCPServer(config=config, log=transport.log)
    except OSError as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        return 1

    transport.log(f"{config.server_name} {config.server_version} started")
    if args.config:
        transport.log(f"Config loaded from: {args.config}")

    with server:
        try:
            error = server.serve(transport)
        except KeyboardInterrupt:
            transport.log("Interrupted, shutting down")
            return 130  # Standard exit code for SIGINT
        except OSError as e:
            transport.log(f"I/O error: {e}")
            return 1

    return 0 if error is None else 1


if __name__ == "__main__":
    sys.exit(main())
