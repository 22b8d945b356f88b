"""MCP echo server: Content-Length framed JSON-RPC 2.0 over STDIO."""

__version__ = "0.1.0"
