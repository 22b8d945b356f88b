"""Tool registry and built-in tools."""

from mcp_echo_server.tools.base import ToolDefinition, ToolPlugin, ToolResult
from mcp_echo_server.tools.echo import EchoPlugin
from mcp_echo_server.tools.registry import ToolExecutionError, ToolNotFoundError, ToolRegistry

__all__ = [
    "EchoPlugin",
    "ToolDefinition",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolPlugin",
    "ToolRegistry",
    "ToolResult",
]
