"""Echo tool - returns the text the caller sends."""

from __future__ import annotations

from typing import Any

from mcp_echo_server.tools.base import ToolDefinition, ToolPlugin, ToolResult

ECHO_TOOL = ToolDefinition(
    name="echo",
    description="Return the same text that the caller provides.",
    input_schema={
        "type": "object",
        "properties": {
            "text": {
                "type": "string",
                "description": "Text to echo back to the caller.",
            },
        },
        "required": ["text"],
    },
)


class EchoPlugin(ToolPlugin):
    """Provides the built-in ``echo`` tool.

    A missing or non-string ``text`` argument echoes an empty string
    instead of failing the call.
    """

    @property
    def name(self) -> str:
        return "echo"

    def get_tools(self) -> list[ToolDefinition]:
        return [ECHO_TOOL]

    def execute(self, tool_name: str, arguments: dict[str, Any]) -> ToolResult:
        if tool_name != ECHO_TOOL.name:
            raise ValueError(f"Unsupported tool: {tool_name}")

        text = arguments.get("text")
        if not isinstance(text, str):
            text = ""
        return ToolResult.text(text)
