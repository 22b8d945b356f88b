"""Tool registry - indexes tools by name and routes calls to their plugin."""

from __future__ import annotations

from typing import Any

from mcp_echo_server.tools.base import ToolDefinition, ToolPlugin, ToolResult


class ToolNotFoundError(Exception):
    """Raised when a tool is not registered."""

    pass


class ToolExecutionError(Exception):
    """Raised when a tool fails to execute."""

    pass


class ToolRegistry:
    """Name-indexed collection of tools.

    Tools are listed in registration order. Lookups are by exact name.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._plugins: list[ToolPlugin] = []
        self._definitions: dict[str, ToolDefinition] = {}
        self._tool_map: dict[str, ToolPlugin] = {}

    def register_plugin(self, plugin: ToolPlugin) -> None:
        """Register a plugin and index its tools.

        Args:
            plugin: Plugin instance to register.

        Raises:
            ValueError: If a tool name is already registered.
        """
        tools = plugin.get_tools()
        for tool in tools:
            if tool.name in self._tool_map:
                raise ValueError(f"Tool already registered: {tool.name}")

        self._plugins.append(plugin)
        for tool in tools:
            self._definitions[tool.name] = tool
            self._tool_map[tool.name] = plugin

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self._tool_map

    def __len__(self) -> int:
        return len(self._definitions)

    def list_tools(self) -> list[dict[str, Any]]:
        """List all registered tools in MCP format.

        Returns:
            List of tool descriptors in registration order.
        """
        return [tool.to_dict() for tool in self._definitions.values()]

    def get_tool(self, tool_name: str) -> ToolDefinition | None:
        """Get the definition of a tool, or None if it is not registered."""
        return self._definitions.get(tool_name)

    def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolResult:
        """Call a tool by name.

        Args:
            tool_name: Name of the tool to call.
            arguments: Arguments to pass to the tool.

        Returns:
            ToolResult from the tool execution.

        Raises:
            ToolNotFoundError: If the tool is not registered.
            ToolExecutionError: If the tool fails to execute.
        """
        plugin = self._tool_map.get(tool_name)
        if plugin is None:
            raise ToolNotFoundError(f"Unknown tool: {tool_name}")

        try:
            return plugin.execute(tool_name, arguments)
        except Exception as e:
            raise ToolExecutionError(f"Tool '{tool_name}' execution failed: {e}") from e
