"""Tool base class and data structures.

Defines the interface that every tool provider must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ToolDefinition:
    """Immutable description of a tool exposed to MCP clients."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP tool format.

        Returns:
            Dictionary in MCP tools/list format.
        """
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class ToolResult:
    """Result of a tool execution: a sequence of typed content blocks."""

    content: list[dict[str, Any]]

    @classmethod
    def text(cls, text: str) -> ToolResult:
        """Build a result holding a single text block."""
        return cls(content=[{"type": "text", "text": text}])

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/call result format.
        """
        return {"content": self.content}


class ToolPlugin(ABC):
    """Abstract base class for tool providers.

    A plugin contributes one or more tools to the registry and executes
    calls for the tools it owns.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the plugin identifier."""
        pass

    @abstractmethod
    def get_tools(self) -> list[ToolDefinition]:
        """Return tool definitions provided by this plugin.

        Returns:
            List of ToolDefinition objects, in a stable order.
        """
        pass

    @abstractmethod
    def execute(self, tool_name: str, arguments: dict[str, Any]) -> ToolResult:
        """Execute a tool.

        Args:
            tool_name: Name of the tool to execute.
            arguments: Tool arguments.

        Returns:
            ToolResult with the content blocks to return to the caller.
        """
        pass
