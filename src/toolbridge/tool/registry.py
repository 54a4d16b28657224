"""Tool registry — register, look up, and dispatch tools."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from toolbridge.tool.base import BaseTool, ToolError, ToolResult

logger = logging.getLogger(__name__)


@dataclass
class Invocation:
    """One call to a tool with concrete parameters."""

    tool_name: str
    params: Any = field(default_factory=dict)
    call_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    cancel_event: asyncio.Event | None = None


class ToolRegistry:
    """Registry of available tools.

    Manages tool registration, lookup, and dispatch. Tools are registered
    by name and can be filtered per-agent.
    """

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool instance."""
        if tool.name in self._tools:
            logger.warning("Tool %s already registered, overwriting", tool.name)
        self._tools[tool.name] = tool

    def register_many(self, tools: list[BaseTool]) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> BaseTool | None:
        return self._tools.get(name)

    def get_specs(self, names: list[str] | None = None) -> list[dict[str, Any]]:
        """Get OpenAI tool specs, optionally filtered by name."""
        tools = self._tools.values()
        if names is not None:
            tools = [t for t in tools if t.name in names]
        return [t.to_openai_spec() for t in tools]

    def names(self) -> list[str]:
        return list(self._tools.keys())

    def subset(self, names: list[str]) -> ToolRegistry:
        """Create a new registry with only the specified tools."""
        reg = ToolRegistry()
        for name in names:
            tool = self._tools.get(name)
            if tool:
                reg.register(tool)
            else:
                logger.warning("Tool %s not found in registry", name)
        return reg

    async def dispatch(self, invocation: Invocation) -> ToolResult:
        """Dispatch an invocation to the matching tool.

        Unknown tools and tool exceptions come back as ToolError.
        """
        tool = self._tools.get(invocation.tool_name)
        if tool is None:
            return ToolError(
                message=(
                    f"Unknown tool: {invocation.tool_name}. "
                    f"Available tools: {', '.join(self.names())}"
                )
            )

        try:
            return await tool.execute(
                invocation.call_id, invocation.params, invocation.cancel_event
            )
        except Exception as e:
            logger.error(
                "Tool %s execution error: %s", invocation.tool_name, e, exc_info=True
            )
            return ToolError(message=f"Error executing {invocation.tool_name}: {e}")

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools
