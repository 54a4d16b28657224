"""Tool system — result envelope, bridged tools, registry."""

from toolbridge.tool.base import BaseTool, ToolError, ToolOk, ToolResult
from toolbridge.tool.bridge import (
    BridgedTool,
    ToolBridge,
    build_call_args,
    to_local_tool_definitions,
)
from toolbridge.tool.interpret import interpret_outcome
from toolbridge.tool.registry import Invocation, ToolRegistry

__all__ = [
    "BaseTool",
    "ToolResult",
    "ToolOk",
    "ToolError",
    "BridgedTool",
    "ToolBridge",
    "build_call_args",
    "to_local_tool_definitions",
    "interpret_outcome",
    "Invocation",
    "ToolRegistry",
]
