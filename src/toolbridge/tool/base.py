"""Base tool classes and the result envelope returned across the bridge."""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

logger = logging.getLogger(__name__)


class ToolResult(ABC):
    """Base result from a tool execution.

    Subclasses expose ``payload``, the JSON-compatible value the agent
    runtime sees.
    """

    is_error: ClassVar[bool] = False

    @property
    @abstractmethod
    def payload(self) -> Any:
        """The value rendered by ``to_content``."""
        ...

    def to_content(self) -> str:
        """Render the payload as pretty-printed JSON text for the model."""
        return json.dumps(self.payload, indent=2, ensure_ascii=False, default=str)


@dataclass
class ToolOk(ToolResult):
    """Successful tool result carrying an arbitrary JSON value."""

    value: Any = None

    @property
    def payload(self) -> Any:
        return self.value


@dataclass
class ToolError(ToolResult):
    """Failed tool result."""

    message: str = ""
    partial_output: str | None = None

    is_error: ClassVar[bool] = True

    @property
    def payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": True, "message": self.message}
        if self.partial_output:
            payload["partialOutput"] = self.partial_output
        return payload


class BaseTool(ABC):
    """Base class for tools the agent runtime can invoke.

    A tool is described by a name, a human label, a description and a JSON
    schema for its parameters, and executes with a call id, the raw
    parameters and an optional cancellation event.
    """

    name: str
    label: str
    description: str
    parameters: dict[str, Any]

    async def __call__(
        self,
        arguments: Any,
        call_id: str = "",
        cancel_event: asyncio.Event | None = None,
    ) -> tuple[str, bool]:
        """Execute and render.

        Returns:
            (content, is_error) tuple suitable for tool result messages.
        """
        try:
            result = await self.execute(call_id, arguments, cancel_event)
        except Exception as e:
            logger.error("Tool %s execution error: %s", self.name, e, exc_info=True)
            result = ToolError(message=f"Error executing {self.name}: {e}")
        return result.to_content(), result.is_error

    @abstractmethod
    async def execute(
        self,
        call_id: str,
        params: Any,
        cancel_event: asyncio.Event | None = None,
    ) -> ToolResult:
        """Execute the tool with the given parameters."""
        ...

    def to_openai_spec(self) -> dict[str, Any]:
        """Convert to OpenAI function tool specification."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }
