"""Bridge client tool definitions to the local mcporter CLI.

Each definition becomes a :class:`BridgedTool` whose ``execute`` runs::

    mcporter [--config <path>] call <tool> --args '<json>'

and interprets the subprocess output as the tool result.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Iterable

from toolbridge.catalog import ToolDefinition
from toolbridge.config import BridgeSettings
from toolbridge.process.invoker import resolve_command, run_process
from toolbridge.tool.base import BaseTool, ToolError, ToolResult
from toolbridge.tool.interpret import interpret_outcome

logger = logging.getLogger(__name__)


def build_call_args(
    tool_name: str, params: dict[str, Any], config_path: str | None = None
) -> list[str]:
    """Build the argv (without the executable) for one tool call.

    Raises ValueError if ``params`` holds NaN or Infinity, which have no
    JSON encoding.
    """
    args: list[str] = []
    if config_path:
        args += ["--config", config_path]
    encoded = json.dumps(params, ensure_ascii=False, allow_nan=False)
    args += ["call", tool_name, "--args", encoded]
    return args


class BridgedTool(BaseTool):
    """A tool whose execution is delegated to an mcporter subprocess."""

    def __init__(self, definition: ToolDefinition, settings: BridgeSettings) -> None:
        self.definition = definition
        self.name = definition.name
        self.label = definition.name
        self.description = definition.description
        self.parameters = definition.parameters
        self._settings = settings

    async def execute(
        self,
        call_id: str,
        params: Any,
        cancel_event: asyncio.Event | None = None,
    ) -> ToolResult:
        """Run the call; always returns a ToolResult, never raises."""
        params_dict = params if isinstance(params, dict) else {}
        settings = self._settings
        label = os.path.basename(settings.command)
        try:
            outcome = await run_process(
                resolve_command(settings.command),
                build_call_args(self.name, params_dict, settings.config_path),
                settings.timeout_ms,
                cancel_event,
                max_output_chars=settings.max_output_chars,
                keep_partial_stdout_on_timeout=settings.keep_partial_stdout_on_timeout,
                label=label,
            )
            if outcome.exit_code != 0:
                logger.debug(
                    "%s failed call_id=%s code=%s stderr=%s",
                    self.name,
                    call_id,
                    outcome.exit_code,
                    outcome.stderr[:500],
                )
            return interpret_outcome(
                outcome,
                label=label,
                partial_output_chars=settings.partial_output_chars,
            )
        except Exception as e:
            logger.error("%s error: %s", self.name, e, exc_info=True)
            return ToolError(message=str(e))


class ToolBridge:
    """Turns client tool definitions into executable bridged tools."""

    def __init__(self, settings: BridgeSettings | None = None) -> None:
        self.settings = settings or BridgeSettings()

    def bridge(self, tools: Iterable[ToolDefinition]) -> list[BridgedTool]:
        return [BridgedTool(tool, self.settings) for tool in tools]


def to_local_tool_definitions(
    tools: Iterable[ToolDefinition],
    config_path: str | None,
    *,
    settings: BridgeSettings | None = None,
) -> list[BridgedTool]:
    """Convert tool definitions to tools that execute via mcporter.

    ``config_path`` overrides the settings' mcporter config path; pass
    None or "" to omit the ``--config`` flag entirely.
    """
    base = settings or BridgeSettings()
    merged = base.model_copy(update={"config_path": config_path or None})
    return ToolBridge(merged).bridge(tools)
