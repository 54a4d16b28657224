"""Map a raw process outcome to a tool result envelope."""

from __future__ import annotations

import json
import logging

from toolbridge.process.invoker import ProcessOutcome
from toolbridge.tool.base import ToolError, ToolOk, ToolResult

logger = logging.getLogger(__name__)

PARTIAL_OUTPUT_CHARS = 2000


def _reject_constant(name: str) -> None:
    # NaN and Infinity are not JSON.
    raise ValueError(f"invalid JSON constant: {name}")


def interpret_outcome(
    outcome: ProcessOutcome,
    *,
    label: str = "mcporter",
    partial_output_chars: int = PARTIAL_OUTPUT_CHARS,
) -> ToolResult:
    """Convert a ProcessOutcome into a ToolOk or ToolError.

    Failure (non-zero or missing exit code): the message is the trimmed
    stderr, or a generic exit-code message when stderr is blank, and the
    head of stdout is attached as partial output.

    Success: blank stdout becomes ``{"result": None, "raw": ""}``, valid
    JSON is returned as the parsed value, anything else is wrapped as
    ``{"result": text, "raw": text}`` so the raw text is never lost.
    """
    try:
        if outcome.exit_code != 0:
            code = "null" if outcome.exit_code is None else outcome.exit_code
            message = outcome.stderr.strip() or f"{label} call exited with code {code}"
            return ToolError(
                message=message,
                partial_output=outcome.stdout[:partial_output_chars] or None,
            )

        trimmed = outcome.stdout.strip()
        if not trimmed:
            return ToolOk({"result": None, "raw": ""})
        try:
            return ToolOk(json.loads(trimmed, parse_constant=_reject_constant))
        except (ValueError, RecursionError):
            # Deeply nested input exhausts the decoder's recursion limit.
            return ToolOk({"result": trimmed, "raw": trimmed})
    except Exception as e:
        logger.error("Failed to interpret %s outcome: %s", label, e, exc_info=True)
        return ToolError(message=str(e))
