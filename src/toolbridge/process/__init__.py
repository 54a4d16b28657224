"""Subprocess execution — bounded output capture, deadlines, cancellation."""

from toolbridge.process.accumulator import MAX_OUTPUT_CHARS, OutputAccumulator
from toolbridge.process.invoker import ProcessOutcome, resolve_command, run_process

__all__ = [
    "MAX_OUTPUT_CHARS",
    "OutputAccumulator",
    "ProcessOutcome",
    "resolve_command",
    "run_process",
]
