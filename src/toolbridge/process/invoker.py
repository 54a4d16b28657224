"""Process invoker — run a CLI subprocess with bounded output and a deadline.

The invoker spawns one process per call, drains stdout and stderr
concurrently into :class:`OutputAccumulator` instances, and resolves
exactly once with a :class:`ProcessOutcome`.  Three completions race for
that single resolution:

* the timeout timer (forced kill, synthesized outcome),
* a spawn or pipe error,
* natural close (both pipes at EOF and the exit status collected).

Whichever settles first wins; later completions are no-ops.  External
cancellation only kills the process; the outcome still arrives through
the natural-close path with a signal-derived exit code.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
import sys
from dataclasses import dataclass

from toolbridge.process.accumulator import MAX_OUTPUT_CHARS, OutputAccumulator

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n[output truncated]"

_READ_CHUNK = 64 * 1024
_REAP_TIMEOUT = 2.0


@dataclass
class ProcessOutcome:
    """Raw result of one subprocess run, before interpretation.

    ``exit_code`` is None when the process was killed by the timeout or
    could not be spawned at all.
    """

    stdout: str = ""
    stderr: str = ""
    exit_code: int | None = None
    stdout_truncated: bool = False
    stderr_truncated: bool = False

    @property
    def truncated(self) -> bool:
        return self.stdout_truncated or self.stderr_truncated


def resolve_command(command: str, platform: str | None = None) -> str:
    """Return the platform-specific executable name.

    On Windows, npm-installed CLIs are ``.cmd`` shims.
    """
    platform = platform or sys.platform
    if platform != "win32" or command.lower().endswith(".cmd"):
        return command
    return f"{command}.cmd"


def _kill(process: asyncio.subprocess.Process | None) -> None:
    """SIGKILL the process (and its process group on POSIX)."""
    if process is None or process.returncode is not None:
        return
    try:
        if hasattr(os, "killpg"):
            os.killpg(os.getpgid(process.pid), signal.SIGKILL)
        else:
            process.kill()
    except ProcessLookupError:
        logger.debug("Process already gone: pid=%d", process.pid)
    except OSError as e:
        logger.warning("Error killing pid=%d: %s", process.pid, e)


def _close_pipes(process: asyncio.subprocess.Process) -> None:
    """Close our ends of the process pipes.

    asyncio.subprocess.Process has no public close; its transport owns
    the pipe transports.
    """
    transport = process._transport
    if not transport.is_closing():
        transport.close()


async def _drain(stream: asyncio.StreamReader | None, acc: OutputAccumulator) -> None:
    """Read a pipe until EOF, feeding decoded text into the accumulator."""
    if stream is None:
        return
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        data = await stream.read(_READ_CHUNK)
        if not data:
            break
        acc.append(decoder.decode(data))
    acc.append(decoder.decode(b"", final=True))


async def _forward_cancel(event: asyncio.Event, process: asyncio.subprocess.Process) -> None:
    await event.wait()
    logger.debug("Cancellation requested, killing pid=%d", process.pid)
    _kill(process)


async def run_process(
    command: str,
    args: list[str],
    timeout_ms: int | None = None,
    cancel_event: asyncio.Event | None = None,
    *,
    max_output_chars: int = MAX_OUTPUT_CHARS,
    keep_partial_stdout_on_timeout: bool = False,
    label: str | None = None,
) -> ProcessOutcome:
    """Run ``command`` with ``args`` and resolve once with its outcome.

    Args:
        command: Executable name or path, already platform-resolved.
        args: Discrete argv entries; never passed through a shell.
        timeout_ms: Deadline in milliseconds. 0 or None disables it.
        cancel_event: When set, the process is killed.
        max_output_chars: Per-stream character budget.
        keep_partial_stdout_on_timeout: Keep whatever stdout was captured
            before the timeout kill instead of dropping it.
        label: Name used in diagnostic messages (defaults to the command).

    Returns:
        The ProcessOutcome. This coroutine never raises for spawn,
        timeout or exit failures.
    """
    loop = asyncio.get_running_loop()
    label = label or os.path.basename(command)
    settled: asyncio.Future[ProcessOutcome] = loop.create_future()
    stdout_acc = OutputAccumulator(max_output_chars)
    stderr_acc = OutputAccumulator(max_output_chars)
    process: asyncio.subprocess.Process | None = None

    def settle(outcome: ProcessOutcome) -> None:
        if not settled.done():
            settled.set_result(outcome)

    def on_timeout() -> None:
        if settled.done():
            return
        logger.warning("%s call timed out after %dms, killing", label, timeout_ms)
        _kill(process)
        settle(
            ProcessOutcome(
                stdout=stdout_acc.text if keep_partial_stdout_on_timeout else "",
                stderr=f"{label} call timed out after {timeout_ms}ms",
                exit_code=None,
                stdout_truncated=stdout_acc.truncated,
                stderr_truncated=stderr_acc.truncated,
            )
        )

    # Armed before spawn so a hanging spawn is covered too.
    timer = loop.call_later(timeout_ms / 1000, on_timeout) if timeout_ms else None

    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,  # own process group for tree-killing
        )
    except (OSError, ValueError) as e:
        if timer is not None:
            timer.cancel()
        logger.error("%s spawn error: %s", label, e)
        settle(ProcessOutcome(stdout="", stderr=str(e), exit_code=None))
        return settled.result()

    logger.debug("Spawned %s pid=%d args=%s", label, process.pid, args)

    if settled.done():
        # Timer fired while the spawn was in flight.
        _kill(process)

    async def wait_close() -> None:
        try:
            await asyncio.gather(
                _drain(process.stdout, stdout_acc),
                _drain(process.stderr, stderr_acc),
            )
            exit_code = await process.wait()
        except Exception as e:
            logger.error("%s process error: %s", label, e, exc_info=True)
            settle(ProcessOutcome(stdout="", stderr=str(e), exit_code=None))
            return
        stderr = stderr_acc.text
        if stdout_acc.truncated or stderr_acc.truncated:
            stderr += TRUNCATION_MARKER
        settle(
            ProcessOutcome(
                stdout=stdout_acc.text,
                stderr=stderr,
                exit_code=exit_code,
                stdout_truncated=stdout_acc.truncated,
                stderr_truncated=stderr_acc.truncated,
            )
        )

    close_task = asyncio.create_task(wait_close())
    cancel_task = (
        asyncio.create_task(_forward_cancel(cancel_event, process))
        if cancel_event is not None
        else None
    )

    try:
        return await settled
    finally:
        if timer is not None:
            timer.cancel()
        if cancel_task is not None:
            cancel_task.cancel()
        # Caller cancellation or timeout: make sure nothing outlives the call.
        _kill(process)
        if not close_task.done():
            done, _ = await asyncio.wait({close_task}, timeout=_REAP_TIMEOUT)
            if not done:
                # A grandchild that left the process group (setsid) can hold
                # the pipes open after the kill.
                logger.warning("%s pid=%d was not reaped in time", label, process.pid)
                close_task.cancel()
                _close_pipes(process)
