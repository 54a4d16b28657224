"""Tests for toolbridge.process.invoker (real subprocesses)."""

from __future__ import annotations

import asyncio
import json
import sys
import time

import pytest

from toolbridge.process.invoker import (
    TRUNCATION_MARKER,
    ProcessOutcome,
    resolve_command,
    run_process,
)

PY = sys.executable


async def _run_py(code: str, *extra: str, **kwargs) -> ProcessOutcome:
    kwargs.setdefault("label", "fake")
    return await run_process(PY, ["-c", code, *extra], **kwargs)


# ---------------------------------------------------------------------------
# resolve_command
# ---------------------------------------------------------------------------


class TestResolveCommand:
    def test_windows_gets_cmd_suffix(self) -> None:
        assert resolve_command("mcporter", platform="win32") == "mcporter.cmd"

    def test_windows_does_not_double_suffix(self) -> None:
        assert resolve_command("mcporter.cmd", platform="win32") == "mcporter.cmd"

    def test_other_platforms_unsuffixed(self) -> None:
        assert resolve_command("mcporter", platform="linux") == "mcporter"
        assert resolve_command("mcporter", platform="darwin") == "mcporter"


# ---------------------------------------------------------------------------
# Natural completion
# ---------------------------------------------------------------------------


class TestNaturalClose:
    async def test_stdout_and_exit_zero(self) -> None:
        outcome = await _run_py("print('{\"a\":1}')")
        assert outcome.exit_code == 0
        assert outcome.stdout.strip() == '{"a":1}'
        assert outcome.stderr == ""
        assert outcome.truncated is False

    async def test_nonzero_exit_and_stderr(self) -> None:
        outcome = await _run_py("import sys; sys.stderr.write('boom'); sys.exit(2)")
        assert outcome.exit_code == 2
        assert outcome.stderr == "boom"

    async def test_streams_are_independent(self) -> None:
        code = "import sys; print('out'); sys.stderr.write('err')"
        outcome = await _run_py(code)
        assert outcome.stdout.strip() == "out"
        assert outcome.stderr == "err"

    async def test_args_are_not_shell_interpreted(self) -> None:
        tricky = ["a b; echo injected", "$(whoami)", "'quoted'", "*"]
        code = "import json, sys; print(json.dumps(sys.argv[1:]))"
        outcome = await _run_py(code, *tricky)
        assert json.loads(outcome.stdout) == tricky

    async def test_inherits_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOOLBRIDGE_TEST_MARKER", "present")
        code = "import os; print(os.environ.get('TOOLBRIDGE_TEST_MARKER', ''))"
        outcome = await _run_py(code)
        assert outcome.stdout.strip() == "present"

    async def test_utf8_output(self) -> None:
        code = "import sys; sys.stdout.buffer.write('h\\u00e9llo \\u2713'.encode('utf-8'))"
        outcome = await _run_py(code)
        assert outcome.stdout == "héllo ✓"


# ---------------------------------------------------------------------------
# Output bounding
# ---------------------------------------------------------------------------


class TestTruncation:
    async def test_stdout_over_budget(self) -> None:
        outcome = await _run_py("print('x' * 1000)", max_output_chars=100)
        assert outcome.exit_code == 0
        assert outcome.stdout == "x" * 100
        assert outcome.stdout_truncated is True
        assert outcome.stderr.endswith(TRUNCATION_MARKER)

    async def test_stderr_over_budget(self) -> None:
        code = "import sys; sys.stderr.write('e' * 500)"
        outcome = await _run_py(code, max_output_chars=50)
        assert outcome.stderr_truncated is True
        assert outcome.stderr == "e" * 50 + TRUNCATION_MARKER
        assert outcome.exit_code == 0

    async def test_large_output_does_not_block_the_process(self) -> None:
        # Several times a typical pipe buffer.
        code = "import sys; sys.stdout.write('y' * 2_000_000)"
        outcome = await _run_py(code, timeout_ms=30_000)
        assert outcome.exit_code == 0
        assert len(outcome.stdout) == 500_000
        assert outcome.stdout_truncated is True


# ---------------------------------------------------------------------------
# Spawn failure
# ---------------------------------------------------------------------------


class TestSpawnFailure:
    async def test_missing_executable_resolves(self) -> None:
        outcome = await run_process(
            "toolbridge-definitely-not-a-real-command", ["call"], timeout_ms=5000
        )
        assert outcome.exit_code is None
        assert outcome.stdout == ""
        assert outcome.stderr != ""


# ---------------------------------------------------------------------------
# Timeout
# ---------------------------------------------------------------------------


class TestTimeout:
    async def test_timeout_kills_and_reports(self) -> None:
        start = time.monotonic()
        outcome = await _run_py(
            "import time; print('partial', flush=True); time.sleep(30)",
            timeout_ms=1000,
        )
        elapsed = time.monotonic() - start
        assert elapsed < 10
        assert outcome.exit_code is None
        assert outcome.stderr == "fake call timed out after 1000ms"
        assert outcome.stdout == ""

    async def test_timeout_can_keep_partial_stdout(self) -> None:
        outcome = await _run_py(
            "import time; print('partial', flush=True); time.sleep(30)",
            timeout_ms=1500,
            keep_partial_stdout_on_timeout=True,
        )
        assert outcome.exit_code is None
        assert outcome.stdout.strip() == "partial"

    async def test_zero_timeout_disables_deadline(self) -> None:
        outcome = await _run_py("import time; time.sleep(0.3); print('done')", timeout_ms=0)
        assert outcome.exit_code == 0
        assert outcome.stdout.strip() == "done"

    async def test_fast_process_is_not_affected_by_timer(self) -> None:
        outcome = await _run_py("print('quick')", timeout_ms=500)
        # Let the original deadline pass; nothing else may happen.
        await asyncio.sleep(0.7)
        assert outcome.exit_code == 0
        assert outcome.stdout.strip() == "quick"


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


class TestCancellation:
    async def test_cancel_kills_running_process(self) -> None:
        event = asyncio.Event()
        loop = asyncio.get_running_loop()
        loop.call_later(0.5, event.set)
        start = time.monotonic()
        outcome = await _run_py("import time; time.sleep(30)", timeout_ms=20_000, cancel_event=event)
        assert time.monotonic() - start < 10
        assert outcome.exit_code is not None
        assert outcome.exit_code != 0
        assert "timed out" not in outcome.stderr

    async def test_cancel_after_completion_has_no_effect(self) -> None:
        event = asyncio.Event()
        outcome = await _run_py("print('ok')", cancel_event=event)
        event.set()
        await asyncio.sleep(0.1)
        assert outcome.exit_code == 0
        assert outcome.stdout.strip() == "ok"

    async def test_caller_task_cancellation_kills_process(self) -> None:
        task = asyncio.create_task(_run_py("import time; time.sleep(30)"))
        await asyncio.sleep(0.5)
        task.cancel()
        start = time.monotonic()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert time.monotonic() - start < 5


# ---------------------------------------------------------------------------
# Reaping
# ---------------------------------------------------------------------------


@pytest.mark.skipif(sys.platform == "win32", reason="needs setsid")
class TestReap:
    async def test_pipes_held_by_detached_grandchild_are_closed(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        spawned: list[asyncio.subprocess.Process] = []
        real_exec = asyncio.create_subprocess_exec

        async def spy(*args, **kwargs):
            process = await real_exec(*args, **kwargs)
            spawned.append(process)
            return process

        monkeypatch.setattr(asyncio, "create_subprocess_exec", spy)
        monkeypatch.setattr("toolbridge.process.invoker._REAP_TIMEOUT", 0.3)

        code = (
            "import subprocess, sys, time; "
            "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(5)'], "
            "start_new_session=True); "
            "time.sleep(30)"
        )
        start = time.monotonic()
        outcome = await _run_py(code, timeout_ms=1500)
        assert time.monotonic() - start < 5
        assert outcome.exit_code is None
        assert outcome.stderr == "fake call timed out after 1500ms"
        assert spawned[0]._transport.is_closing()
