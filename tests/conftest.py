"""Shared fixtures for toolbridge tests."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

FAKE_MCPORTER = """\
#!{python}
import json
import sys

argv = sys.argv[1:]
config = None
if argv[:1] == ["--config"]:
    config = argv[1]
    argv = argv[2:]
if argv[:1] != ["call"] or len(argv) != 4 or argv[2] != "--args":
    sys.stderr.write("usage: mcporter [--config path] call <tool> --args <json>")
    sys.exit(64)
tool = argv[1]
params = json.loads(argv[3])
if tool == "echo":
    print(json.dumps({{"tool": tool, "params": params, "config": config}}))
elif tool == "text":
    print("plain text output")
elif tool == "silent":
    pass
elif tool == "fail":
    sys.stderr.write("boom")
    sys.exit(2)
elif tool == "sleep":
    import time
    time.sleep(30)
else:
    sys.stderr.write("unknown tool " + tool)
    sys.exit(1)
"""


@pytest.fixture
def fake_mcporter(tmp_path: Path) -> str:
    """Path to an executable script that mimics ``mcporter call``."""
    if sys.platform == "win32":
        pytest.skip("shebang scripts are POSIX-only")
    script = tmp_path / "mcporter"
    script.write_text(FAKE_MCPORTER.format(python=sys.executable))
    script.chmod(0o755)
    return str(script)


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    """A valid client tools catalog with two tools."""
    path = tmp_path / "default-client-tools.json"
    path.write_text(
        json.dumps(
            [
                {
                    "type": "function",
                    "function": {
                        "name": "echo",
                        "description": "Echo parameters back",
                        "parameters": {
                            "type": "object",
                            "properties": {"text": {"type": "string"}},
                        },
                    },
                },
                {"type": "function", "function": {"name": "text"}},
            ]
        )
    )
    return path
