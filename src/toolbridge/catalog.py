"""Tool catalog — load client tool definitions from a JSON file.

The file holds an array of OpenAI-style function tools::

    [{"type": "function", "function": {"name": "...", "parameters": {...}}}]

Loads are cached per source path.  A missing, unreadable, malformed or
empty file yields ``None`` rather than an empty list, so callers can tell
"no tools configured" apart from a successful load.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import aiofiles
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from toolbridge.config import CatalogSettings

logger = logging.getLogger(__name__)


class FunctionSpec(BaseModel):
    """Only ``name`` is required; other fields are read leniently."""

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str
    description: str | None = None
    parameters: dict[str, Any] | None = None

    @field_validator("description", mode="before")
    @classmethod
    def _drop_non_string(cls, v: Any) -> Any:
        return v if isinstance(v, str) else None

    @field_validator("parameters", mode="before")
    @classmethod
    def _drop_non_mapping(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else None


class ToolDefinition(BaseModel):
    """A client tool definition as it appears in the catalog file."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: Any = "function"
    function: FunctionSpec

    @property
    def name(self) -> str:
        return self.function.name

    @property
    def description(self) -> str:
        return self.function.description or ""

    @property
    def parameters(self) -> dict[str, Any]:
        return dict(self.function.parameters or {})


@dataclass
class CatalogLoad:
    """Tagged result of parsing a catalog: either ``tools`` or an ``error``."""

    tools: list[ToolDefinition] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_tool_definitions(raw: Any) -> CatalogLoad:
    """Validate decoded JSON as a list of tool definitions. Never raises."""
    if not isinstance(raw, list):
        return CatalogLoad(error="expected array of { function: { name } }")
    tools: list[ToolDefinition] = []
    for index, item in enumerate(raw):
        try:
            tools.append(ToolDefinition.model_validate(item))
        except ValidationError as e:
            return CatalogLoad(error=f"entry {index}: {e.error_count()} validation error(s)")
    return CatalogLoad(tools=tools)


class ToolCatalog:
    """Cached loader for the default client tools file.

    The cache holds a single entry keyed by the resolved source path; a
    different path replaces it.  Call ``clear()`` to force a re-read.
    """

    def __init__(self, settings: CatalogSettings | None = None) -> None:
        self._settings = settings or CatalogSettings()
        self._cached: list[ToolDefinition] | None = None
        self._cached_path: str | None = None

    @property
    def path(self) -> str:
        return self._settings.resolve_path()

    async def load_tools(self) -> list[ToolDefinition] | None:
        """Return the tool definitions, or None if none could be loaded."""
        path = self.path
        if self._cached_path == path and self._cached is not None:
            return self._cached or None

        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
            result = parse_tool_definitions(json.loads(raw))
        except (OSError, ValueError) as e:
            reason = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
            logger.warning("Failed to load client tools from %s: %s", path, reason)
            self._remember(path, [])
            return None

        if not result.ok:
            logger.warning("Invalid client tools format at %s: %s", path, result.error)
            self._remember(path, [])
            return None

        self._remember(path, result.tools)
        if not result.tools:
            return None
        logger.info("Loaded %d client tools from %s", len(result.tools), path)
        return result.tools

    def _remember(self, path: str, tools: list[ToolDefinition]) -> None:
        self._cached_path = path
        self._cached = tools

    def clear(self) -> None:
        """Drop the cached definitions (e.g. on config reload)."""
        self._cached = None
        self._cached_path = None
