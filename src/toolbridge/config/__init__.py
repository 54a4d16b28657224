"""Configuration — Pydantic models for toolbridge settings."""

from __future__ import annotations

import json
import os
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_CLIENT_TOOLS_PATH = "/app/config/default-client-tools.json"


class BridgeSettings(BaseModel):
    """How bridged tool calls are run through the mcporter CLI."""

    command: str = Field(default="mcporter", description="Executable to invoke")
    config_path: str | None = Field(
        default=None,
        description="mcporter config file, passed as --config when set",
    )
    timeout_ms: int = Field(
        default=60_000, ge=0, description="Per-call deadline; 0 disables it"
    )
    max_output_chars: int = Field(
        default=500_000, gt=0, description="Character budget per output stream"
    )
    partial_output_chars: int = Field(
        default=2000,
        ge=0,
        description="How much stdout to attach to failure results",
    )
    keep_partial_stdout_on_timeout: bool = Field(
        default=False,
        description=(
            "Return stdout captured before a timeout kill. "
            "When False a timed-out call carries only the diagnostic message."
        ),
    )


class CatalogSettings(BaseModel):
    """Where the default client tool definitions are read from."""

    default_client_tools_path: str | None = Field(default=None)

    def resolve_path(self) -> str:
        """Configured path, then TOOLBRIDGE_DEFAULT_CLIENT_TOOLS_PATH, then the default."""
        configured = (self.default_client_tools_path or "").strip()
        if configured:
            return configured
        env_path = os.environ.get("TOOLBRIDGE_DEFAULT_CLIENT_TOOLS_PATH", "").strip()
        return env_path or DEFAULT_CLIENT_TOOLS_PATH


class ToolbridgeConfig(BaseModel):
    """Top-level toolbridge configuration."""

    bridge: BridgeSettings = Field(default_factory=BridgeSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)

    @classmethod
    def load(cls, config_path: str | None = None) -> ToolbridgeConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars > config file > defaults.

        Env vars:
            TOOLBRIDGE_MCPORTER_COMMAND  - Override the executable name
            TOOLBRIDGE_MCPORTER_CONFIG   - mcporter config file (--config)
            TOOLBRIDGE_CALL_TIMEOUT_MS   - Per-call timeout in milliseconds
            TOOLBRIDGE_MAX_OUTPUT_CHARS  - Per-stream output budget
        """
        load_dotenv(override=True)

        config_data: dict[str, Any] = {}

        if config_path and os.path.exists(config_path):
            with open(config_path) as f:
                config_data = json.load(f)

        bridge = config_data.get("bridge", {})

        env_command = os.environ.get("TOOLBRIDGE_MCPORTER_COMMAND")
        if env_command:
            bridge["command"] = env_command

        env_mcporter_config = os.environ.get("TOOLBRIDGE_MCPORTER_CONFIG")
        if env_mcporter_config:
            bridge["config_path"] = env_mcporter_config

        env_timeout = os.environ.get("TOOLBRIDGE_CALL_TIMEOUT_MS")
        if env_timeout:
            bridge["timeout_ms"] = int(env_timeout)

        env_max_output = os.environ.get("TOOLBRIDGE_MAX_OUTPUT_CHARS")
        if env_max_output:
            bridge["max_output_chars"] = int(env_max_output)

        if bridge:
            config_data["bridge"] = bridge

        return cls.model_validate(config_data)
