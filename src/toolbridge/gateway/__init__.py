"""Gateway UI state controllers."""

from toolbridge.gateway.controllers import (
    AgentsState,
    ChatModel,
    ChatModelsListState,
    create_agent,
    load_agents,
    load_chat_models,
    load_tools_catalog,
    to_workspace_slug,
)

__all__ = [
    "AgentsState",
    "ChatModel",
    "ChatModelsListState",
    "create_agent",
    "load_agents",
    "load_chat_models",
    "load_tools_catalog",
    "to_workspace_slug",
]
