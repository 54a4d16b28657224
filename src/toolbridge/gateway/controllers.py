"""Gateway state controllers — request/response glue for UI state.

Each controller takes a mutable state object, issues one RPC through the
state's client, and records the result or the stringified error.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class GatewayClient(Protocol):
    async def request(self, method: str, params: dict[str, Any]) -> Any: ...


@dataclass
class AgentsState:
    client: GatewayClient | None = None
    connected: bool = False
    agents_loading: bool = False
    agents_creating: bool = False
    agents_error: str | None = None
    agents_list: dict[str, Any] | None = None
    agents_selected_id: str | None = None
    tools_catalog_loading: bool = False
    tools_catalog_error: str | None = None
    tools_catalog_result: dict[str, Any] | None = None


@dataclass
class ChatModel:
    provider: str
    id: str
    name: str | None = None


@dataclass
class ChatModelsListState:
    client: GatewayClient | None = None
    connected: bool = False
    chat_models_list: list[ChatModel] | None = None
    chat_models_list_loading: bool = False


def to_workspace_slug(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")[:48]
    return slug or "agent"


async def load_agents(state: AgentsState) -> None:
    if state.client is None or not state.connected or state.agents_loading:
        return
    state.agents_loading = True
    state.agents_error = None
    try:
        res = await state.client.request("agents.list", {})
        if res:
            state.agents_list = res
            agents = res.get("agents") or []
            selected = state.agents_selected_id
            known = any(entry.get("id") == selected for entry in agents)
            if not selected or not known:
                state.agents_selected_id = res.get("defaultId") or (
                    agents[0].get("id") if agents else None
                )
    except Exception as e:
        logger.debug("agents.list failed: %s", e)
        state.agents_error = str(e)
    finally:
        state.agents_loading = False


async def create_agent(state: AgentsState, name: str, role: str | None = None) -> None:
    if state.client is None or not state.connected:
        return
    trimmed = name.strip()
    if not trimmed:
        state.agents_error = "Agent name is required."
        return
    if state.agents_creating:
        return
    state.agents_creating = True
    state.agents_error = None
    try:
        params: dict[str, Any] = {
            "name": trimmed,
            "workspace": f"~/.toolbridge/workspace-{to_workspace_slug(trimmed)}",
        }
        if role and role.strip():
            params["role"] = role.strip()
        result = await state.client.request("agents.create", params)
        await load_agents(state)
        created_id = result.get("agentId") if isinstance(result, dict) else None
        if isinstance(created_id, str):
            state.agents_selected_id = created_id
    except Exception as e:
        logger.debug("agents.create failed: %s", e)
        state.agents_error = str(e)
    finally:
        state.agents_creating = False


async def load_tools_catalog(state: AgentsState, agent_id: str | None = None) -> None:
    if state.client is None or not state.connected or state.tools_catalog_loading:
        return
    state.tools_catalog_loading = True
    state.tools_catalog_error = None
    try:
        params: dict[str, Any] = {"includePlugins": True}
        target = agent_id or state.agents_selected_id
        if target:
            params["agentId"] = target
        res = await state.client.request("tools.catalog", params)
        if res:
            state.tools_catalog_result = res
    except Exception as e:
        logger.debug("tools.catalog failed: %s", e)
        state.tools_catalog_error = str(e)
    finally:
        state.tools_catalog_loading = False


async def load_chat_models(state: ChatModelsListState) -> None:
    """Fetch the model list, keeping entries with a provider and an id."""
    if state.client is None or not state.connected or state.chat_models_list_loading:
        return
    state.chat_models_list_loading = True
    try:
        res = await state.client.request("models.list", {})
        raw = res.get("models") if isinstance(res, dict) else None
        models: list[ChatModel] = []
        for entry in raw if isinstance(raw, list) else []:
            if not isinstance(entry, dict):
                continue
            provider = entry.get("provider")
            model_id = entry.get("id")
            provider = provider.strip() if isinstance(provider, str) else ""
            model_id = model_id.strip() if isinstance(model_id, str) else ""
            if not provider or not model_id:
                continue
            name = entry.get("name")
            models.append(
                ChatModel(
                    provider=provider,
                    id=model_id,
                    name=name.strip() if isinstance(name, str) else None,
                )
            )
        state.chat_models_list = models
    finally:
        state.chat_models_list_loading = False
