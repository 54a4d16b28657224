"""Slack channel adapter — normalized actions in, threaded replies out.

The adapter does not talk to Slack itself.  Inbound actions are forwarded
to a runtime action handler, and outbound messages go through an injected
``send_slack`` callable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Literal, Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CHANNEL = "slack"


class SlackAccountConfig(BaseModel):
    mode: Literal["socket", "http"] = "socket"
    signing_secret: str | None = None


class SlackAccount(BaseModel):
    """A configured Slack workspace account."""

    account_id: str = "default"
    enabled: bool = True
    bot_token: str | None = None
    app_token: str | None = None
    bot_token_source: str = "none"
    app_token_source: str = "none"
    config: SlackAccountConfig = Field(default_factory=SlackAccountConfig)


def is_configured(account: SlackAccount) -> bool:
    """Socket mode needs bot + app tokens; HTTP mode needs bot token + signing secret."""
    if not account.bot_token:
        return False
    if account.config.mode == "http":
        return bool(account.config.signing_secret)
    return bool(account.app_token)


def build_account_snapshot(
    account: SlackAccount, runtime: Any = None, probe: Any = None
) -> dict[str, Any]:
    snapshot: dict[str, Any] = {
        "accountId": account.account_id,
        "enabled": account.enabled,
        "configured": is_configured(account),
        "mode": account.config.mode,
        "botTokenSource": account.bot_token_source,
        "appTokenSource": account.app_token_source,
    }
    if probe is not None:
        snapshot["probe"] = probe
    return snapshot


class UnsupportedActionError(ValueError):
    """Raised for channel actions the Slack adapter does not handle."""


class SlackRuntime(Protocol):
    async def handle_slack_action(
        self, payload: dict[str, Any], cfg: dict[str, Any]
    ) -> Any: ...


# channel action -> (Slack action, forwarded params)
_ACTIONS: dict[str, tuple[str, tuple[str, ...]]] = {
    "read": ("readMessages", ("channelId", "threadId", "limit", "before", "after")),
    "send": ("sendMessage", ("channelId", "text", "threadId", "mediaUrl")),
    "react": ("react", ("channelId", "messageId", "emoji")),
}


class SlackActions:
    """Maps generic channel actions onto the Slack runtime's action handler."""

    def __init__(self, runtime: SlackRuntime) -> None:
        self._runtime = runtime

    async def handle_action(
        self,
        action: str,
        params: dict[str, Any],
        cfg: dict[str, Any] | None = None,
        account_id: str | None = None,
    ) -> Any:
        mapping = _ACTIONS.get(action)
        if mapping is None:
            raise UnsupportedActionError(f"Unsupported Slack action: {action}")
        slack_action, keys = mapping
        payload: dict[str, Any] = {"action": slack_action}
        for key in keys:
            if params.get(key) is not None:
                payload[key] = params[key]
        if account_id:
            payload["accountId"] = account_id
        logger.debug("Slack action %s -> %s", action, slack_action)
        return await self._runtime.handle_slack_action(payload, cfg or {})


SendSlack = Callable[[str, str, dict[str, Any]], Awaitable[dict[str, Any]]]


@dataclass
class OutboundDeps:
    send_slack: SendSlack


@dataclass
class OutboundResult:
    channel: str
    message_id: str


def resolve_thread_ts(reply_to_id: str | None, thread_id: str | None) -> str | None:
    """An explicit reply-to id always wins over the thread id."""
    return reply_to_id or thread_id or None


class SlackOutbound:
    """Outbound text and media delivery with thread linkage."""

    async def send_text(
        self,
        *,
        to: str,
        text: str,
        deps: OutboundDeps,
        account_id: str | None = None,
        reply_to_id: str | None = None,
        thread_id: str | None = None,
    ) -> OutboundResult:
        return await self._send(
            to, text, deps, account_id, reply_to_id, thread_id, media_url=None
        )

    async def send_media(
        self,
        *,
        to: str,
        text: str,
        media_url: str,
        deps: OutboundDeps,
        account_id: str | None = None,
        reply_to_id: str | None = None,
        thread_id: str | None = None,
    ) -> OutboundResult:
        return await self._send(
            to, text, deps, account_id, reply_to_id, thread_id, media_url=media_url
        )

    async def _send(
        self,
        to: str,
        text: str,
        deps: OutboundDeps,
        account_id: str | None,
        reply_to_id: str | None,
        thread_id: str | None,
        media_url: str | None,
    ) -> OutboundResult:
        options: dict[str, Any] = {}
        if account_id:
            options["account_id"] = account_id
        thread_ts = resolve_thread_ts(reply_to_id, thread_id)
        if thread_ts:
            options["thread_ts"] = thread_ts
        if media_url:
            options["media_url"] = media_url
        result = await deps.send_slack(to, text, options)
        return OutboundResult(channel=CHANNEL, message_id=str(result.get("message_id", "")))
