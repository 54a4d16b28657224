"""Chat channel adapters."""

from toolbridge.channel.slack import (
    OutboundDeps,
    OutboundResult,
    SlackAccount,
    SlackAccountConfig,
    SlackActions,
    SlackOutbound,
    UnsupportedActionError,
    build_account_snapshot,
    is_configured,
    resolve_thread_ts,
)

__all__ = [
    "OutboundDeps",
    "OutboundResult",
    "SlackAccount",
    "SlackAccountConfig",
    "SlackActions",
    "SlackOutbound",
    "UnsupportedActionError",
    "build_account_snapshot",
    "is_configured",
    "resolve_thread_ts",
]
