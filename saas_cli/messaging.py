"""
Team-messaging backend (Slack Web API, Bearer tokens).

Each operation declares the token scopes it needs. ``user`` tokens read
the private search index; ``bot`` tokens list, read and post to channels.
Composite operations are explicit pipelines: each step takes the typed
output of the previous one, and the first failing call aborts the rest.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from saas_cli import api
from saas_cli.config import messaging_context
from saas_cli.filters import filter_mentions, filter_time_window, mentioning
from saas_cli.models import Backend, Operation
from saas_cli.responses import validate_response
from saas_cli.schemas import MESSAGING_SCHEMA

LABEL = "Slack"

MEMBER_CHANNEL_TYPES = "public_channel,private_channel"
MEMBER_CHANNEL_LIMIT = 200


def call(ctx, method, scope, params=None, http_method="GET"):
    return api.request(
        ctx,
        f"/{method}",
        method=http_method,
        params=params,
        scope=scope,
        label=LABEL,
        ok_flag=True,
    )


# ---------------------------------------------------------------------------
# Single calls
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identity:
    """Who a token authenticates as (from auth.test)."""

    user_id: str


def resolve_identity(ctx, scope: str) -> Identity:
    body = validate_response("auth.test", call(ctx, "auth.test", scope))
    return Identity(user_id=body["user_id"])


def search_messages(ctx, params: dict[str, Any]) -> dict[str, Any]:
    return validate_response("search.messages", call(ctx, "search.messages", "user", params))


def list_conversations(ctx, params: dict[str, Any]) -> dict[str, Any]:
    return validate_response(
        "conversations.list", call(ctx, "conversations.list", "bot", params)
    )


def conversation_history(ctx, params: dict[str, Any]) -> dict[str, Any]:
    """Fetch one page of history, narrowed to the requested time window."""
    body = validate_response(
        "conversations.history", call(ctx, "conversations.history", "bot", params)
    )
    window = filter_time_window(
        body["messages"],
        params.get("oldest"),
        params.get("latest"),
        bool(params.get("inclusive")),
    )
    return {**body, "messages": window}


def post_message(ctx, params: dict[str, Any]) -> dict[str, Any]:
    return call(ctx, "chat.postMessage", "bot", params, http_method="POST")


# ---------------------------------------------------------------------------
# Composite pipelines
# ---------------------------------------------------------------------------


def mention_search_params(identity: Identity, record) -> dict[str, Any]:
    """search.messages params for mentions of ``identity``, plus any extra query."""
    params = record.as_params()
    extra = params.pop("query", None)
    query = f"mentions:{identity.user_id}"
    if extra:
        query = f"{query} {extra}"
    return {**params, "query": query}


def search_mentions(ctx, identity: Identity, record) -> dict[str, Any]:
    result = search_messages(ctx, mention_search_params(identity, record))
    return filter_mentions(result, identity.user_id)


def mentions_to_bot(ctx, record):
    return search_mentions(ctx, resolve_identity(ctx, "bot"), record)


def mentions_to_user(ctx, record):
    return search_mentions(ctx, resolve_identity(ctx, "user"), record)


def member_channels(ctx) -> list[dict[str, Any]]:
    body = list_conversations(
        ctx,
        {
            "types": MEMBER_CHANNEL_TYPES,
            "exclude_archived": True,
            "limit": MEMBER_CHANNEL_LIMIT,
        },
    )
    return [ch for ch in body["channels"] if ch.get("is_member")]


def collect_mentions(ctx, identity: Identity, channels, record) -> dict[str, Any]:
    """Walk each channel's history in turn and keep messages mentioning ``identity``."""
    window = record.as_params()
    collected = []
    for channel in channels:
        history = conversation_history(ctx, {"channel": channel["id"], **window})
        for message in mentioning(history["messages"], identity.user_id):
            collected.append({**message, "channel": channel["id"]})
    return {"ok": True, "user_id": identity.user_id, "messages": collected}


def history_mentions(ctx, record):
    identity = resolve_identity(ctx, "bot")
    return collect_mentions(ctx, identity, member_channels(ctx), record)


# ---------------------------------------------------------------------------
# Operation table
# ---------------------------------------------------------------------------

_SEARCH_FLAGS = (
    "[--count N] [--highlight] [--page N] [--cursor C] "
    "[--sort score|timestamp] [--sort_dir asc|desc] [--team_id T]"
)

OPERATIONS = {
    op.tag: op
    for op in (
        Operation(
            "auth.test",
            lambda ctx, record: validate_response("auth.test", call(ctx, "auth.test", "bot")),
            synopsis="auth.test",
            summary="identity of the bot token",
            scopes=("bot",),
        ),
        Operation(
            "search.messages",
            lambda ctx, record: search_messages(ctx, record.as_params()),
            synopsis=f"search.messages --query <string> {_SEARCH_FLAGS}",
            summary="search messages (user token)",
            positionals=("query",),
            greedy=True,
            scopes=("user",),
        ),
        Operation(
            "conversations.list",
            lambda ctx, record: list_conversations(ctx, record.as_params()),
            synopsis="conversations.list [--limit N] [--types T] [--cursor C]",
            summary="list conversations",
            scopes=("bot",),
        ),
        Operation(
            "conversations.history",
            lambda ctx, record: conversation_history(ctx, record.as_params()),
            synopsis=(
                "conversations.history --channel <id> [--oldest TS] [--latest TS] "
                "[--limit N] [--cursor C] [--inclusive]"
            ),
            summary="message history of one conversation",
            positionals=("channel",),
            scopes=("bot",),
        ),
        Operation(
            "chat.postMessage",
            lambda ctx, record: post_message(ctx, record.as_params()),
            synopsis="chat.postMessage --channel <id> --text <msg> [--confirm]",
            summary="post a message (dry-run unless --confirm)",
            positionals=("channel", "text"),
            greedy=True,
            scopes=("bot",),
            mutating=True,
        ),
        Operation(
            "mentions-to-bot",
            mentions_to_bot,
            synopsis=f"mentions-to-bot [--query <string>] {_SEARCH_FLAGS}",
            summary="messages mentioning the bot (bot + user tokens)",
            scopes=("bot", "user"),
        ),
        Operation(
            "mentions-to-user",
            mentions_to_user,
            synopsis=f"mentions-to-user [--query <string>] {_SEARCH_FLAGS}",
            summary="messages mentioning the user token's owner",
            scopes=("user",),
        ),
        Operation(
            "history-mentions",
            history_mentions,
            synopsis="history-mentions [--oldest TS] [--latest TS] [--limit N] [--inclusive]",
            summary="bot mentions found by reading each member channel's history",
            scopes=("bot",),
        ),
    )
}

BACKEND = Backend(
    name="messaging",
    prog="messaging-cli",
    schema=MESSAGING_SCHEMA,
    operations=OPERATIONS,
    load_context=messaging_context,
    env_help=(
        "SLACK_BOT_TOKEN (xoxb-), SLACK_USER_TOKEN (xoxp-); SLACK_TOKEN is used for a "
        "scope only when its prefix matches. search.messages and mentions-to-user need "
        "the user token, mentions-to-bot needs both. "
        "SLACK_API_BASE_URL (optional, default: https://slack.com/api)"
    ),
    base_scopes=(),
    boolean_flags=frozenset(
        {"confirm", "highlight", "inclusive", "include_all_metadata", "exclude_archived"}
    ),
)
