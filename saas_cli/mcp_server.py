"""MCP server exposing every wiki, tracker and messaging operation as a tool.

Tools run through the same dispatcher as the CLIs: credentials come from
the environment (or .env), arguments go through the argument schema, and
mutating tools only describe the planned action unless ``confirm=True``.

Run: saas-cli-mcp
Requires: pip install .[mcp]
"""

from __future__ import annotations

from typing import Any, Literal

from mcp.server.fastmcp import FastMCP

from saas_cli import config, dispatch, messaging, tracker, wiki
from saas_cli.exceptions import CliError

mcp = FastMCP(
    "saas-cli",
    instructions=(
        "Wiki (Confluence), issue tracker (Jira) and messaging (Slack) tools. "
        "Mutating tools (wiki_create_page, tracker_create_issue, "
        "messaging_post_message) return a dry-run plan unless confirm=True. "
        "Errors come back as {ok: false, type, error}."
    ),
)


def _contract_error(message: str, error_type: str = "error") -> dict:
    return {"ok": False, "type": error_type, "error": message}


def _call(backend, tag: str, confirm: bool = False, **fields: Any):
    """Run one operation, converting CliError into an error dict."""
    if tag not in backend.operations:
        return _contract_error(f"Unknown operation: {tag}", "unknown-command")
    flags = {key: value for key, value in fields.items() if value is not None}
    if confirm:
        flags["confirm"] = True
    try:
        return dispatch.run(backend, [tag], flags, config.env_snapshot())
    except CliError as e:
        return _contract_error(str(e), e.kind)


# ---------------------------------------------------------------------------
# wiki
# ---------------------------------------------------------------------------


def wiki_list_spaces(
    limit: int | None = None,
    start: int | None = None,
    type: Literal["global", "personal"] | None = None,
):
    """List wiki spaces."""
    return _call(wiki.BACKEND, "spaces.list", limit=limit, start=start, type=type)


def wiki_get_page(id: str, expand: str | None = None):
    """Get a wiki page by id (body.storage and version expanded by default)."""
    return _call(wiki.BACKEND, "page.get", id=id, expand=expand)


def wiki_search(cql: str, limit: int | None = None, start: int | None = None):
    """Search wiki content with CQL, e.g. ``type=page order by lastModified desc``."""
    return _call(wiki.BACKEND, "search", cql=cql, limit=limit, start=start)


def wiki_current_user():
    """Get the authenticated wiki user (accountId, email, displayName)."""
    return _call(wiki.BACKEND, "user.current")


def wiki_create_page(
    space: str,
    title: str,
    body: str | None = None,
    parent: str | None = None,
    confirm: bool = False,
):
    """Create a wiki page in ``space``. Dry-run unless confirm=True.

    Args:
        body: Page body in storage format (HTML).
        parent: Ancestor page id.
    """
    return _call(
        wiki.BACKEND,
        "page.create",
        confirm=confirm,
        space=space,
        title=title,
        body=body,
        parent=parent,
    )


# ---------------------------------------------------------------------------
# tracker
# ---------------------------------------------------------------------------


def tracker_list_projects():
    """List tracker projects."""
    return _call(tracker.BACKEND, "projects.list")


def tracker_get_issue(key: str, fields: str | None = None, expand: str | None = None):
    """Get an issue by key (e.g. PROJ-123)."""
    return _call(tracker.BACKEND, "issue.get", key=key, fields=fields, expand=expand)


def tracker_search(
    jql: str,
    max_results: int | None = None,
    start_at: int | None = None,
    fields: str | None = None,
):
    """Search issues with JQL (default 50 results)."""
    return _call(
        tracker.BACKEND,
        "search",
        jql=jql,
        maxResults=max_results,
        startAt=start_at,
        fields=fields,
    )


def tracker_create_issue(
    project: str,
    summary: str,
    issuetype: str | None = None,
    description: str | None = None,
    confirm: bool = False,
):
    """Create an issue (issuetype defaults to Task). Dry-run unless confirm=True."""
    return _call(
        tracker.BACKEND,
        "issue.create",
        confirm=confirm,
        project=project,
        summary=summary,
        issuetype=issuetype,
        description=description,
    )


# ---------------------------------------------------------------------------
# messaging
# ---------------------------------------------------------------------------

SortField = Literal["score", "timestamp"]
SortDir = Literal["asc", "desc"]


def messaging_search_messages(
    query: str,
    count: int | None = None,
    page: int | None = None,
    sort: SortField | None = None,
    sort_dir: SortDir | None = None,
):
    """Search messages (needs the user token). Supports in:#channel, from:<@U..>."""
    return _call(
        messaging.BACKEND,
        "search.messages",
        query=query,
        count=count,
        page=page,
        sort=sort,
        sort_dir=sort_dir,
    )


def messaging_list_conversations(
    limit: int | None = None, types: str | None = None, cursor: str | None = None
):
    """List conversations visible to the bot."""
    return _call(
        messaging.BACKEND, "conversations.list", limit=limit, types=types, cursor=cursor
    )


def messaging_history(
    channel: str,
    oldest: str | None = None,
    latest: str | None = None,
    limit: int | None = None,
    inclusive: bool | None = None,
):
    """Message history of one conversation, restricted to [oldest, latest]."""
    return _call(
        messaging.BACKEND,
        "conversations.history",
        channel=channel,
        oldest=oldest,
        latest=latest,
        limit=limit,
        inclusive=inclusive,
    )


def messaging_post_message(channel: str, text: str, confirm: bool = False):
    """Post a message as the bot. Dry-run unless confirm=True."""
    return _call(
        messaging.BACKEND, "chat.postMessage", confirm=confirm, channel=channel, text=text
    )


def messaging_mentions_to_bot(query: str | None = None, count: int | None = None):
    """Messages whose text mentions the bot (needs bot and user tokens)."""
    return _call(messaging.BACKEND, "mentions-to-bot", query=query, count=count)


def messaging_mentions_to_user(query: str | None = None, count: int | None = None):
    """Messages whose text mentions the user token's owner."""
    return _call(messaging.BACKEND, "mentions-to-user", query=query, count=count)


def messaging_history_mentions(
    oldest: str | None = None,
    latest: str | None = None,
    limit: int | None = None,
):
    """Bot mentions collected from the history of every channel the bot is in."""
    return _call(
        messaging.BACKEND, "history-mentions", oldest=oldest, latest=latest, limit=limit
    )


for _tool in (
    wiki_list_spaces,
    wiki_get_page,
    wiki_search,
    wiki_current_user,
    wiki_create_page,
    tracker_list_projects,
    tracker_get_issue,
    tracker_search,
    tracker_create_issue,
    messaging_search_messages,
    messaging_list_conversations,
    messaging_history,
    messaging_post_message,
    messaging_mentions_to_bot,
    messaging_mentions_to_user,
    messaging_history_mentions,
):
    mcp.tool()(_tool)


def main():
    """Run the MCP server (stdio transport)."""
    mcp.run()
