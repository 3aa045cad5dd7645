"""Wiki/content backend (Confluence REST API, HTTP Basic auth)."""

import urllib.parse

from saas_cli import api
from saas_cli.config import wiki_context
from saas_cli.models import Backend, Operation
from saas_cli.schemas import WIKI_SCHEMA

LABEL = "Confluence"


def _get(ctx, path, params=None):
    return api.request(ctx, path, params=params, label=LABEL)


def list_spaces(ctx, record):
    return _get(ctx, "/rest/api/space", record.as_params())


def get_page(ctx, record):
    params = record.as_params()
    page_id = urllib.parse.quote(params.pop("id"), safe="")
    return _get(ctx, f"/rest/api/content/{page_id}", params)


def search(ctx, record):
    return _get(ctx, "/rest/api/content/search", record.as_params())


def current_user(ctx, record):
    return _get(ctx, "/rest/api/user/current")


def page_body(record):
    body = {
        "type": "page",
        "title": record.title,
        "space": {"key": record.space},
        "body": {"storage": {"value": record.body, "representation": "storage"}},
    }
    if record.parent:
        body["ancestors"] = [{"id": record.parent}]
    return body


def create_page(ctx, record):
    return api.request(
        ctx, "/rest/api/content", method="POST", params=page_body(record), label=LABEL
    )


OPERATIONS = {
    op.tag: op
    for op in (
        Operation(
            "spaces.list",
            list_spaces,
            synopsis="spaces list [--limit N] [--start N] [--type global|personal]",
            summary="list spaces",
        ),
        Operation(
            "page.get",
            get_page,
            synopsis="page get <id> [--expand E]",
            summary="get page by id",
            positionals=("id",),
        ),
        Operation(
            "search",
            search,
            synopsis='search --cql "<cql>" [--limit N] [--start N]',
            summary="CQL search",
            positionals=("cql",),
            greedy=True,
        ),
        Operation(
            "user.current",
            current_user,
            synopsis="user current",
            summary="get current user (accountId, email, displayName)",
        ),
        Operation(
            "page.create",
            create_page,
            synopsis="page create --space KEY --title T [--body HTML] [--parent ID] [--confirm]",
            summary="create a page (dry-run unless --confirm)",
            mutating=True,
            request_body=page_body,
        ),
    )
}

BACKEND = Backend(
    name="wiki",
    prog="wiki-cli",
    schema=WIKI_SCHEMA,
    operations=OPERATIONS,
    load_context=wiki_context,
    env_help="CONFLUENCE_BASE_URL, CONFLUENCE_USER, CONFLUENCE_TOKEN (all required)",
)
