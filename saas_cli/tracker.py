"""Issue-tracker backend (Jira REST API v3, HTTP Basic auth)."""

import urllib.parse

from saas_cli import api
from saas_cli.config import tracker_context
from saas_cli.models import Backend, Operation
from saas_cli.schemas import TRACKER_SCHEMA

LABEL = "Jira"
API_PREFIX = "/rest/api/3"


def _get(ctx, path, params=None):
    return api.request(ctx, API_PREFIX + path, params=params, label=LABEL)


def list_projects(ctx, record):
    return _get(ctx, "/project")


def get_issue(ctx, record):
    params = record.as_params()
    key = urllib.parse.quote(params.pop("key"), safe="")
    return _get(ctx, f"/issue/{key}", params)


def search(ctx, record):
    return _get(ctx, "/search", record.as_params())


def issue_body(record):
    fields = {
        "project": {"key": record.project},
        "summary": record.summary,
        "issuetype": {"name": record.issuetype},
    }
    if record.description:
        fields["description"] = _adf_paragraph(record.description)
    return {"fields": fields}


def create_issue(ctx, record):
    return api.request(
        ctx, API_PREFIX + "/issue", method="POST", params=issue_body(record), label=LABEL
    )


def _adf_paragraph(text):
    """Wrap plain text in the document format v3 requires for rich-text fields."""
    return {
        "type": "doc",
        "version": 1,
        "content": [{"type": "paragraph", "content": [{"type": "text", "text": text}]}],
    }


OPERATIONS = {
    op.tag: op
    for op in (
        Operation(
            "projects.list",
            list_projects,
            synopsis="projects list",
            summary="list projects",
        ),
        Operation(
            "issue.get",
            get_issue,
            synopsis="issue get <key> [--fields F] [--expand E]",
            summary="get issue by key (e.g. PROJ-123)",
            positionals=("key",),
        ),
        Operation(
            "search",
            search,
            synopsis='search --jql "<jql>" [--maxResults N] [--startAt N]',
            summary="JQL search",
            positionals=("jql",),
            greedy=True,
        ),
        Operation(
            "issue.create",
            create_issue,
            synopsis="issue create --project KEY --summary S [--issuetype T] [--confirm]",
            summary="create an issue (dry-run unless --confirm)",
            mutating=True,
            request_body=issue_body,
        ),
    )
}

BACKEND = Backend(
    name="tracker",
    prog="tracker-cli",
    schema=TRACKER_SCHEMA,
    operations=OPERATIONS,
    load_context=tracker_context,
    env_help="JIRA_BASE_URL, JIRA_USER, JIRA_TOKEN (all required)",
)
