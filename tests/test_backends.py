"""Tests for the wiki and tracker operations (paths, params and bodies)."""

from unittest.mock import patch

import pytest
from conftest import TRACKER_ENV, WIKI_ENV

from saas_cli import tracker, wiki
from saas_cli.dispatch import run


@pytest.fixture
def mock_http():
    with patch("saas_cli.api._http_request") as mock:
        mock.return_value = {}
        yield mock


def _sent(mock):
    url, data, headers, method = mock.call_args.args
    return url, data, method


class TestWiki:
    def test_list_spaces(self, mock_http):
        run(wiki.BACKEND, ["spaces", "list"], {"limit": "10", "type": "global"}, WIKI_ENV)
        url, data, method = _sent(mock_http)
        assert url == "https://wiki.example.com/rest/api/space?limit=10&type=global"
        assert data is None
        assert method == "GET"

    def test_get_page_default_expand(self, mock_http):
        run(wiki.BACKEND, ["page", "get", "123"], {}, WIKI_ENV)
        url, _, _ = _sent(mock_http)
        assert url == "https://wiki.example.com/rest/api/content/123?expand=body.storage%2Cversion"

    def test_search(self, mock_http):
        run(wiki.BACKEND, ["search"], {"cql": "type=page"}, WIKI_ENV)
        url, _, _ = _sent(mock_http)
        assert url == "https://wiki.example.com/rest/api/content/search?cql=type%3Dpage&limit=20"

    def test_current_user(self, mock_http):
        mock_http.return_value = {"accountId": "a1", "displayName": "Me"}
        result = run(wiki.BACKEND, ["user", "current"], {}, WIKI_ENV)
        assert result == {"accountId": "a1", "displayName": "Me"}
        assert _sent(mock_http)[0] == "https://wiki.example.com/rest/api/user/current"

    def test_create_page_dry_run(self, mock_http):
        result = run(wiki.BACKEND, ["page", "create"], {"space": "ENG", "title": "Notes"}, WIKI_ENV)
        assert result["_dryRun"] is True
        assert result["action"] == "page.create"
        assert result["space"] == {"key": "ENG"}
        assert result["body"] == {"storage": {"value": "", "representation": "storage"}}
        assert "ancestors" not in result
        mock_http.assert_not_called()

    def test_create_page_plan_matches_sent_body(self, mock_http):
        flags = {"space": "ENG", "title": "Notes", "body": "<p>x</p>", "parent": "9"}
        plan = run(wiki.BACKEND, ["page", "create"], flags, WIKI_ENV)
        run(wiki.BACKEND, ["page", "create"], {**flags, "confirm": True}, WIKI_ENV)
        _, data, _ = _sent(mock_http)
        planned = {k: v for k, v in plan.items() if not k.startswith("_") and k != "action"}
        assert planned == data

    def test_create_page_confirmed(self, mock_http):
        run(
            wiki.BACKEND,
            ["page", "create"],
            {"space": "ENG", "title": "Notes", "body": "<p>x</p>", "parent": "9", "confirm": True},
            WIKI_ENV,
        )
        url, data, method = _sent(mock_http)
        assert url == "https://wiki.example.com/rest/api/content"
        assert method == "POST"
        assert data == {
            "type": "page",
            "title": "Notes",
            "space": {"key": "ENG"},
            "body": {"storage": {"value": "<p>x</p>", "representation": "storage"}},
            "ancestors": [{"id": "9"}],
        }


class TestTracker:
    def test_get_issue(self, mock_http):
        run(tracker.BACKEND, ["issue", "get", "PROJ-123"], {"fields": "summary"}, TRACKER_ENV)
        url, _, _ = _sent(mock_http)
        assert url == "https://jira.example.com/rest/api/3/issue/PROJ-123?fields=summary"

    def test_search_positional_jql(self, mock_http):
        run(tracker.BACKEND, ["search", "project", "=", "X"], {}, TRACKER_ENV)
        url, _, _ = _sent(mock_http)
        assert url == (
            "https://jira.example.com/rest/api/3/search?jql=project+%3D+X&maxResults=50"
        )

    def test_create_issue_confirmed(self, mock_http):
        run(
            tracker.BACKEND,
            ["issue", "create"],
            {"project": "P", "summary": "Broken", "description": "steps", "confirm": True},
            TRACKER_ENV,
        )
        url, data, method = _sent(mock_http)
        assert url == "https://jira.example.com/rest/api/3/issue"
        assert method == "POST"
        fields = data["fields"]
        assert fields["project"] == {"key": "P"}
        assert fields["issuetype"] == {"name": "Task"}
        assert fields["description"]["type"] == "doc"
        assert fields["description"]["content"][0]["content"][0]["text"] == "steps"

    def test_create_issue_dry_run(self, mock_http):
        result = run(
            tracker.BACKEND, ["issue", "create"], {"project": "P", "summary": "S"}, TRACKER_ENV
        )
        assert result == {
            "_dryRun": True,
            "_message": "Add --confirm to execute. Planned action:",
            "action": "issue.create",
            "fields": {
                "project": {"key": "P"},
                "summary": "S",
                "issuetype": {"name": "Task"},
            },
        }
        mock_http.assert_not_called()

    def test_create_issue_plan_matches_sent_body(self, mock_http):
        flags = {"project": "P", "summary": "S", "description": "steps"}
        plan = run(tracker.BACKEND, ["issue", "create"], flags, TRACKER_ENV)
        run(tracker.BACKEND, ["issue", "create"], {**flags, "confirm": True}, TRACKER_ENV)
        _, data, _ = _sent(mock_http)
        assert plan["fields"] == data["fields"]
        assert plan["fields"]["description"]["type"] == "doc"
