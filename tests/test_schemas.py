"""Tests for the argument schemas and validate_params."""

import pytest

from saas_cli.exceptions import ValidationError
from saas_cli.schemas import (
    MESSAGING_SCHEMA,
    TRACKER_SCHEMA,
    WIKI_SCHEMA,
    ChatPostMessage,
    FieldError,
    IssueGet,
    TrackerSearch,
    validate_params,
)


def _fields(result):
    return {e.field for e in result.errors}


class TestRequiredFields:
    def test_missing_key(self):
        result = validate_params(TRACKER_SCHEMA, {"kind": "issue.get"})
        assert not result.ok
        assert result.errors == (FieldError("key", "missing"),)

    def test_every_failure_reported_together(self):
        result = validate_params(TRACKER_SCHEMA, {"kind": "issue.create"})
        assert _fields(result) == {"project", "summary"}

    def test_empty_cql_names_field(self):
        result = validate_params(WIKI_SCHEMA, {"kind": "search", "cql": ""})
        assert _fields(result) == {"cql"}

    def test_whitespace_only_is_empty(self):
        result = validate_params(TRACKER_SCHEMA, {"kind": "issue.get", "key": "   "})
        assert _fields(result) == {"key"}

    def test_unknown_kind(self):
        result = validate_params(TRACKER_SCHEMA, {"kind": "nope"})
        assert not result.ok
        assert result.errors


class TestCoercion:
    def test_numeric_strings(self):
        result = validate_params(
            TRACKER_SCHEMA, {"kind": "search", "jql": "project = X", "maxResults": "25"}
        )
        assert isinstance(result.record, TrackerSearch)
        assert result.record.maxResults == 25

    def test_non_numeric_string(self):
        result = validate_params(
            TRACKER_SCHEMA, {"kind": "search", "jql": "x", "maxResults": "many"}
        )
        assert _fields(result) == {"maxResults"}

    def test_out_of_range(self):
        result = validate_params(TRACKER_SCHEMA, {"kind": "search", "jql": "x", "maxResults": 0})
        assert _fields(result) == {"maxResults"}

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("no", False)])
    def test_boolean_strings(self, raw, expected):
        result = validate_params(
            MESSAGING_SCHEMA, {"kind": "search.messages", "query": "x", "highlight": raw}
        )
        assert result.record.highlight is expected

    def test_strings_are_trimmed(self):
        result = validate_params(TRACKER_SCHEMA, {"kind": "issue.get", "key": " PROJ-1 "})
        assert result.record.key == "PROJ-1"

    def test_numbers_accepted_for_ids(self):
        result = validate_params(WIKI_SCHEMA, {"kind": "page.get", "id": 12345})
        assert result.record.id == "12345"

    def test_timestamp_pattern(self):
        ok = validate_params(
            MESSAGING_SCHEMA,
            {"kind": "conversations.history", "channel": "C1", "oldest": "1700000000.000100"},
        )
        bad = validate_params(
            MESSAGING_SCHEMA,
            {"kind": "conversations.history", "channel": "C1", "oldest": "yesterday"},
        )
        assert ok.ok
        assert _fields(bad) == {"oldest"}


class TestDefaultsAndEnums:
    def test_search_defaults(self):
        record = validate_params(
            MESSAGING_SCHEMA, {"kind": "search.messages", "query": "deploy"}
        ).record
        assert record.as_params() == {
            "query": "deploy",
            "count": 20,
            "highlight": False,
            "sort": "timestamp",
            "sort_dir": "desc",
        }

    def test_enum_rejects_other_values(self):
        result = validate_params(
            MESSAGING_SCHEMA, {"kind": "search.messages", "query": "x", "sort": "relevance"}
        )
        assert _fields(result) == {"sort"}

    def test_tracker_search_defaults_to_fifty(self):
        record = validate_params(TRACKER_SCHEMA, {"kind": "search", "jql": "x"}).record
        assert record.maxResults == 50

    def test_wiki_page_expand_default(self):
        record = validate_params(WIKI_SCHEMA, {"kind": "page.get", "id": "1"}).record
        assert record.expand == "body.storage,version"

    def test_issue_type_default(self):
        record = validate_params(
            TRACKER_SCHEMA, {"kind": "issue.create", "project": "P", "summary": "S"}
        ).record
        assert record.issuetype == "Task"

    def test_unset_optionals_are_not_wire_fields(self):
        record = validate_params(TRACKER_SCHEMA, {"kind": "issue.get", "key": "P-1"}).record
        assert record.as_params() == {"key": "P-1"}


class TestRecords:
    def test_unknown_fields_ignored(self):
        result = validate_params(
            MESSAGING_SCHEMA,
            {"kind": "chat.postMessage", "channel": "C1", "text": "hi", "verbose": True},
        )
        assert isinstance(result.record, ChatPostMessage)
        assert not hasattr(result.record, "verbose")

    def test_idempotent(self):
        first = validate_params(
            TRACKER_SCHEMA, {"kind": "search", "jql": " project = X ", "startAt": "10"}
        ).record
        second = validate_params(TRACKER_SCHEMA, first.model_dump()).record
        assert second == first

    def test_records_are_frozen(self):
        record = IssueGet(kind="issue.get", key="P-1")
        with pytest.raises(Exception):
            record.key = "P-2"


class TestUnwrap:
    def test_returns_record(self):
        result = validate_params(TRACKER_SCHEMA, {"kind": "issue.get", "key": "P-1"})
        assert result.unwrap("issue.get").key == "P-1"

    def test_raises_with_every_field(self):
        result = validate_params(TRACKER_SCHEMA, {"kind": "issue.create"})
        with pytest.raises(ValidationError) as exc_info:
            result.unwrap("issue.create")
        msg = str(exc_info.value)
        assert msg.startswith("[ERROR] Invalid arguments for 'issue.create': ")
        assert "project: missing" in msg
        assert "summary: missing" in msg
        assert len(exc_info.value.field_errors) == 2
