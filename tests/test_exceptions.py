"""Tests for the exception hierarchy."""

import pytest

from saas_cli.exceptions import (
    ApiError,
    CliError,
    ConfigError,
    HTTPError,
    HTTPStatusError,
    ResponseShapeError,
    TransportError,
    UnknownCommandError,
    ValidationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls,kind",
        [
            (ConfigError, "configuration"),
            (ValidationError, "validation"),
            (UnknownCommandError, "unknown-command"),
            (TransportError, "transport"),
            (ApiError, "api"),
            (ResponseShapeError, "response-shape"),
        ],
    )
    def test_subclasses_share_exit_code(self, cls, kind):
        err = cls("boom")
        assert isinstance(err, CliError)
        assert err.exit_code == 1
        assert err.kind == kind
        assert str(err) == "boom"

    def test_http_status_error_keeps_status(self):
        err = HTTPStatusError("[ERROR] Jira API 403: no access", 403)
        assert err.status == 403
        assert err.kind == "http"
        assert isinstance(err, CliError)

    def test_validation_error_keeps_field_errors(self):
        err = ValidationError("bad", field_errors=("a", "b"))
        assert err.field_errors == ["a", "b"]

    def test_raw_http_error_is_not_cli_error(self):
        err = HTTPError(500, "Server Error", "oops")
        assert not isinstance(err, CliError)
        assert err.code == 500
        assert err.body == "oops"
        assert err.headers == {}
