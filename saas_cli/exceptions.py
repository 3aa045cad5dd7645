"""
saas-cli exception hierarchy.

All custom exceptions live here to avoid circular imports.
Every CliError carries a ``kind`` naming where the failure came from.
"""


class CliError(Exception):
    """Exit code 1. Any failure that ends the invocation."""

    exit_code = 1
    kind = "error"


class ConfigError(CliError):
    """Required environment input is missing or malformed."""

    kind = "configuration"


class ValidationError(CliError):
    """Arguments rejected by the argument schema."""

    kind = "validation"

    def __init__(self, message, field_errors=()):
        super().__init__(message)
        self.field_errors = list(field_errors)


class UnknownCommandError(CliError):
    kind = "unknown-command"


class TransportError(CliError):
    """Network failure, timeout, or an undecodable response body."""

    kind = "transport"


class HTTPStatusError(CliError):
    """Non-2xx response from the remote API."""

    kind = "http"

    def __init__(self, message, status):
        super().__init__(message)
        self.status = status


class ApiError(CliError):
    """2xx response whose body reports a logical failure."""

    kind = "api"


class ResponseShapeError(CliError):
    kind = "response-shape"


class HTTPError(Exception):
    """Raised by _http_request for HTTP errors that callers want to handle."""

    def __init__(self, code, reason, body, headers=None):
        self.code = code
        self.reason = reason
        self.body = body
        self.headers = headers or {}
