"""saas-cli: command-line clients for wiki, issue-tracker and messaging REST APIs."""

from saas_cli.config import VERSION, ConnectionContext
from saas_cli.exceptions import (
    ApiError,
    CliError,
    ConfigError,
    HTTPStatusError,
    ResponseShapeError,
    TransportError,
    UnknownCommandError,
    ValidationError,
)

__all__ = [
    "VERSION",
    "ApiError",
    "CliError",
    "ConfigError",
    "ConnectionContext",
    "HTTPStatusError",
    "ResponseShapeError",
    "TransportError",
    "UnknownCommandError",
    "ValidationError",
]
