"""
saas-cli shared configuration, constants, and connection contexts.
Standalone module; imports only the exception hierarchy.
"""

import base64
import os
from dataclasses import dataclass, field
from types import MappingProxyType

from saas_cli.exceptions import ConfigError

# ---------------------------------------------------------------------------
# .env path and helpers
# ---------------------------------------------------------------------------

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_PACKAGE_DIR)

ENV_PATH = os.path.join(_PROJECT_ROOT, ".env")


def load_env():
    env = {}
    if os.path.exists(ENV_PATH):
        with open(ENV_PATH) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, val = line.split("=", 1)
                    env[key.strip()] = val.strip()
    return env


def env_snapshot(environ=None):
    """Return .env values overlaid with the process environment.

    The snapshot is a plain dict and is the only input the context
    builders below read from.
    """
    snapshot = load_env()
    snapshot.update(os.environ if environ is None else environ)
    return snapshot


def _env_bool(env, key, default=False):
    """Parse common boolean env formats."""
    raw = env.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(env, key, default):
    """Parse integer env values with fallback."""
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "0.1.0"

WIKI_ENV = ("CONFLUENCE_BASE_URL", "CONFLUENCE_USER", "CONFLUENCE_TOKEN")
TRACKER_ENV = ("JIRA_BASE_URL", "JIRA_USER", "JIRA_TOKEN")

SLACK_BASE_URL_ENV = "SLACK_API_BASE_URL"
SLACK_DEFAULT_BASE_URL = "https://slack.com/api"
SLACK_GENERIC_TOKEN_ENV = "SLACK_TOKEN"

# scope -> (variable, required token prefix)
SLACK_SCOPES = {
    "user": ("SLACK_USER_TOKEN", "xoxp-"),
    "bot": ("SLACK_BOT_TOKEN", "xoxb-"),
}

# ---------------------------------------------------------------------------
# Module-level HTTP settings (loaded once from the startup snapshot)
# ---------------------------------------------------------------------------

_startup_env = env_snapshot()

HTTP_TIMEOUT_SECONDS = _env_int(_startup_env, "SAAS_CLI_HTTP_TIMEOUT_SECONDS", 30)
HTTP_MAX_RESPONSE_BYTES = _env_int(_startup_env, "SAAS_CLI_HTTP_MAX_RESPONSE_BYTES", 5_000_000)
HTTP_LOG_ENABLED = _env_bool(_startup_env, "SAAS_CLI_HTTP_LOG", False)

# ---------------------------------------------------------------------------
# Connection contexts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConnectionContext:
    """Base URL plus one Authorization header value per credential scope."""

    base_url: str
    credentials: MappingProxyType = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "credentials", MappingProxyType(dict(self.credentials)))

    def auth_header(self, scope):
        try:
            return self.credentials[scope]
        except KeyError:
            raise ConfigError(f"[SETUP_NEEDED] No '{scope}' credential configured.") from None


def _missing(env, names):
    return [name for name in names if not (env.get(name) or "").strip()]


def _base_url(var, url):
    url = url.strip().rstrip("/")
    if not url.lower().startswith(("http://", "https://")):
        raise ConfigError(
            f"[SETUP_NEEDED] {var} must start with http:// or https:// (got {url!r})"
        )
    return url


def basic_auth(user, secret):
    encoded = base64.b64encode(f"{user}:{secret}".encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


def _basic_context(env, names):
    base_var, user_var, token_var = names
    missing = _missing(env, names)
    if missing:
        raise ConfigError(
            f"[SETUP_NEEDED] {', '.join(names)} must be set (missing: {', '.join(missing)})"
        )
    return ConnectionContext(
        base_url=_base_url(base_var, env[base_var]),
        credentials={"basic": basic_auth(env[user_var].strip(), env[token_var].strip())},
    )


def wiki_context(env, scopes=("basic",)):
    return _basic_context(env, WIKI_ENV)


def tracker_context(env, scopes=("basic",)):
    return _basic_context(env, TRACKER_ENV)


def slack_token(env, scope):
    """Resolve the token for one scope, or None when it is not configured.

    The scoped variable wins; SLACK_TOKEN is used only when it carries
    the scope's prefix. A scoped variable with the wrong prefix is an error.
    """
    var, prefix = SLACK_SCOPES[scope]
    token = (env.get(var) or "").strip()
    if token:
        if not token.startswith(prefix):
            raise ConfigError(f"[SETUP_NEEDED] {var} must be a {scope} token ({prefix}...)")
        return token
    generic = (env.get(SLACK_GENERIC_TOKEN_ENV) or "").strip()
    if generic.startswith(prefix):
        return generic
    return None


def messaging_context(env, scopes=()):
    """Build the messaging context holding exactly the requested scopes."""
    credentials = {}
    missing = []
    for scope in scopes:
        token = slack_token(env, scope)
        if token is None:
            missing.append(SLACK_SCOPES[scope][0])
        else:
            credentials[scope] = f"Bearer {token}"
    if missing:
        raise ConfigError(
            f"[SETUP_NEEDED] {', '.join(missing)} must be set "
            f"(or {SLACK_GENERIC_TOKEN_ENV} with the matching prefix)"
        )
    base_url = (env.get(SLACK_BASE_URL_ENV) or "").strip() or SLACK_DEFAULT_BASE_URL
    return ConnectionContext(
        base_url=_base_url(SLACK_BASE_URL_ENV, base_url), credentials=credentials
    )
