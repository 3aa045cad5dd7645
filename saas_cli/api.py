"""
HTTP request layer: query/body building, error extraction, and the
authenticated request helper shared by every backend.
"""

import http.client
import json
import re
import sys
import time
import urllib.error
import urllib.parse
import urllib.request
import uuid

from saas_cli import config
from saas_cli.exceptions import (
    ApiError,
    HTTPError,
    HTTPStatusError,
    ResponseShapeError,
    TransportError,
)

# ---------------------------------------------------------------------------
# Security helpers
# ---------------------------------------------------------------------------

_SECRET_QUERY_KEYS = {"token", "accesskey", "password"}


def _sanitize_error(body, max_len=500):
    """Truncate and clean error body for safe display."""
    if not body:
        return ""
    cleaned = re.sub(r"<[^>]+>", "", body)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if len(cleaned) > max_len:
        return cleaned[:max_len] + "... [truncated]"
    return cleaned


def _sanitize_url_for_log(url):
    """Mask sensitive query params in URLs before logging."""
    parsed = urllib.parse.urlsplit(url)
    if not parsed.query:
        return url
    pairs = urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
    masked = []
    for key, value in pairs:
        if key.lower() in _SECRET_QUERY_KEYS:
            masked.append((key, "***"))
        else:
            masked.append((key, value))
    safe_query = urllib.parse.urlencode(masked, doseq=True)
    return urllib.parse.urlunsplit(
        (parsed.scheme, parsed.netloc, parsed.path, safe_query, parsed.fragment)
    )


def _log_http_event(**fields):
    """Emit structured HTTP logs to stderr when enabled."""
    if not config.HTTP_LOG_ENABLED:
        return
    print("[HTTP] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------


def _stringify(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_query(params):
    """Serialize params to a query string, omitting None values entirely."""
    pairs = [(key, _stringify(value)) for key, value in params.items() if value is not None]
    if not pairs:
        return ""
    return "?" + urllib.parse.urlencode(pairs)


def build_body(params):
    return {key: value for key, value in params.items() if value is not None}


def extract_error_reason(body, fallback=""):
    """Pick the most specific failure reason available in a response body.

    Structured error lists win (tracker ``errorMessages``/``errors``),
    then single ``message``/``error`` fields, then the raw text.
    """
    try:
        parsed = json.loads(body) if body else None
    except (json.JSONDecodeError, TypeError):
        parsed = None
    if isinstance(parsed, dict):
        parts = [str(m) for m in parsed.get("errorMessages") or [] if m]
        errors = parsed.get("errors")
        if isinstance(errors, dict):
            parts.extend(f"{key}: {value}" for key, value in errors.items())
        if parts:
            return "; ".join(parts)
        for key in ("message", "error", "errorMessage"):
            value = parsed.get(key)
            if isinstance(value, str) and value:
                return value
    return _sanitize_error(body) or fallback


# ---------------------------------------------------------------------------
# HTTP request layer
# ---------------------------------------------------------------------------


def _http_request(url, data=None, headers=None, method="GET"):
    """Make one HTTP request and return the parsed JSON body.
    Raises HTTPError for non-2xx responses (caller builds the message).
    Raises TransportError on network/timeout/parse errors."""
    body = json.dumps(data).encode("utf-8") if data else None
    request_id = (headers or {}).get("X-Request-Id")
    safe_url = _sanitize_url_for_log(url)
    timeout = max(1, config.HTTP_TIMEOUT_SECONDS)
    start = time.perf_counter()
    req = urllib.request.Request(url, data=body, headers=headers or {}, method=method)
    _log_http_event(
        phase="request",
        method=method,
        url=safe_url,
        request_id=request_id,
        timeout_seconds=timeout,
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            content_type = resp.headers.get("Content-Type", "")
            raw = resp.read(config.HTTP_MAX_RESPONSE_BYTES + 1)
            if len(raw) > config.HTTP_MAX_RESPONSE_BYTES:
                raise TransportError(
                    f"[ERROR] Response too large (>{config.HTTP_MAX_RESPONSE_BYTES} bytes)."
                )
            _log_http_event(
                phase="response",
                method=method,
                url=safe_url,
                status=getattr(resp, "status", 200),
                content_type=content_type,
                bytes=len(raw),
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
                request_id=request_id,
            )
            try:
                return json.loads(raw.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError):
                if content_type and "json" not in content_type.lower():
                    raise TransportError(
                        f"[ERROR] Unexpected Content-Type from server "
                        f"({content_type}). This may be a proxy or "
                        "network issue."
                    ) from None
                raise TransportError("[ERROR] Unexpected response (not valid JSON).") from None
    except urllib.error.HTTPError as e:
        try:
            error_body = (
                e.read(config.HTTP_MAX_RESPONSE_BYTES).decode("utf-8", errors="replace")
                if e.fp
                else ""
            )
        except (http.client.HTTPException, OSError):
            error_body = ""
        _log_http_event(
            phase="response",
            method=method,
            url=safe_url,
            status=e.code,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            request_id=request_id,
        )
        raise HTTPError(e.code, e.reason, error_body, headers=e.headers) from e
    except TimeoutError as e:
        _log_http_event(
            phase="network_error", method=method, url=safe_url, error="timeout",
            request_id=request_id,
        )
        raise TransportError(f"[ERROR] Request timed out after {timeout} seconds.") from e
    except urllib.error.URLError as e:
        _log_http_event(
            phase="network_error", method=method, url=safe_url,
            error=f"url_error: {e.reason}", request_id=request_id,
        )
        raise TransportError(f"[ERROR] Connection failed: {e.reason}") from e
    except (http.client.HTTPException, OSError) as e:
        _log_http_event(
            phase="network_error", method=method, url=safe_url,
            error=f"{type(e).__name__}: {e}", request_id=request_id,
        )
        raise TransportError(f"[ERROR] Connection failed: {type(e).__name__}: {e}") from e


def request(ctx, path, *, method="GET", params=None, scope="basic", label="API", ok_flag=False):
    """Make an authenticated call against ``ctx`` and return the decoded body.

    GET serializes ``params`` into the query string; any other method
    sends them as a JSON body. With ``ok_flag`` a body carrying
    ``"ok": false`` is treated as a failure even on a 2xx status.
    """
    params = params or {}
    url = ctx.base_url + path
    data = None
    if method == "GET":
        url += build_query(params)
    else:
        data = build_body(params)
    headers = {
        "Authorization": ctx.auth_header(scope),
        "Accept": "application/json",
        "Content-Type": "application/json; charset=utf-8",
        "X-Request-Id": str(uuid.uuid4()),
    }
    try:
        result = _http_request(url, data, headers, method)
    except HTTPError as e:
        reason = extract_error_reason(e.body, fallback=str(e.reason or ""))
        raise HTTPStatusError(f"[ERROR] {label} API {e.code}: {reason}", e.code) from e
    if ok_flag:
        if not isinstance(result, dict):
            raise ResponseShapeError(
                f"[ERROR] Unexpected {label} response: expected JSON object, "
                f"got {type(result).__name__}."
            )
        if result.get("ok") is False:
            error = result.get("error")
            raise ApiError(error if isinstance(error, str) and error else "request failed")
    return result
