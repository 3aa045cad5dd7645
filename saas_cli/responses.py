"""Response shapes for the messaging API, checked before any field is read."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from saas_cli.exceptions import ResponseShapeError


class _Shape(BaseModel):
    model_config = ConfigDict(extra="allow")


class ResponseMetadata(_Shape):
    next_cursor: str | None = None


# --- auth.test ---


class AuthTestResponse(_Shape):
    ok: Literal[True]
    user_id: str
    user: str | None = None
    team_id: str | None = None
    bot_id: str | None = None


# --- search.messages ---


class SearchMatchChannel(_Shape):
    id: str
    name: str | None = None
    is_private: bool | None = None


class SearchMatch(_Shape):
    channel: SearchMatchChannel
    iid: str | None = None
    permalink: str | None = None
    team: str | None = None
    text: str | None = None
    ts: str | None = None
    type: str | None = None
    user: str | None = None
    username: str | None = None


class SearchPaging(_Shape):
    count: int
    page: int
    pages: int
    total: int


class SearchMessagesBody(_Shape):
    matches: list[SearchMatch]
    paging: SearchPaging | None = None
    total: int | None = None


class SearchMessagesResponse(_Shape):
    ok: Literal[True]
    query: str | None = None
    messages: SearchMessagesBody


# --- conversations.list ---


class ConversationItem(_Shape):
    id: str
    name: str | None = None
    is_channel: bool | None = None
    is_private: bool | None = None
    is_archived: bool | None = None
    is_member: bool | None = None


class ConversationsListResponse(_Shape):
    ok: Literal[True]
    channels: list[ConversationItem]
    response_metadata: ResponseMetadata | None = None


# --- conversations.history ---


class HistoryMessage(_Shape):
    type: str
    ts: str
    user: str | None = None
    text: str | None = None


class ConversationsHistoryResponse(_Shape):
    ok: Literal[True]
    messages: list[HistoryMessage]
    has_more: bool | None = None
    response_metadata: ResponseMetadata | None = None


RESPONSE_SHAPES: dict[str, type[_Shape]] = {
    "auth.test": AuthTestResponse,
    "search.messages": SearchMessagesResponse,
    "conversations.list": ConversationsListResponse,
    "conversations.history": ConversationsHistoryResponse,
}

_adapters = {method: TypeAdapter(shape) for method, shape in RESPONSE_SHAPES.items()}


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def validate_response(method: str, body: Any) -> dict[str, Any]:
    """Check ``body`` against the shape registered for ``method``.

    Returns the body unchanged on success.
    """
    try:
        _adapters[method].validate_python(body)
    except PydanticValidationError as exc:
        raise ResponseShapeError(
            f"[ERROR] {method}: unexpected response shape: {_describe(exc)}"
        ) from None
    return body
