"""
Argument schemas: one frozen pydantic model per operation, joined per
backend into a union discriminated on ``kind``.

``validate_params`` is total. It returns a ValidationResult holding either
the typed record or every field-level failure, and never raises for bad
input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from saas_cli.exceptions import ValidationError

RequiredStr = Annotated[str, Field(min_length=1)]
SlackTs = Annotated[str, Field(pattern=r"^\d+(\.\d+)?$")]


class ParamsModel(BaseModel):
    """Base for every parameter record."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )

    kind: str

    def as_params(self) -> dict[str, Any]:
        """Wire fields: everything but ``kind``, unset optionals dropped."""
        return self.model_dump(exclude={"kind"}, exclude_none=True)


# ---------------------------------------------------------------------------
# wiki
# ---------------------------------------------------------------------------


class SpacesList(ParamsModel):
    kind: Literal["spaces.list"]
    limit: Annotated[int, Field(ge=1, le=500)] | None = None
    start: Annotated[int, Field(ge=0)] | None = None
    type: Literal["global", "personal"] | None = None


class PageGet(ParamsModel):
    kind: Literal["page.get"]
    id: RequiredStr
    expand: str = "body.storage,version"


class WikiSearch(ParamsModel):
    kind: Literal["search"]
    cql: RequiredStr
    limit: Annotated[int, Field(ge=1, le=100)] = 20
    start: Annotated[int, Field(ge=0)] | None = None
    expand: str | None = None


class UserCurrent(ParamsModel):
    kind: Literal["user.current"]


class PageCreate(ParamsModel):
    kind: Literal["page.create"]
    space: RequiredStr
    title: RequiredStr
    body: str = ""
    parent: str | None = None


WikiParams = Annotated[
    Union[SpacesList, PageGet, WikiSearch, UserCurrent, PageCreate],
    Field(discriminator="kind"),
]

# ---------------------------------------------------------------------------
# tracker
# ---------------------------------------------------------------------------


class ProjectsList(ParamsModel):
    kind: Literal["projects.list"]


class IssueGet(ParamsModel):
    kind: Literal["issue.get"]
    key: RequiredStr
    fields: str | None = None
    expand: str | None = None


class TrackerSearch(ParamsModel):
    kind: Literal["search"]
    jql: RequiredStr
    maxResults: Annotated[int, Field(ge=1, le=100)] = 50
    startAt: Annotated[int, Field(ge=0)] | None = None
    fields: str | None = None


class IssueCreate(ParamsModel):
    kind: Literal["issue.create"]
    project: RequiredStr
    summary: RequiredStr
    issuetype: RequiredStr = "Task"
    description: str | None = None


TrackerParams = Annotated[
    Union[ProjectsList, IssueGet, TrackerSearch, IssueCreate],
    Field(discriminator="kind"),
]

# ---------------------------------------------------------------------------
# messaging
# ---------------------------------------------------------------------------


class _SearchOptions(ParamsModel):
    """Paging and ordering shared by search.messages and the mention searches."""

    count: Annotated[int, Field(ge=1, le=100)] = 20
    highlight: bool = False
    page: Annotated[int, Field(ge=1)] | None = None
    cursor: str | None = None
    sort: Literal["score", "timestamp"] = "timestamp"
    sort_dir: Literal["asc", "desc"] = "desc"
    team_id: str | None = None


class AuthTest(ParamsModel):
    kind: Literal["auth.test"]


class SearchMessages(_SearchOptions):
    kind: Literal["search.messages"]
    query: RequiredStr


class MentionsToBot(_SearchOptions):
    kind: Literal["mentions-to-bot"]
    query: str | None = None


class MentionsToUser(_SearchOptions):
    kind: Literal["mentions-to-user"]
    query: str | None = None


class ConversationsList(ParamsModel):
    kind: Literal["conversations.list"]
    limit: Annotated[int, Field(ge=1, le=1000)] | None = None
    types: str | None = None
    cursor: str | None = None
    exclude_archived: bool | None = None


class ConversationsHistory(ParamsModel):
    kind: Literal["conversations.history"]
    channel: RequiredStr
    oldest: SlackTs | None = None
    latest: SlackTs | None = None
    limit: Annotated[int, Field(ge=1, le=1000)] | None = None
    cursor: str | None = None
    inclusive: bool | None = None
    include_all_metadata: bool | None = None


class ChatPostMessage(ParamsModel):
    kind: Literal["chat.postMessage"]
    channel: RequiredStr
    text: RequiredStr


class HistoryMentions(ParamsModel):
    kind: Literal["history-mentions"]
    oldest: SlackTs | None = None
    latest: SlackTs | None = None
    limit: Annotated[int, Field(ge=1, le=1000)] | None = None
    inclusive: bool | None = None


MessagingParams = Annotated[
    Union[
        AuthTest,
        SearchMessages,
        MentionsToBot,
        MentionsToUser,
        ConversationsList,
        ConversationsHistory,
        ChatPostMessage,
        HistoryMentions,
    ],
    Field(discriminator="kind"),
]

WIKI_SCHEMA: TypeAdapter = TypeAdapter(WikiParams)
TRACKER_SCHEMA: TypeAdapter = TypeAdapter(TrackerParams)
MESSAGING_SCHEMA: TypeAdapter = TypeAdapter(MessagingParams)


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldError:
    field: str
    reason: str

    def __str__(self) -> str:
        return f"{self.field}: {self.reason}"


@dataclass(frozen=True)
class ValidationResult:
    record: ParamsModel | None = None
    errors: tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.record is not None

    def unwrap(self, operation: str | None = None) -> ParamsModel:
        """Return the record, or raise ValidationError listing every failure."""
        if self.record is not None:
            return self.record
        target = f" for '{operation}'" if operation else ""
        details = "; ".join(str(e) for e in self.errors)
        raise ValidationError(f"[ERROR] Invalid arguments{target}: {details}", self.errors)


def _field_errors(exc: PydanticValidationError, kind: Any) -> tuple[FieldError, ...]:
    errors = []
    for err in exc.errors():
        loc = list(err["loc"])
        # Discriminated unions prefix locations with the tag value.
        if loc and loc[0] == kind:
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) or "kind"
        reason = "missing" if err["type"] == "missing" else err["msg"]
        errors.append(FieldError(field=field, reason=reason))
    return tuple(errors)


def validate_params(schema: TypeAdapter, raw: dict[str, Any]) -> ValidationResult:
    """Validate a loosely typed map against a backend schema."""
    try:
        return ValidationResult(record=schema.validate_python(raw))
    except PydanticValidationError as exc:
        return ValidationResult(errors=_field_errors(exc, raw.get("kind")))
