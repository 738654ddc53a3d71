"""Pydantic models for the context records persisted on disk."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter
from pydantic.alias_generators import to_camel

CONTEXT_KINDS: tuple[str, ...] = ("project", "conversation")


def now_iso() -> str:
    """Current UTC instant as an ISO-8601 string with millisecond precision."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp, returning None if it is not ISO-8601."""
    if not isinstance(value, str) or not value:
        return None
    raw = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class BaseContext(BaseModel):
    """Fields shared by every stored context."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str
    content: str
    timestamp: str = Field(default_factory=now_iso)
    tags: Optional[list[str]] = None
    metadata: Optional[dict[str, Any]] = None

    @property
    def project_scope(self) -> Optional[str]:
        """Project id the record is stored under, or None for conversations."""
        return None

    @property
    def scope_key(self) -> tuple[str, Optional[str]]:
        return (self.id, self.project_scope)

    def has_tag(self, tag: str) -> bool:
        return tag in (self.tags or [])

    def to_record(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProjectContext(BaseContext):
    """A context stored under ``projects/<projectId>/``."""

    kind: Literal["project"] = "project"
    project_id: str
    parent_context_id: Optional[str] = None
    references: Optional[list[str]] = None

    @property
    def project_scope(self) -> Optional[str]:
        return self.project_id


class ConversationContext(BaseContext):
    """A context stored in the flat conversation partition."""

    kind: Literal["conversation"] = "conversation"
    session_id: str
    continuation_of: Optional[str] = None


def context_kind(value: Any) -> Optional[str]:
    """Discriminate a raw record or model into "project" or "conversation".

    Records written without a ``kind`` field are classified by the presence
    of a project id.
    """
    if isinstance(value, BaseContext):
        return getattr(value, "kind", None)
    if isinstance(value, dict):
        kind = value.get("kind")
        if kind in CONTEXT_KINDS:
            return kind
        if "projectId" in value or "project_id" in value:
            return "project"
        return "conversation"
    return None


Context = Annotated[
    Union[
        Annotated[ProjectContext, Tag("project")],
        Annotated[ConversationContext, Tag("conversation")],
    ],
    Discriminator(context_kind),
]

_context_adapter: TypeAdapter[Context] = TypeAdapter(Context)


def parse_context(data: Any) -> Union[ProjectContext, ConversationContext]:
    """Validate a raw record into its concrete context model."""
    return _context_adapter.validate_python(data)


def record_scope_key(record: dict[str, Any]) -> tuple[Any, Optional[str]]:
    """(id, projectId) key of a raw record, projectId None for conversations."""
    if context_kind(record) == "project":
        return (record.get("id"), record.get("projectId"))
    return (record.get("id"), None)
