"""
Record models for every stored collection.

Records are open documents: the typed fields below are the ones the
store itself reasons about, and any other key a caller supplies is kept
verbatim. Attributes are snake_case in Python and camelCase on disk.

Records are frozen. Every mutation re-validates a merged document
and produces a new instance, so a cached collection is never altered in
place by a write that later fails to persist.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


_MISSING = object()


def utcnow() -> datetime:
    """Timezone-aware current UTC time used for all record timestamps."""
    return datetime.now(timezone.utc)


class Record(BaseModel):
    """Fields shared by every stored record."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    id: str
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # An explicit null on a field with a default reads as that default.
        if not isinstance(data, dict):
            return data
        optional = set()
        for name, info in cls.model_fields.items():
            if not info.is_required():
                optional.update((name, info.alias or name))
        return {
            key: value for key, value in data.items()
            if value is not None or key not in optional
        }

    @field_validator("*")
    @classmethod
    def assume_utc(cls, value: Any) -> Any:
        # Naive timestamps from hand-edited files are read as UTC.
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def field_name(cls, key: str) -> Optional[str]:
        """Resolve a snake_case name or camelCase alias to a declared field."""
        if key in cls.model_fields:
            return key
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        return None

    @classmethod
    def to_aliases(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Rewrite declared field names to their on-disk aliases."""
        aliased: dict[str, Any] = {}
        for key, value in values.items():
            name = cls.field_name(key)
            if name is None:
                aliased[key] = value
            else:
                aliased[cls.model_fields[name].alias or name] = value
        return aliased

    def get(self, key: str, default: Any = None) -> Any:
        """Read a declared field or an extra field by either spelling."""
        name = self.field_name(key)
        if name is not None:
            return getattr(self, name)
        return (self.model_extra or {}).get(key, default)

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def to_document(self) -> dict[str, Any]:
        """Python-mode dump keyed by on-disk names, extras included."""
        return self.model_dump(by_alias=True)


class User(Record):
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None


class Message(Record):
    sender_id: Optional[str] = None
    receiver_id: Optional[str] = None
    content: str = ""
    timestamp: Optional[datetime] = None

    @property
    def sent_at(self) -> datetime:
        """Conversation ordering key; falls back to creation time."""
        return self.timestamp or self.created_at


class Session(Record):
    expert_id: Optional[str] = None
    client_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[str] = None


class Resource(Record):
    title: str = ""
    category: Optional[str] = None
    featured: bool = False


class Forum(Record):
    name: str = ""
    description: str = ""
    topic_count: int = 0
    post_count: int = 0


class Topic(Record):
    forum_id: str
    title: str = ""
    content: str = ""
    author_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    views: int = 0
    post_count: int = 0
    last_post_at: Optional[datetime] = None


def default_reactions() -> dict[str, list[str]]:
    return {"like": [], "helpful": []}


class Post(Record):
    topic_id: str
    forum_id: Optional[str] = None
    content: str = ""
    author_id: Optional[str] = None
    is_first_post: bool = False
    status: str = "active"
    reactions: dict[str, list[str]] = Field(default_factory=default_reactions)
    attachments: list[Any] = Field(default_factory=list)


class ForumWithStats(Forum):
    """Forum plus live counts and its most recent posts, newest first."""

    latest_posts: list[Post] = Field(default_factory=list)


class TopicWithPosts(Topic):
    """Topic plus all of its posts, oldest first."""

    posts: list[Post] = Field(default_factory=list)
