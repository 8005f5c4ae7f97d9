"""Core domain models for tags and indexed pictures."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


class TagType(str, Enum):
    """Semantic category of a tag."""

    PERSON = "person"
    LOCATION = "location"
    EVENT = "event"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | TagType | None) -> TagType:
        """Map a raw type string to a `TagType`, falling back to OTHER."""
        if isinstance(value, TagType):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.OTHER


# Display/iteration order of the four groups
TAG_TYPES: tuple[TagType, ...] = (
    TagType.PERSON,
    TagType.LOCATION,
    TagType.EVENT,
    TagType.OTHER,
)


@dataclass(frozen=True)
class Tag:
    """A named, typed label. Identity is the name."""

    name: str
    type: TagType = field(default=TagType.OTHER, compare=False)
    color: str | None = field(default=None, compare=False)


@dataclass(frozen=True)
class TagWithCount:
    """A tag plus the number of pictures it is attached to."""

    tag: Tag
    picture_count: int = 0


@dataclass
class Picture:
    """Metadata of one indexed photo. `path` is the unique key."""

    path: str
    filename: str = ""
    size: int = 0
    width: int = 0
    height: int = 0
    created_at: datetime | None = None
    modified_at: datetime | None = None
    indexed_at: datetime | None = None
    tags: tuple[Tag, ...] = ()

    @property
    def tag_names(self) -> frozenset[str]:
        """Names of the attached tags."""
        return frozenset(t.name for t in self.tags)

    def with_tags(self, tags: list[Tag] | tuple[Tag, ...]) -> Picture:
        """Return a copy carrying `tags` (duplicates by name dropped)."""
        seen: dict[str, Tag] = {}
        for t in tags:
            seen.setdefault(t.name, t)
        return replace(self, tags=tuple(seen.values()))


@dataclass
class WatchedFolder:
    """A folder registered with the backend indexer."""

    path: str
    name: str = ""
    added_at: datetime | None = None
    last_indexed_at: datetime | None = None
    picture_count: int = 0
    auto_reindex: bool = False
