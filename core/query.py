"""Tag query model and its evaluator.

A `TagQuery` is a fixed-shape boolean filter: one `GroupCriterion` per tag
type. Within a group the tags combine with the group's own operator; the four
groups always combine with AND. Groups without tags do not constrain the
result, so a query with no tags at all matches every picture.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from core.models import Picture, TagType


class Operator(str, Enum):
    """Operator combining the tags of one group."""

    AND = "AND"
    OR = "OR"

    def flipped(self) -> Operator:
        return Operator.OR if self is Operator.AND else Operator.AND

    @classmethod
    def parse(cls, value: str | Operator | None) -> Operator:
        """Parse an operator string case-insensitively; anything else is AND."""
        if isinstance(value, Operator):
            return value
        return cls.OR if str(value or "").strip().upper() == "OR" else cls.AND


@dataclass(frozen=True)
class GroupCriterion:
    """Selected tag names of one type and how they combine."""

    tags: frozenset[str] = frozenset()
    operator: Operator = Operator.OR

    def is_empty(self) -> bool:
        return not self.tags

    def satisfied_by(self, tag_names: frozenset[str]) -> bool:
        """Return True if a picture carrying `tag_names` satisfies the group."""
        if not self.tags:
            return True
        if self.operator is Operator.AND:
            return self.tags <= tag_names
        return not self.tags.isdisjoint(tag_names)

    def toggled(self, name: str) -> GroupCriterion:
        """Return a copy with `name` removed if present, added otherwise."""
        if name in self.tags:
            return replace(self, tags=self.tags - {name})
        return replace(self, tags=self.tags | {name})

    def to_payload(self) -> dict[str, Any]:
        return {"tags": sorted(self.tags), "operator": self.operator.value}

    @classmethod
    def from_payload(cls, data: dict[str, Any] | None, default: Operator) -> GroupCriterion:
        if not data:
            return cls(operator=default)
        tags = frozenset(str(t) for t in (data.get("tags") or []))
        return cls(tags=tags, operator=Operator.parse(data.get("operator") or default))


# Wire names of the four groups, keyed by tag type
PAYLOAD_KEYS: dict[TagType, str] = {
    TagType.PERSON: "persons",
    TagType.LOCATION: "locations",
    TagType.EVENT: "events",
    TagType.OTHER: "others",
}

DEFAULT_OPERATORS: dict[TagType, Operator] = {
    TagType.PERSON: Operator.AND,
    TagType.LOCATION: Operator.OR,
    TagType.EVENT: Operator.OR,
    TagType.OTHER: Operator.OR,
}


@dataclass(frozen=True)
class TagQuery:
    """Four-group tag filter; one explicit field per tag type."""

    persons: GroupCriterion = field(
        default_factory=lambda: GroupCriterion(operator=DEFAULT_OPERATORS[TagType.PERSON])
    )
    locations: GroupCriterion = field(
        default_factory=lambda: GroupCriterion(operator=DEFAULT_OPERATORS[TagType.LOCATION])
    )
    events: GroupCriterion = field(
        default_factory=lambda: GroupCriterion(operator=DEFAULT_OPERATORS[TagType.EVENT])
    )
    others: GroupCriterion = field(
        default_factory=lambda: GroupCriterion(operator=DEFAULT_OPERATORS[TagType.OTHER])
    )

    def group(self, tag_type: TagType) -> GroupCriterion:
        return getattr(self, PAYLOAD_KEYS[tag_type])

    def replace_group(self, tag_type: TagType, criterion: GroupCriterion) -> TagQuery:
        return replace(self, **{PAYLOAD_KEYS[tag_type]: criterion})

    def groups(self) -> list[tuple[TagType, GroupCriterion]]:
        """Return (type, criterion) pairs in fixed display order."""
        return [(t, self.group(t)) for t in PAYLOAD_KEYS]

    def is_empty(self) -> bool:
        """True when no group holds a tag, i.e. the query filters nothing."""
        return all(c.is_empty() for _, c in self.groups())

    def selected_count(self) -> int:
        return sum(len(c.tags) for _, c in self.groups())

    def describe(self) -> str:
        """Human readable form, e.g. ``(Alice AND Bob) AND (Lyon OR Paris)``."""
        parts = []
        for _, crit in self.groups():
            if crit.is_empty():
                continue
            parts.append("(" + f" {crit.operator.value} ".join(sorted(crit.tags)) + ")")
        return " AND ".join(parts)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the four-group structure sent to the search endpoint."""
        return {key: self.group(t).to_payload() for t, key in PAYLOAD_KEYS.items()}

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> TagQuery:
        kwargs = {
            key: GroupCriterion.from_payload(data.get(key), DEFAULT_OPERATORS[t])
            for t, key in PAYLOAD_KEYS.items()
        }
        return cls(**kwargs)


def matches(picture: Picture, query: TagQuery) -> bool:
    """Return True if `picture` satisfies every group of `query`.

    Tag names that no longer exist in the catalog are simply never present on
    a picture, so they make AND groups fail and never help OR groups.
    """
    names = picture.tag_names
    return all(crit.satisfied_by(names) for _, crit in query.groups())


def filter_pictures(pictures: list[Picture], query: TagQuery) -> list[Picture]:
    """Return the pictures of `pictures` matching `query`, order preserved."""
    return [p for p in pictures if matches(p, query)]
