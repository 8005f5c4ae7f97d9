"""Incremental construction of a `TagQuery` from UI toggles.

State changes are expressed as a reducer, ``reduce_query(query, action,
catalog) -> (query, effect)``, so the search/clear side effect is an explicit
value the caller executes rather than something a reactive recomputation
triggers behind its back. `QueryBuilder` is the stateful wrapper views use.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

from loguru import logger

from core.models import Tag, TagType
from core.query import TagQuery


@dataclass(frozen=True)
class ToggleTag:
    tag_type: TagType
    name: str


@dataclass(frozen=True)
class ToggleOperator:
    tag_type: TagType


@dataclass(frozen=True)
class ClearAll:
    pass


QueryAction = ToggleTag | ToggleOperator | ClearAll


@dataclass(frozen=True)
class SearchEffect:
    """Issue a backend search with `query`."""

    query: TagQuery


@dataclass(frozen=True)
class ClearEffect:
    """Drop any active filter and show the whole collection."""


@dataclass(frozen=True)
class NoEffect:
    """Nothing changed; nothing to do."""


QueryEffect = SearchEffect | ClearEffect | NoEffect


def _effect_for(query: TagQuery) -> QueryEffect:
    return ClearEffect() if query.is_empty() else SearchEffect(query)


def reduce_query(
    query: TagQuery, action: QueryAction, catalog: Mapping[str, Tag]
) -> tuple[TagQuery, QueryEffect]:
    """Apply `action` to `query`.

    Args:
        query: Current query value.
        action: One of `ToggleTag`, `ToggleOperator`, `ClearAll`.
        catalog: Known tags by name, used to check a toggled tag's type.

    Returns:
        The new query and the effect the consumer must run right away.
    """
    if isinstance(action, ToggleTag):
        crit = query.group(action.tag_type)
        tag = catalog.get(action.name)
        # Deselecting always works, even for a tag deleted from the catalog
        if action.name not in crit.tags and (tag is None or tag.type is not action.tag_type):
            logger.warning(
                "Ignoring toggle of tag {!r} in group {}: catalog type is {}",
                action.name,
                action.tag_type.value,
                tag.type.value if tag else "missing",
            )
            return query, NoEffect()
        new_query = query.replace_group(action.tag_type, crit.toggled(action.name))
        return new_query, _effect_for(new_query)

    if isinstance(action, ToggleOperator):
        crit = query.group(action.tag_type)
        new_query = query.replace_group(
            action.tag_type, replace(crit, operator=crit.operator.flipped())
        )
        return new_query, _effect_for(new_query)

    if isinstance(action, ClearAll):
        return TagQuery(), ClearEffect()

    raise TypeError(f"Unknown query action: {action!r}")


class QueryBuilder:
    """Mutable query state fed by tag/operator toggles."""

    def __init__(self, catalog: Iterable[Tag] = ()) -> None:
        self._catalog: dict[str, Tag] = {}
        self._query = TagQuery()
        self.set_catalog(catalog)

    @property
    def query(self) -> TagQuery:
        return self._query

    @property
    def catalog(self) -> dict[str, Tag]:
        return dict(self._catalog)

    def set_catalog(self, tags: Iterable[Tag]) -> None:
        """Replace the reference tag list.

        Selected names that disappeared are kept; they simply never match.
        """
        self._catalog = {t.name: t for t in tags}

    def dispatch(self, action: QueryAction) -> QueryEffect:
        self._query, effect = reduce_query(self._query, action, self._catalog)
        return effect

    def toggle_tag(self, tag_type: TagType, name: str) -> QueryEffect:
        return self.dispatch(ToggleTag(tag_type, name))

    def toggle_operator(self, tag_type: TagType) -> QueryEffect:
        # No visible effect while the group holds 0-1 tags
        return self.dispatch(ToggleOperator(tag_type))

    def clear_all(self) -> QueryEffect:
        return self.dispatch(ClearAll())

    def is_empty(self) -> bool:
        return self._query.is_empty()

    def is_selected(self, tag_type: TagType, name: str) -> bool:
        return name in self._query.group(tag_type).tags
