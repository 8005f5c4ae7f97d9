"""Tests for the query reducer and QueryBuilder."""

from __future__ import annotations

import pytest

from conftest import CATALOG, PARIS
from core.models import TagType
from core.query import Operator, TagQuery
from core.services.query_builder import (
    ClearAll,
    ClearEffect,
    NoEffect,
    QueryBuilder,
    SearchEffect,
    ToggleOperator,
    ToggleTag,
    reduce_query,
)


@pytest.fixture
def builder() -> QueryBuilder:
    return QueryBuilder(CATALOG)


class TestToggleTag:
    def test_first_toggle_issues_search(self, builder):
        effect = builder.toggle_tag(TagType.PERSON, "Alice")
        assert isinstance(effect, SearchEffect)
        assert effect.query.persons.tags == frozenset({"Alice"})
        assert not builder.is_empty()

    def test_toggle_twice_restores_group(self, builder):
        builder.toggle_tag(TagType.LOCATION, "Paris")
        before = builder.query.locations
        builder.toggle_tag(TagType.LOCATION, "Lyon")
        builder.toggle_tag(TagType.LOCATION, "Lyon")
        assert builder.query.locations == before

    def test_back_to_empty_issues_clear(self, builder):
        builder.toggle_tag(TagType.PERSON, "Alice")
        effect = builder.toggle_tag(TagType.PERSON, "Alice")
        assert isinstance(effect, ClearEffect)
        assert builder.is_empty()

    def test_type_mismatch_is_noop(self, builder):
        effect = builder.toggle_tag(TagType.PERSON, "Paris")
        assert isinstance(effect, NoEffect)
        assert builder.query == TagQuery()

    def test_unknown_tag_is_noop(self, builder):
        assert isinstance(builder.toggle_tag(TagType.OTHER, "Ghost"), NoEffect)
        assert builder.is_empty()

    def test_stale_selection_can_still_be_removed(self, builder):
        builder.toggle_tag(TagType.LOCATION, "Paris")
        builder.set_catalog([t for t in CATALOG if t != PARIS])
        effect = builder.toggle_tag(TagType.LOCATION, "Paris")
        assert isinstance(effect, ClearEffect)
        assert builder.is_empty()

    def test_is_selected(self, builder):
        builder.toggle_tag(TagType.EVENT, "Wedding")
        assert builder.is_selected(TagType.EVENT, "Wedding")
        assert not builder.is_selected(TagType.PERSON, "Wedding")


class TestToggleOperator:
    def test_flips_only_one_group(self, builder):
        builder.toggle_operator(TagType.PERSON)
        q = builder.query
        assert q.persons.operator is Operator.OR
        assert q.locations.operator is Operator.OR
        assert q.events.operator is Operator.OR

    def test_on_empty_query_clears(self, builder):
        assert isinstance(builder.toggle_operator(TagType.LOCATION), ClearEffect)

    def test_on_non_empty_query_searches(self, builder):
        builder.toggle_tag(TagType.PERSON, "Alice")
        builder.toggle_tag(TagType.PERSON, "Bob")
        effect = builder.toggle_operator(TagType.PERSON)
        assert isinstance(effect, SearchEffect)
        assert effect.query.persons.operator is Operator.OR


def test_clear_all_resets_defaults(builder):
    builder.toggle_tag(TagType.PERSON, "Alice")
    builder.toggle_operator(TagType.PERSON)
    effect = builder.clear_all()
    assert isinstance(effect, ClearEffect)
    assert builder.query == TagQuery()


def test_reducer_is_pure():
    catalog = {t.name: t for t in CATALOG}
    start = TagQuery()
    q1, e1 = reduce_query(start, ToggleTag(TagType.PERSON, "Alice"), catalog)
    q2, e2 = reduce_query(q1, ToggleOperator(TagType.PERSON), catalog)
    q3, e3 = reduce_query(q2, ClearAll(), catalog)
    assert start == TagQuery()
    assert q1.persons.tags == frozenset({"Alice"})
    assert isinstance(e1, SearchEffect) and e1.query == q1
    assert isinstance(e2, SearchEffect) and q2.persons.operator is Operator.OR
    assert q3 == TagQuery() and isinstance(e3, ClearEffect)


def test_reducer_rejects_unknown_action():
    with pytest.raises(TypeError):
        reduce_query(TagQuery(), object(), {})  # type: ignore[arg-type]
