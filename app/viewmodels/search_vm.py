"""ViewModel wiring the tag query builder to the gallery."""

from __future__ import annotations

from loguru import logger

from app.viewmodels.gallery_vm import GalleryVM
from core.errors import GalleryError
from core.models import TAG_TYPES, Tag, TagType
from core.query import TagQuery
from core.services.interfaces import OperationResult
from core.services.query_builder import (
    ClearEffect,
    NoEffect,
    QueryBuilder,
    QueryEffect,
    SearchEffect,
)


class SearchVM:
    """Tag search bar state.

    Each toggle runs the builder's effect against the gallery before
    returning, so the displayed list never lags behind the selection.
    """

    def __init__(self, gallery: GalleryVM) -> None:
        self._gallery = gallery
        self.builder = QueryBuilder()
        self.tags: list[Tag] = []
        self.expanded = False

    @property
    def query(self) -> TagQuery:
        return self.builder.query

    @property
    def is_visible(self) -> bool:
        """The search bar is hidden while the catalog is empty."""
        return bool(self.tags)

    async def load_tags(self) -> OperationResult:
        """Fetch the tag catalog used to offer and validate selections."""
        try:
            tags = await self._gallery.backend.fetch_all_tags()
        except GalleryError as ex:
            logger.warning("Failed to load tags: {}", ex)
            return OperationResult.failure(ex, f"Failed to load tags: {ex}")
        self.set_catalog(tags)
        return OperationResult.success()

    def set_catalog(self, tags: list[Tag]) -> None:
        self.tags = list(tags)
        self.builder.set_catalog(self.tags)

    def tags_by_type(self) -> dict[TagType, list[Tag]]:
        grouped: dict[TagType, list[Tag]] = {t: [] for t in TAG_TYPES}
        for tag in self.tags:
            grouped[TagType.parse(tag.type)].append(tag)
        return grouped

    def operator_toggle_visible(self, tag_type: TagType) -> bool:
        """The AND/OR switch only matters once a group holds two tags."""
        return len(self.query.group(tag_type).tags) > 1

    def description(self) -> str:
        return self.query.describe()

    def selected_count(self) -> int:
        return self.query.selected_count()

    async def toggle_tag(self, tag_type: TagType, name: str) -> OperationResult:
        return await self._run(self.builder.toggle_tag(tag_type, name))

    async def toggle_operator(self, tag_type: TagType) -> OperationResult:
        return await self._run(self.builder.toggle_operator(tag_type))

    async def clear_all(self) -> OperationResult:
        return await self._run(self.builder.clear_all())

    async def _run(self, effect: QueryEffect) -> OperationResult:
        if isinstance(effect, SearchEffect):
            return await self._gallery.apply_search(effect.query)
        if isinstance(effect, ClearEffect):
            return self._gallery.clear_search()
        if isinstance(effect, NoEffect):
            return OperationResult.success()
        raise TypeError(f"Unknown query effect: {effect!r}")
