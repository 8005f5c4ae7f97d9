"""ViewModel keeping the full and the displayed picture lists in sync."""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from core.errors import GalleryError, NotFoundError, ValidationError
from core.models import Picture
from core.query import TagQuery, matches
from core.removal import remove_by_key
from core.services.interfaces import GalleryBackend, OperationResult


def _path_of(picture: Picture) -> str:
    return picture.path


def _unique_by_path(pictures: list[Picture]) -> list[Picture]:
    """Drop later duplicates of a path, keeping the first occurrence."""
    seen: set[str] = set()
    out: list[Picture] = []
    for pic in pictures:
        if pic.path in seen:
            logger.warning("Duplicate picture path from backend ignored: {}", pic.path)
            continue
        seen.add(pic.path)
        out.append(pic)
    return out


@dataclass
class GalleryState:
    """Snapshot of the gallery lists.

    Attributes:
        all: Every indexed picture, in backend order.
        displayed: `all` when unfiltered, else the last search result.
        filtered: Whether a search result is being displayed.
        total_count: Picture count reported by the backend.
        query: The last applied non-empty query, if filtered.
    """

    all: list[Picture] = field(default_factory=list)
    displayed: list[Picture] = field(default_factory=list)
    filtered: bool = False
    total_count: int = 0
    query: TagQuery | None = None


class GalleryVM:
    """Gallery view-model.

    Mediates between the backend collaborator and the views showing the
    collection. Every list is replaced wholesale, never mutated in place, so
    a view holding a previous list keeps a consistent snapshot.
    """

    def __init__(self, backend: GalleryBackend, verify_results: bool = False) -> None:
        """Create a GalleryVM.

        Args:
            backend: Collaborator implementing `GalleryBackend`.
            verify_results: Re-check search responses with the local
                evaluator and log mismatches (results are never filtered).
        """
        self._backend = backend
        self._verify_results = verify_results
        self.state = GalleryState()
        self._deleting: set[str] = set()
        self._tagging: set[str] = set()
        # Paths removed while a fetch was in flight, in removal order
        self._removed_log: list[str] = []
        self._fetches = 0

    @property
    def backend(self) -> GalleryBackend:
        return self._backend

    @property
    def all(self) -> list[Picture]:
        return self.state.all

    @property
    def displayed(self) -> list[Picture]:
        return self.state.displayed

    @property
    def filtered(self) -> bool:
        return self.state.filtered

    @property
    def total_count(self) -> int:
        return self.state.total_count

    def find(self, path: str) -> Picture | None:
        """Return the picture with `path` from the full or displayed list."""
        for pic in (*self.state.all, *self.state.displayed):
            if pic.path == path:
                return pic
        return None

    def is_deleting(self, path: str) -> bool:
        return path in self._deleting

    def is_tagging(self, path: str) -> bool:
        return path in self._tagging

    def _begin_fetch(self) -> int:
        self._fetches += 1
        return len(self._removed_log)

    def _end_fetch(self) -> None:
        self._fetches -= 1
        if self._fetches == 0:
            self._removed_log.clear()

    def _without_removed_since(self, mark: int, pictures: list[Picture]) -> list[Picture]:
        """Drop pictures removed locally after the fetch at `mark` was issued."""
        removed = set(self._removed_log[mark:])
        if not removed:
            return _unique_by_path(pictures)
        logger.debug("Dropping pictures deleted during fetch: {}", sorted(removed))
        return _unique_by_path([p for p in pictures if p.path not in removed])

    async def load(self) -> OperationResult:
        """Fetch the whole collection and drop any filter."""
        mark = self._begin_fetch()
        try:
            try:
                fetched = await self._backend.fetch_all_pictures()
            except GalleryError as ex:
                logger.warning("Load pictures failed: {}", ex)
                return OperationResult.failure(ex, f"Failed to load pictures: {ex}")

            try:
                count = await self._backend.fetch_picture_count()
            except GalleryError as ex:
                logger.warning("Load picture count failed, using list length: {}", ex)
                count = None
            pictures = self._without_removed_since(mark, fetched)
        finally:
            self._end_fetch()
        if count is None:
            count = len(pictures)

        self.state = GalleryState(all=pictures, displayed=list(pictures), total_count=count)
        logger.info("Loaded gallery: pictures={} count={}", len(pictures), count)
        return OperationResult.success(f"Loaded {len(pictures)} pictures")

    async def apply_search(self, query: TagQuery) -> OperationResult:
        """Display the backend's result for `query`; `all` is untouched.

        An empty query means "no filter" and is handled as `clear_search`.
        Responses are applied in arrival order; the last one wins.
        """
        if query.is_empty():
            return self.clear_search()
        mark = self._begin_fetch()
        try:
            results = self._without_removed_since(
                mark, await self._backend.search_pictures(query)
            )
        except GalleryError as ex:
            logger.warning("Search failed for {}: {}", query.describe(), ex)
            return OperationResult.failure(ex, f"Search failed: {ex}")
        finally:
            self._end_fetch()

        if self._verify_results:
            stray = [p.path for p in results if not matches(p, query)]
            if stray:
                logger.warning(
                    "Search result disagrees with local evaluation for {}: {}",
                    query.describe(),
                    stray,
                )

        self.state = GalleryState(
            all=self.state.all,
            displayed=results,
            filtered=True,
            total_count=self.state.total_count,
            query=query,
        )
        logger.info("Search {} -> {} pictures", query.describe(), len(results))
        return OperationResult.success(f"{len(results)} matching pictures")

    def clear_search(self) -> OperationResult:
        """Show the full collection again."""
        self.state = GalleryState(
            all=self.state.all,
            displayed=list(self.state.all),
            filtered=False,
            total_count=self.state.total_count,
        )
        return OperationResult.success()

    def apply_delete(self, path: str) -> bool:
        """Remove `path` from both lists. Returns False if it was absent.

        While a fetch is in flight the path is also remembered, so a response
        computed before the removal cannot bring it back.
        """
        if self._fetches:
            self._removed_log.append(path)
        all_kept, removed_at = remove_by_key(self.state.all, path, _path_of)
        shown_kept, shown_at = remove_by_key(self.state.displayed, path, _path_of)
        if removed_at is None and shown_at is None:
            return False
        self.state = GalleryState(
            all=all_kept,
            displayed=shown_kept,
            filtered=self.state.filtered,
            total_count=max(0, self.state.total_count - (1 if removed_at is not None else 0)),
            query=self.state.query,
        )
        return True

    async def delete_picture(self, path: str, delete_from_disk: bool = False) -> OperationResult:
        """Delete `path` on the backend, then drop it locally.

        A picture the backend no longer knows counts as already deleted.
        """
        if path in self._deleting:
            return OperationResult.failure(ValidationError(f"delete already in progress: {path}"))
        self._deleting.add(path)
        try:
            await self._backend.delete_picture(path, delete_from_disk)
        except NotFoundError:
            logger.info("Picture already gone on backend: {}", path)
        except GalleryError as ex:
            logger.warning("Delete failed for {}: {}", path, ex)
            return OperationResult.failure(ex, f"Failed to delete: {ex}")
        finally:
            self._deleting.discard(path)

        self.apply_delete(path)
        logger.info("Deleted {} (from disk: {})", path, delete_from_disk)
        return OperationResult.success("Deleted")

    def _replace_picture(self, picture: Picture) -> None:
        def swap(items: list[Picture]) -> list[Picture]:
            return [picture if p.path == picture.path else p for p in items]

        self.state = GalleryState(
            all=swap(self.state.all),
            displayed=swap(self.state.displayed),
            filtered=self.state.filtered,
            total_count=self.state.total_count,
            query=self.state.query,
        )

    async def apply_tag_change(self, path: str) -> OperationResult:
        """Re-fetch the tag set of `path` and update it in both lists."""
        try:
            tags = await self._backend.fetch_tags_for_picture(path)
        except NotFoundError:
            logger.info("Picture vanished while refreshing tags: {}", path)
            self.apply_delete(path)
            return OperationResult.success()
        except GalleryError as ex:
            logger.warning("Refreshing tags failed for {}: {}", path, ex)
            return OperationResult.failure(ex, f"Failed to refresh tags: {ex}")

        current = self.find(path)
        if current is not None:
            self._replace_picture(current.with_tags(tags))
        return OperationResult.success()

    async def add_tag(self, path: str, tag_name: str) -> OperationResult:
        """Attach `tag_name` to `path` and refresh that picture's tags."""
        return await self._change_tag(path, tag_name, add=True)

    async def remove_tag(self, path: str, tag_name: str) -> OperationResult:
        """Detach `tag_name` from `path` and refresh that picture's tags."""
        return await self._change_tag(path, tag_name, add=False)

    async def _change_tag(self, path: str, tag_name: str, add: bool) -> OperationResult:
        if path in self._tagging:
            return OperationResult.failure(ValidationError(f"tag change in progress: {path}"))
        self._tagging.add(path)
        try:
            try:
                if add:
                    await self._backend.add_tag_to_picture(path, tag_name)
                else:
                    await self._backend.remove_tag_from_picture(path, tag_name)
            except NotFoundError as ex:
                if add:
                    logger.warning("Add tag {} to {} failed: {}", tag_name, path, ex)
                    return OperationResult.failure(ex, f"Failed to add tag: {ex}")
                logger.info("Tag {} already absent from {}", tag_name, path)
            except GalleryError as ex:
                logger.warning("Tag change {} on {} failed: {}", tag_name, path, ex)
                return OperationResult.failure(ex, f"Failed to update tags: {ex}")
            return await self.apply_tag_change(path)
        finally:
            self._tagging.discard(path)
