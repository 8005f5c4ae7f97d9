"""ViewModel for the watched-folder list and indexing."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from loguru import logger

from core.errors import GalleryError, ValidationError
from core.models import WatchedFolder
from core.services.interfaces import GalleryBackend, OperationResult


class FoldersVM:
    """Watched folders: register, unregister, index and re-index.

    `busy` guards the list-level operations (add, remove, update, reindex
    all); indexing a single folder is tracked per path in `indexing` so
    several folders can be indexed side by side. The list is reloaded after
    every change so picture counts and index times stay current.
    """

    def __init__(self, backend: GalleryBackend) -> None:
        self._backend = backend
        self.folders: list[WatchedFolder] = []
        self.busy = False
        self.indexing: set[str] = set()

    def is_indexing(self, path: str) -> bool:
        return path in self.indexing

    def can_reindex_all(self) -> bool:
        return bool(self.folders) and not self.busy

    async def load(self) -> OperationResult:
        try:
            self.folders = await self._backend.list_watched_folders()
        except GalleryError as ex:
            logger.warning("Failed to load watched folders: {}", ex)
            return OperationResult.failure(ex, f"Failed to load watched folders: {ex}")
        return OperationResult.success()

    async def add(self, path: str, name: str = "", auto_reindex: bool = False) -> OperationResult:
        path = (path or "").strip()
        if not path:
            return OperationResult.failure(ValidationError("Folder path is required"))
        return await self._mutate(
            f"Added watched folder {path}",
            lambda: self._backend.add_watched_folder(path, name.strip(), auto_reindex),
        )

    async def update(self, path: str, name: str, auto_reindex: bool) -> OperationResult:
        return await self._mutate(
            f"Updated watched folder {path}",
            lambda: self._backend.update_watched_folder(path, name.strip(), auto_reindex),
        )

    async def remove(self, path: str) -> OperationResult:
        return await self._mutate(
            f"Removed watched folder {path}", lambda: self._backend.remove_watched_folder(path)
        )

    async def index(self, path: str) -> OperationResult:
        """Index one watched folder and report how many pictures it holds."""
        if path in self.indexing:
            return OperationResult.failure(ValidationError(f"already indexing: {path}"))
        self.indexing.add(path)
        try:
            try:
                count = await self._backend.index_watched_folder(path)
            except GalleryError as ex:
                logger.warning("Indexing {} failed: {}", path, ex)
                return OperationResult.failure(ex, f"Failed to index folder: {ex}")
            logger.info("Indexed {}: {} pictures", path, count)
            await self.load()
            return OperationResult.success(f"Successfully indexed {count} pictures")
        finally:
            self.indexing.discard(path)

    async def reindex_all(self) -> OperationResult:
        if not self.folders:
            return OperationResult.failure(ValidationError("No folders being watched"))
        return await self._mutate(
            "Reindexed all watched folders",
            self._backend.reindex_all_watched_folders,
            success_message=lambda count: (
                f"Successfully indexed {count} pictures across all folders"
            ),
        )

    async def _mutate(
        self,
        message: str,
        call: Callable[[], Awaitable[object]],
        success_message: Callable[[object], str] | None = None,
    ) -> OperationResult:
        if self.busy:
            return OperationResult.failure(ValidationError("another folder operation is running"))
        self.busy = True
        try:
            try:
                outcome = await call()
            except GalleryError as ex:
                logger.warning("{} failed: {}", message, ex)
                return OperationResult.failure(ex)
            logger.info("{}", message)
            reload = await self.load()
            if not reload.ok:
                return reload
            text = success_message(outcome) if success_message is not None else message
            return OperationResult.success(text)
        finally:
            self.busy = False
