"""Core service interfaces and shared data structures.

This module defines the backend collaborator protocol consumed by the
view-models and the result type every view-model operation reports instead
of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from core.errors import GalleryError
from core.models import Picture, Tag, TagType, TagWithCount, WatchedFolder
from core.query import TagQuery


@dataclass
class OperationResult:
    """Outcome of a view-model operation.

    Attributes:
        ok: Whether the operation took effect (or was already applied).
        error: The failure, when `ok` is False.
        message: Short user-facing text.
    """

    ok: bool
    error: GalleryError | None = None
    message: str = ""

    @classmethod
    def success(cls, message: str = "") -> OperationResult:
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, error: GalleryError, message: str | None = None) -> OperationResult:
        return cls(ok=False, error=error, message=message if message is not None else str(error))

    @property
    def error_kind(self) -> str | None:
        """Taxonomy name of the error (`not_found`, `validation`, ...)."""
        return self.error.kind if self.error is not None else None


class GalleryBackend(Protocol):
    """Asynchronous request/response boundary to the indexing backend.

    Implementations raise `NotFoundError`, `BackendUnavailableError` or
    `ValidationError` from `core.errors`.
    """

    async def fetch_all_pictures(self) -> list[Picture]:
        """Return the full indexed collection."""
        ...

    async def fetch_picture_count(self) -> int:
        """Return the number of indexed pictures."""
        ...

    async def search_pictures(self, query: TagQuery) -> list[Picture]:
        """Return the pictures matching `query`."""
        ...

    async def delete_picture(self, path: str, delete_from_disk: bool) -> None:
        """Remove a picture from the index, optionally from disk too."""
        ...

    async def fetch_all_tags(self) -> list[Tag]:
        """Return the tag catalog."""
        ...

    async def fetch_all_tags_with_count(self) -> list[TagWithCount]:
        """Return the tag catalog with per-tag picture counts."""
        ...

    async def fetch_tags_for_picture(self, path: str) -> list[Tag]:
        """Return the tags attached to one picture."""
        ...

    async def add_tag_to_picture(self, path: str, tag_name: str) -> None:
        """Attach a tag; attaching twice is not an error."""
        ...

    async def remove_tag_from_picture(self, path: str, tag_name: str) -> None:
        """Detach a tag; detaching an absent tag is not an error."""
        ...

    async def create_tag(self, name: str, tag_type: TagType, color: str) -> None:
        """Create a tag; duplicate or empty names are rejected."""
        ...

    async def update_tag(self, name: str, tag_type: TagType, color: str) -> None:
        """Change the type/color of an existing tag."""
        ...

    async def delete_tag(self, name: str) -> None:
        """Delete a tag and all its picture associations."""
        ...

    async def list_watched_folders(self) -> list[WatchedFolder]:
        """Return the folders registered for indexing."""
        ...

    async def add_watched_folder(self, path: str, name: str, auto_reindex: bool) -> None:
        """Register a folder for indexing."""
        ...

    async def remove_watched_folder(self, path: str) -> None:
        """Unregister a folder."""
        ...

    async def index_folder(self, path: str) -> int:
        """Index a folder and return the number of pictures indexed."""
        ...

    async def update_watched_folder(self, path: str, name: str, auto_reindex: bool) -> None:
        """Rename a watched folder or change its auto-reindex flag."""
        ...

    async def index_watched_folder(self, path: str) -> int:
        """Index a watched folder, updating its stats; returns pictures indexed."""
        ...

    async def reindex_all_watched_folders(self) -> int:
        """Index every watched folder; returns the total pictures indexed."""
        ...
