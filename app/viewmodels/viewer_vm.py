"""ViewModel for the single-picture viewer: navigation, delete, tag panel."""

from __future__ import annotations

from loguru import logger

from app.viewmodels.gallery_vm import GalleryVM
from core.errors import GalleryError, ValidationError
from core.models import Picture, Tag
from core.services.interfaces import OperationResult
from core.services.viewer_navigator import ViewerInput, ViewerNavigator


class ViewerVM:
    """Drives a `ViewerNavigator` and pushes its mutations into the gallery.

    Deletes and tag changes go through the `GalleryVM`, which talks to the
    backend and keeps its own lists consistent; the viewer then mirrors the
    outcome in its sequence.
    """

    def __init__(self, gallery: GalleryVM) -> None:
        self._gallery = gallery
        self.navigator = ViewerNavigator()
        self.catalog: list[Tag] = []
        self.deleting = False
        self.tag_busy = False
        self.tag_selector_open = False

    @property
    def gallery(self) -> GalleryVM:
        return self._gallery

    @property
    def is_open(self) -> bool:
        return self.navigator.is_open

    @property
    def current(self) -> Picture | None:
        return self.navigator.current

    def open(self, sequence: list[Picture], start_index: int = 0) -> None:
        self.navigator.open(sequence, start_index)
        self.tag_selector_open = False

    def open_at(self, sequence: list[Picture], path: str) -> None:
        """Open on the picture with `path` inside `sequence`."""
        for idx, pic in enumerate(sequence):
            if pic.path == path:
                self.open(sequence, idx)
                return
        raise KeyError(path)

    def close(self) -> None:
        self.navigator.close()
        self.tag_selector_open = False

    def handle_input(self, action: ViewerInput) -> bool:
        handled = self.navigator.handle_input(action)
        if handled and action in (ViewerInput.PREVIOUS, ViewerInput.NEXT, ViewerInput.CLOSE):
            self.tag_selector_open = False
        return handled

    async def confirm_delete(self, delete_from_disk: bool) -> OperationResult:
        """Delete the picture the dialog was opened for and advance.

        The dialog stays open while the backend call runs, so navigation
        inputs are ignored until it settles. On failure the sequence is
        untouched, the dialog closes and the error is returned for display.
        """
        current = self.navigator.current
        if current is None:
            return OperationResult.failure(ValidationError("viewer is closed"))
        if not self.navigator.delete_dialog_open:
            return OperationResult.failure(ValidationError("delete was not requested"))
        if self.deleting:
            return OperationResult.failure(ValidationError("delete already in progress"))

        self.deleting = True
        try:
            result = await self._gallery.delete_picture(current.path, delete_from_disk)
        finally:
            self.deleting = False

        self.navigator.cancel_delete()
        if not result.ok:
            return result
        self.navigator.remove_path(current.path)
        if not self.navigator.is_open:
            logger.info("Viewer closed: last picture deleted")
        return result

    async def load_catalog(self) -> OperationResult:
        try:
            self.catalog = await self._gallery.backend.fetch_all_tags()
        except GalleryError as ex:
            logger.warning("Failed to load tags: {}", ex)
            return OperationResult.failure(ex, f"Failed to load tags: {ex}")
        return OperationResult.success()

    def current_tags(self) -> list[Tag]:
        current = self.navigator.current
        return list(current.tags) if current is not None else []

    def available_tags(self) -> list[Tag]:
        """Catalog tags not yet attached to the current picture."""
        attached = {t.name for t in self.current_tags()}
        return [t for t in self.catalog if t.name not in attached]

    def can_add_tag(self) -> bool:
        return self.is_open and not self.tag_busy and bool(self.available_tags())

    def toggle_tag_selector(self) -> None:
        self.tag_selector_open = not self.tag_selector_open and self.can_add_tag()

    async def add_tag(self, tag_name: str) -> OperationResult:
        result = await self._change_tag(tag_name, add=True)
        self.tag_selector_open = False
        return result

    async def remove_tag(self, tag_name: str) -> OperationResult:
        return await self._change_tag(tag_name, add=False)

    async def refresh_current_tags(self) -> OperationResult:
        """Re-fetch the current picture's tags from the backend."""
        current = self.navigator.current
        if current is None:
            return OperationResult.success()
        known = self._gallery.find(current.path) is not None
        result = await self._gallery.apply_tag_change(current.path)
        self._sync_from_gallery(current.path, known)
        return result

    async def _change_tag(self, tag_name: str, add: bool) -> OperationResult:
        current = self.navigator.current
        if current is None:
            return OperationResult.failure(ValidationError("viewer is closed"))
        if self.tag_busy:
            return OperationResult.failure(ValidationError("tag change already in progress"))

        known = self._gallery.find(current.path) is not None
        self.tag_busy = True
        try:
            if add:
                result = await self._gallery.add_tag(current.path, tag_name)
            else:
                result = await self._gallery.remove_tag(current.path, tag_name)
        finally:
            self.tag_busy = False
        if result.ok:
            self._sync_from_gallery(current.path, known)
        return result

    def _sync_from_gallery(self, path: str, known_before: bool) -> None:
        refreshed = self._gallery.find(path)
        if refreshed is not None:
            self.navigator.replace_item(refreshed)
        elif known_before:
            # Dropped by the gallery: the backend no longer knows it
            self.navigator.remove_path(path)
