"""ViewModel for creating, editing and deleting tags."""

from __future__ import annotations

from collections.abc import Callable
import re

from loguru import logger

from core.errors import GalleryError, NotFoundError, ValidationError
from core.models import Tag, TagType, TagWithCount
from core.services.interfaces import GalleryBackend, OperationResult

COLOR_PALETTE: list[tuple[str, str]] = [
    ("#EF4444", "Red"),
    ("#F97316", "Orange"),
    ("#EAB308", "Yellow"),
    ("#22C55E", "Green"),
    ("#06B6D4", "Cyan"),
    ("#3B82F6", "Blue"),
    ("#8B5CF6", "Violet"),
    ("#EC4899", "Pink"),
    ("#6B7280", "Gray"),
]
DEFAULT_COLOR = "#3B82F6"
DEFAULT_TAG_TYPE = TagType.OTHER

_COLOR_RX = re.compile(r"^#[0-9A-Fa-f]{6}$")


def validate_tag_input(name: str, tag_type: TagType | str, color: str) -> tuple[str, TagType]:
    """Return the trimmed name and parsed type, or raise `ValidationError`."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Tag name is required")
    if isinstance(tag_type, str) and not isinstance(tag_type, TagType):
        try:
            tag_type = TagType(tag_type.strip().lower())
        except ValueError as ex:
            raise ValidationError(f"Invalid tag type: {tag_type}") from ex
    if color and not _COLOR_RX.match(color):
        raise ValidationError(f"Invalid color: {color}")
    return name, tag_type


class TagManagerVM:
    """Tag catalog management.

    Listeners registered with `on_catalog_changed` receive the fresh tag
    list after every successful reload, so search and viewer panels can
    refresh their reference data.
    """

    def __init__(self, backend: GalleryBackend) -> None:
        self._backend = backend
        self.tags: list[TagWithCount] = []
        self.busy = False
        self._listeners: list[Callable[[list[Tag]], None]] = []

    def on_catalog_changed(self, callback: Callable[[list[Tag]], None]) -> None:
        self._listeners.append(callback)

    def type_label(self, tag_type: TagType) -> str:
        return tag_type.value.capitalize()

    async def load(self) -> OperationResult:
        try:
            self.tags = await self._backend.fetch_all_tags_with_count()
        except GalleryError as ex:
            logger.warning("Failed to load tags: {}", ex)
            return OperationResult.failure(ex, f"Failed to load tags: {ex}")
        catalog = [t.tag for t in self.tags]
        for callback in self._listeners:
            callback(catalog)
        return OperationResult.success()

    async def create(
        self, name: str, tag_type: TagType | str = DEFAULT_TAG_TYPE, color: str = DEFAULT_COLOR
    ) -> OperationResult:
        try:
            name, parsed_type = validate_tag_input(name, tag_type, color)
        except ValidationError as ex:
            return OperationResult.failure(ex)
        return await self._mutate(
            f"Created tag {name}", lambda: self._backend.create_tag(name, parsed_type, color)
        )

    async def update(self, name: str, tag_type: TagType | str, color: str) -> OperationResult:
        try:
            name, parsed_type = validate_tag_input(name, tag_type, color)
        except ValidationError as ex:
            return OperationResult.failure(ex)
        return await self._mutate(
            f"Updated tag {name}", lambda: self._backend.update_tag(name, parsed_type, color)
        )

    async def delete(self, name: str) -> OperationResult:
        """Delete a tag; deleting one that is already gone succeeds."""
        return await self._mutate(
            f"Deleted tag {name}", lambda: self._backend.delete_tag(name), missing_ok=True
        )

    async def _mutate(self, message: str, call, missing_ok: bool = False) -> OperationResult:
        if self.busy:
            return OperationResult.failure(ValidationError("another tag operation is running"))
        self.busy = True
        try:
            try:
                await call()
            except NotFoundError as ex:
                if not missing_ok:
                    logger.warning("{} failed: {}", message, ex)
                    return OperationResult.failure(ex)
                logger.info("{}: already absent", message)
            except GalleryError as ex:
                logger.warning("{} failed: {}", message, ex)
                return OperationResult.failure(ex)
            logger.info("{}", message)
            reload = await self.load()
            if not reload.ok:
                return reload
            return OperationResult.success(message)
        finally:
            self.busy = False
