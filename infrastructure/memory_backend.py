"""In-process implementation of the gallery backend.

Keeps pictures, tags and tag associations in dictionaries and evaluates
searches with the same `matches` the client uses. Disk deletion goes to the
recycle bin through send2trash. Faults can be injected per method so callers
can exercise their failure paths without a network.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime
import json
import os
from pathlib import Path
import re

from loguru import logger
from send2trash import send2trash

from core.errors import BackendUnavailableError, GalleryError, NotFoundError, ValidationError
from core.models import Picture, Tag, TagType, TagWithCount, WatchedFolder
from core.query import TagQuery, matches
from infrastructure.codec import picture_from_json, tag_from_json

_COLOR_RX = re.compile(r"^#[0-9A-Fa-f]{6}$")


class InMemoryGalleryBackend:
    """Dictionary-backed `GalleryBackend`."""

    def __init__(self, pictures: Iterable[Picture] = (), tags: Iterable[Tag] = ()) -> None:
        self._tags: dict[str, Tag] = {t.name: t for t in tags}
        self._pictures: dict[str, Picture] = {}
        self._links: dict[str, set[str]] = {}
        self._folders: dict[str, WatchedFolder] = {}
        self._faults: dict[str, GalleryError] = {}
        self.calls: list[tuple[str, tuple]] = []
        for p in pictures:
            self._pictures[p.path] = p
            self._links[p.path] = {t.name for t in p.tags if t.name in self._tags}

    @classmethod
    def from_json_file(cls, path: str | Path) -> InMemoryGalleryBackend:
        """Build a backend from a ``{"tags": [...], "pictures": [...]}`` file."""
        with Path(path).open("r", encoding="utf-8") as f:
            data = json.load(f)
        tags = [tag_from_json(t) for t in data.get("tags", [])]
        pictures = [picture_from_json(p) for p in data.get("pictures", [])]
        logger.info("Seeded in-memory backend: {} pictures, {} tags", len(pictures), len(tags))
        return cls(pictures=pictures, tags=tags)

    def fail_next(self, method: str, error: GalleryError) -> None:
        """Make the next call to `method` raise `error`."""
        self._faults[method] = error

    def _enter(self, method: str, *args: object) -> None:
        self.calls.append((method, args))
        error = self._faults.pop(method, None)
        if error is not None:
            raise error

    def _picture(self, path: str) -> Picture:
        pic = self._pictures[path]
        names = self._links.get(path, set())
        return pic.with_tags([self._tags[n] for n in sorted(names) if n in self._tags])

    def _require_picture(self, path: str) -> None:
        if path not in self._pictures:
            raise NotFoundError(f"picture not found: {path}")

    def _require_tag(self, name: str) -> Tag:
        tag = self._tags.get(name)
        if tag is None:
            raise NotFoundError(f"tag not found: {name}")
        return tag

    @staticmethod
    def _check_color(color: str) -> None:
        if color and not _COLOR_RX.match(color):
            raise ValidationError(f"invalid color: {color}")

    async def fetch_all_pictures(self) -> list[Picture]:
        self._enter("fetch_all_pictures")
        return [self._picture(p) for p in self._pictures]

    async def fetch_picture_count(self) -> int:
        self._enter("fetch_picture_count")
        return len(self._pictures)

    async def search_pictures(self, query: TagQuery) -> list[Picture]:
        self._enter("search_pictures", query)
        return [pic for pic in (self._picture(p) for p in self._pictures) if matches(pic, query)]

    async def delete_picture(self, path: str, delete_from_disk: bool) -> None:
        self._enter("delete_picture", path, delete_from_disk)
        self._require_picture(path)
        if delete_from_disk:
            normalized_path = os.path.normpath(path)
            try:
                send2trash(normalized_path)
            except (OSError, UnicodeEncodeError) as ex:
                logger.error("Send to recycle bin failed for {}: {}", normalized_path, ex)
                raise BackendUnavailableError(f"cannot delete file {path}: {ex}") from ex
        del self._pictures[path]
        self._links.pop(path, None)
        logger.info("Deleted picture {} (from disk: {})", path, delete_from_disk)

    async def fetch_all_tags(self) -> list[Tag]:
        self._enter("fetch_all_tags")
        return list(self._tags.values())

    async def fetch_all_tags_with_count(self) -> list[TagWithCount]:
        self._enter("fetch_all_tags_with_count")
        return [
            TagWithCount(tag=t, picture_count=sum(1 for s in self._links.values() if t.name in s))
            for t in self._tags.values()
        ]

    async def fetch_tags_for_picture(self, path: str) -> list[Tag]:
        self._enter("fetch_tags_for_picture", path)
        self._require_picture(path)
        return list(self._picture(path).tags)

    async def add_tag_to_picture(self, path: str, tag_name: str) -> None:
        self._enter("add_tag_to_picture", path, tag_name)
        self._require_picture(path)
        self._require_tag(tag_name)
        self._links.setdefault(path, set()).add(tag_name)

    async def remove_tag_from_picture(self, path: str, tag_name: str) -> None:
        self._enter("remove_tag_from_picture", path, tag_name)
        self._links.get(path, set()).discard(tag_name)

    async def create_tag(self, name: str, tag_type: TagType, color: str) -> None:
        self._enter("create_tag", name, tag_type, color)
        name = name.strip()
        if not name:
            raise ValidationError("tag name cannot be empty")
        if not isinstance(tag_type, TagType):
            raise ValidationError(f"invalid tag type: {tag_type}")
        self._check_color(color)
        if name in self._tags:
            raise ValidationError(f"tag '{name}' already exists")
        self._tags[name] = Tag(name=name, type=tag_type, color=color or None)

    async def update_tag(self, name: str, tag_type: TagType, color: str) -> None:
        self._enter("update_tag", name, tag_type, color)
        self._require_tag(name)
        self._check_color(color)
        self._tags[name] = Tag(name=name, type=tag_type, color=color or None)

    async def delete_tag(self, name: str) -> None:
        self._enter("delete_tag", name)
        self._require_tag(name)
        for names in self._links.values():
            names.discard(name)
        del self._tags[name]

    async def list_watched_folders(self) -> list[WatchedFolder]:
        self._enter("list_watched_folders")
        return [replace(f) for f in self._folders.values()]

    async def add_watched_folder(self, path: str, name: str, auto_reindex: bool) -> None:
        self._enter("add_watched_folder", path, name, auto_reindex)
        if path in self._folders:
            raise ValidationError(f"folder already watched: {path}")
        self._folders[path] = WatchedFolder(
            path=path,
            name=name or Path(path).name,
            added_at=datetime.now(),
            auto_reindex=auto_reindex,
        )

    async def remove_watched_folder(self, path: str) -> None:
        self._enter("remove_watched_folder", path)
        self._require_folder(path)
        del self._folders[path]

    def _count_under(self, path: str) -> int:
        prefix = os.path.join(os.path.normpath(path), "")
        return sum(1 for p in self._pictures if os.path.normpath(p).startswith(prefix))

    def _require_folder(self, path: str) -> WatchedFolder:
        folder = self._folders.get(path)
        if folder is None:
            raise NotFoundError(f"folder not watched: {path}")
        return folder

    async def index_folder(self, path: str) -> int:
        """Count the known pictures under `path`; no file-system scan."""
        self._enter("index_folder", path)
        count = self._count_under(path)
        folder = self._folders.get(path)
        if folder is not None:
            folder.picture_count = count
            folder.last_indexed_at = datetime.now()
        return count

    async def update_watched_folder(self, path: str, name: str, auto_reindex: bool) -> None:
        self._enter("update_watched_folder", path, name, auto_reindex)
        folder = self._require_folder(path)
        folder.name = name or folder.name
        folder.auto_reindex = auto_reindex

    async def index_watched_folder(self, path: str) -> int:
        self._enter("index_watched_folder", path)
        folder = self._require_folder(path)
        folder.picture_count = self._count_under(path)
        folder.last_indexed_at = datetime.now()
        return folder.picture_count

    async def reindex_all_watched_folders(self) -> int:
        self._enter("reindex_all_watched_folders")
        total = 0
        for folder in self._folders.values():
            folder.picture_count = self._count_under(folder.path)
            folder.last_indexed_at = datetime.now()
            total += folder.picture_count
        logger.info("Reindexed {} watched folders: {} pictures", len(self._folders), total)
        return total
