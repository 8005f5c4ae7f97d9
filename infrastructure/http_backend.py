"""HTTP client for the gallery backend bridge.

Every backend method is exposed as ``POST {base_url}/{MethodName}`` taking a
JSON array of positional arguments and answering with the JSON-encoded return
value. Errors come back with a non-2xx status and an ``{"error": "..."}`` body.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from core.errors import BackendUnavailableError, GalleryError, NotFoundError, ValidationError
from core.models import Picture, Tag, TagType, TagWithCount, WatchedFolder
from core.query import TagQuery
from infrastructure.codec import (
    folder_from_json,
    picture_from_json,
    tag_from_json,
    tag_with_count_from_json,
)

DEFAULT_BASE_URL = "http://127.0.0.1:34115/api"
DEFAULT_TIMEOUT_SECONDS = 30.0


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase


def _error_for_status(method: str, response: httpx.Response) -> GalleryError:
    text = f"{method}: {_error_text(response)}"
    if response.status_code == 404:
        return NotFoundError(text)
    if response.status_code in (400, 409, 422):
        return ValidationError(text)
    return BackendUnavailableError(f"{text} (HTTP {response.status_code})")


class HttpGalleryBackend:
    """`GalleryBackend` implementation over httpx."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create the client.

        Args:
            base_url: Root URL of the bridge; method names are appended.
            timeout: Per-request timeout in seconds.
            client: Pre-built client (tests pass one with a mock transport).
        """
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpGalleryBackend:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _call(self, method: str, *args: Any) -> Any:
        url = f"{self._base_url}/{method}"
        try:
            response = await self._client.post(url, json=list(args))
        except httpx.HTTPError as ex:
            logger.warning("Backend call {} failed: {}", method, ex)
            raise BackendUnavailableError(f"{method}: {ex}") from ex
        if response.is_error:
            error = _error_for_status(method, response)
            logger.warning("Backend call {} rejected: {}", method, error)
            raise error
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as ex:
            raise BackendUnavailableError(f"{method}: invalid JSON response") from ex

    async def fetch_all_pictures(self) -> list[Picture]:
        return [picture_from_json(p) for p in (await self._call("GetIndexedPictures") or [])]

    async def fetch_picture_count(self) -> int:
        return int(await self._call("GetPictureCount") or 0)

    async def search_pictures(self, query: TagQuery) -> list[Picture]:
        data = await self._call("SearchPicturesAdvanced", query.to_payload())
        return [picture_from_json(p) for p in (data or [])]

    async def delete_picture(self, path: str, delete_from_disk: bool) -> None:
        await self._call("DeletePicture", path, delete_from_disk)

    async def fetch_all_tags(self) -> list[Tag]:
        return [tag_from_json(t) for t in (await self._call("GetAllTags") or [])]

    async def fetch_all_tags_with_count(self) -> list[TagWithCount]:
        data = await self._call("GetAllTagsWithCount")
        return [tag_with_count_from_json(t) for t in (data or [])]

    async def fetch_tags_for_picture(self, path: str) -> list[Tag]:
        data = await self._call("GetTagsForPicture", path)
        return [tag_from_json(t) for t in (data or [])]

    async def add_tag_to_picture(self, path: str, tag_name: str) -> None:
        await self._call("AddTagToPicture", path, tag_name)

    async def remove_tag_from_picture(self, path: str, tag_name: str) -> None:
        await self._call("RemoveTagFromPicture", path, tag_name)

    async def create_tag(self, name: str, tag_type: TagType, color: str) -> None:
        await self._call("CreateTag", name, tag_type.value, color)

    async def update_tag(self, name: str, tag_type: TagType, color: str) -> None:
        await self._call("UpdateTag", name, tag_type.value, color)

    async def delete_tag(self, name: str) -> None:
        await self._call("DeleteTag", name)

    async def list_watched_folders(self) -> list[WatchedFolder]:
        return [folder_from_json(f) for f in (await self._call("GetWatchedFolders") or [])]

    async def add_watched_folder(self, path: str, name: str, auto_reindex: bool) -> None:
        await self._call("AddWatchedFolder", path, name, auto_reindex)

    async def remove_watched_folder(self, path: str) -> None:
        await self._call("RemoveWatchedFolder", path)

    async def index_folder(self, path: str) -> int:
        return int(await self._call("IndexFolder", path) or 0)

    async def update_watched_folder(self, path: str, name: str, auto_reindex: bool) -> None:
        await self._call("UpdateWatchedFolder", path, name, auto_reindex)

    async def index_watched_folder(self, path: str) -> int:
        return int(await self._call("IndexWatchedFolder", path) or 0)

    async def reindex_all_watched_folders(self) -> int:
        return int(await self._call("ReindexAllWatchedFolders") or 0)
