"""Tests for the HTTP backend client, using httpx's mock transport."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from core.errors import BackendUnavailableError, NotFoundError, ValidationError
from core.models import TagType
from core.query import GroupCriterion, Operator, TagQuery
from infrastructure.http_backend import HttpGalleryBackend

BASE_URL = "http://bridge.test/api"


def _backend(handler) -> HttpGalleryBackend:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpGalleryBackend(BASE_URL, client=client)


def _run(backend: HttpGalleryBackend, coro_factory):
    async def go():
        async with backend:
            return await coro_factory(backend)

    return asyncio.run(go())


def test_search_posts_four_group_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=[
                {
                    "path": "/p/a.jpg",
                    "filename": "a.jpg",
                    "size": 10,
                    "createdAt": "2024-05-01T10:00:00Z",
                    "modifiedAt": "0001-01-01T00:00:00Z",
                    "tags": [{"name": "Alice", "type": "person", "color": "#3B82F6"}],
                }
            ],
        )

    query = TagQuery().replace_group(
        TagType.PERSON, GroupCriterion(frozenset({"Alice"}), Operator.AND)
    )
    pictures = _run(_backend(handler), lambda b: b.search_pictures(query))

    assert seen["url"] == f"{BASE_URL}/SearchPicturesAdvanced"
    (payload,) = seen["body"]
    assert payload["persons"] == {"tags": ["Alice"], "operator": "AND"}
    assert set(payload) == {"persons", "locations", "events", "others"}
    assert pictures[0].tag_names == frozenset({"Alice"})
    assert pictures[0].created_at.year == 2024
    assert pictures[0].modified_at is None


def test_arguments_sent_positionally():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path.rsplit("/", 1)[-1], json.loads(request.content)))
        return httpx.Response(200)

    backend = _backend(handler)
    _run(backend, lambda b: b.delete_picture("/p/a.jpg", True))
    assert seen == [("DeletePicture", ["/p/a.jpg", True])]


def test_create_tag_sends_type_value():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, content=b"")

    _run(_backend(handler), lambda b: b.create_tag("Eve", TagType.PERSON, "#112233"))
    assert seen == [["Eve", "person", "#112233"]]


@pytest.mark.parametrize(
    "status,error",
    [
        (404, NotFoundError),
        (400, ValidationError),
        (409, ValidationError),
        (500, BackendUnavailableError),
        (503, BackendUnavailableError),
    ],
)
def test_status_maps_to_error(status, error):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"error": "nope"})

    with pytest.raises(error, match="nope"):
        _run(_backend(handler), lambda b: b.fetch_tags_for_picture("/p/a.jpg"))


def test_transport_error_is_backend_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(BackendUnavailableError):
        _run(_backend(handler), lambda b: b.fetch_all_pictures())


def test_invalid_json_is_backend_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>")

    with pytest.raises(BackendUnavailableError):
        _run(_backend(handler), lambda b: b.fetch_picture_count())


def test_tags_with_count_and_null_lists():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("GetAllTagsWithCount"):
            return httpx.Response(
                200, json=[{"name": "Paris", "type": "location", "pictureCount": 3}]
            )
        return httpx.Response(200, json=None)

    async def both(b: HttpGalleryBackend):
        return await b.fetch_all_tags_with_count(), await b.fetch_all_tags()

    counted, tags = _run(_backend(handler), both)
    assert counted[0].tag.type is TagType.LOCATION
    assert counted[0].picture_count == 3
    assert tags == []


def test_watched_folder_calls():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        seen.append((method, json.loads(request.content)))
        if method == "GetWatchedFolders":
            return httpx.Response(
                200,
                json=[
                    {
                        "path": "/photos",
                        "name": "Photos",
                        "addedAt": "2024-05-01T10:00:00Z",
                        "lastIndexedAt": "0001-01-01T00:00:00Z",
                        "pictureCount": 12,
                        "autoReindex": True,
                    }
                ],
            )
        if method in ("IndexWatchedFolder", "ReindexAllWatchedFolders"):
            return httpx.Response(200, json=12)
        return httpx.Response(200)

    async def scenario(b: HttpGalleryBackend):
        await b.update_watched_folder("/photos", "Photos", True)
        indexed = await b.index_watched_folder("/photos")
        total = await b.reindex_all_watched_folders()
        return indexed, total, await b.list_watched_folders()

    indexed, total, folders = _run(_backend(handler), scenario)
    assert (indexed, total) == (12, 12)
    assert seen[:3] == [
        ("UpdateWatchedFolder", ["/photos", "Photos", True]),
        ("IndexWatchedFolder", ["/photos"]),
        ("ReindexAllWatchedFolders", []),
    ]
    assert folders[0].picture_count == 12
    assert folders[0].last_indexed_at is None
