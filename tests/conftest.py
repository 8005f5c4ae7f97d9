# tests/conftest.py
# Shared fixtures: a small tag catalog, pictures and an in-memory backend

from __future__ import annotations

import asyncio

import pytest

from app.viewmodels.gallery_vm import GalleryVM
from core.models import Picture, Tag, TagType
from infrastructure.memory_backend import InMemoryGalleryBackend

ALICE = Tag("Alice", TagType.PERSON, "#3B82F6")
BOB = Tag("Bob", TagType.PERSON, "#22C55E")
PARIS = Tag("Paris", TagType.LOCATION, "#EF4444")
LYON = Tag("Lyon", TagType.LOCATION, "#F97316")
WEDDING = Tag("Wedding", TagType.EVENT, "#8B5CF6")
FAVORITE = Tag("Favorite", TagType.OTHER, "#EAB308")

CATALOG = [ALICE, BOB, PARIS, LYON, WEDDING, FAVORITE]


def make_picture(name: str, *tags: Tag) -> Picture:
    return Picture(path=f"/photos/{name}.jpg", filename=f"{name}.jpg", size=1024, tags=tuple(tags))


@pytest.fixture
def catalog() -> list[Tag]:
    return list(CATALOG)


@pytest.fixture
def pictures() -> list[Picture]:
    """Four pictures: A(Alice, Paris), B(Alice, Bob, Paris), C(Bob, Lyon, Wedding), D()."""
    return [
        make_picture("a", ALICE, PARIS),
        make_picture("b", ALICE, BOB, PARIS),
        make_picture("c", BOB, LYON, WEDDING),
        make_picture("d"),
    ]


@pytest.fixture
def backend(pictures: list[Picture], catalog: list[Tag]) -> InMemoryGalleryBackend:
    return InMemoryGalleryBackend(pictures=pictures, tags=catalog)


@pytest.fixture
def gallery(backend: InMemoryGalleryBackend) -> GalleryVM:
    return GalleryVM(backend, verify_results=True)


class GatedBackend(InMemoryGalleryBackend):
    """In-memory backend whose calls can be held open.

    `delete_gate` suspends `delete_picture` before it runs; `search_gate`
    suspends `search_pictures` after the result has been computed.
    """

    delete_gate: asyncio.Event | None = None
    search_gate: asyncio.Event | None = None

    async def delete_picture(self, path: str, delete_from_disk: bool) -> None:
        if self.delete_gate is not None:
            await self.delete_gate.wait()
        await super().delete_picture(path, delete_from_disk)

    async def search_pictures(self, query):
        results = await super().search_pictures(query)
        if self.search_gate is not None:
            await self.search_gate.wait()
        return results


@pytest.fixture
def gated_backend(pictures: list[Picture], catalog: list[Tag]) -> GatedBackend:
    return GatedBackend(pictures=pictures, tags=catalog)
