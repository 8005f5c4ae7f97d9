from __future__ import annotations

import asyncio
from pathlib import Path

from loguru import logger

from app.viewmodels.folders_vm import FoldersVM
from app.viewmodels.gallery_vm import GalleryVM
from app.viewmodels.search_vm import SearchVM
from app.views.formatting import format_count
from core.services.interfaces import GalleryBackend
from infrastructure.http_backend import HttpGalleryBackend
from infrastructure.logging import init_logging
from infrastructure.memory_backend import InMemoryGalleryBackend
from infrastructure.settings import JsonSettings


BASE_DIR = Path(__file__).parent


def _load_settings() -> JsonSettings:
    path = BASE_DIR / "settings.json"
    if path.exists():
        return JsonSettings(path)
    return JsonSettings.defaults()


def build_backend(settings: JsonSettings) -> GalleryBackend:
    """Create the backend named by `backend.kind` (``http`` or ``memory``)."""
    kind = str(settings.get("backend.kind", "http")).lower()
    if kind == "memory":
        seed = settings.get("backend.seed_file")
        if seed and (BASE_DIR / seed).exists():
            return InMemoryGalleryBackend.from_json_file(BASE_DIR / seed)
        return InMemoryGalleryBackend()
    return HttpGalleryBackend(
        base_url=str(settings.get("backend.base_url")),
        timeout=settings.get_float("backend.timeout_seconds", 30.0),
    )


async def run(settings: JsonSettings) -> int:
    backend = build_backend(settings)
    try:
        return await _summarize(backend, settings)
    finally:
        aclose = getattr(backend, "aclose", None)
        if aclose is not None:
            await aclose()


async def _summarize(backend: GalleryBackend, settings: JsonSettings) -> int:
    gallery = GalleryVM(backend, verify_results=settings.get_bool("search.verify_results"))
    search = SearchVM(gallery)
    folders = FoldersVM(backend)

    result = await gallery.load()
    if not result.ok:
        logger.error("Startup load failed: {}", result.message)
        return 1
    tags_result = await search.load_tags()
    if not tags_result.ok:
        logger.warning("Tag catalog unavailable: {}", tags_result.message)
    folders_result = await folders.load()
    if not folders_result.ok:
        logger.warning("Watched folders unavailable: {}", folders_result.message)

    logger.info("Gallery ready: {}", format_count(gallery.total_count))
    for tag_type, tags in search.tags_by_type().items():
        logger.info("{} tags: {}", tag_type.value, ", ".join(t.name for t in tags) or "-")
    for folder in folders.folders:
        logger.info("Watched folder {}: {}", folder.path, format_count(folder.picture_count))
    return 0


def main() -> int:
    settings = _load_settings()
    init_logging(
        settings.get("logging.dir"),
        level=str(settings.get("logging.level", "INFO")),
        console=settings.get_bool("logging.console"),
    )
    return asyncio.run(run(settings))


if __name__ == "__main__":
    raise SystemExit(main())
