"""JSON encoding/decoding of pictures, tags and folders.

Field names follow the backend's camelCase JSON. Decoding is lenient: missing
fields take their defaults and `null` lists are treated as empty.
"""

from __future__ import annotations

from typing import Any

from core.models import Picture, Tag, TagType, TagWithCount, WatchedFolder
from infrastructure.utils import format_iso_datetime, parse_iso_datetime


def tag_from_json(data: dict[str, Any]) -> Tag:
    return Tag(
        name=str(data.get("name", "")),
        type=TagType.parse(data.get("type")),
        color=data.get("color") or None,
    )


def tag_to_json(tag: Tag) -> dict[str, Any]:
    return {"name": tag.name, "type": tag.type.value, "color": tag.color or ""}


def tag_with_count_from_json(data: dict[str, Any]) -> TagWithCount:
    return TagWithCount(tag=tag_from_json(data), picture_count=int(data.get("pictureCount") or 0))


def picture_from_json(data: dict[str, Any]) -> Picture:
    return Picture(
        path=str(data["path"]),
        filename=str(data.get("filename") or ""),
        size=int(data.get("size") or 0),
        width=int(data.get("width") or 0),
        height=int(data.get("height") or 0),
        created_at=parse_iso_datetime(data.get("createdAt")),
        modified_at=parse_iso_datetime(data.get("modifiedAt")),
        indexed_at=parse_iso_datetime(data.get("indexedAt")),
        tags=tuple(tag_from_json(t) for t in (data.get("tags") or [])),
    )


def picture_to_json(picture: Picture) -> dict[str, Any]:
    return {
        "path": picture.path,
        "filename": picture.filename,
        "size": picture.size,
        "width": picture.width,
        "height": picture.height,
        "createdAt": format_iso_datetime(picture.created_at),
        "modifiedAt": format_iso_datetime(picture.modified_at),
        "indexedAt": format_iso_datetime(picture.indexed_at),
        "tags": [tag_to_json(t) for t in picture.tags],
    }


def folder_from_json(data: dict[str, Any]) -> WatchedFolder:
    return WatchedFolder(
        path=str(data["path"]),
        name=str(data.get("name") or ""),
        added_at=parse_iso_datetime(data.get("addedAt")),
        last_indexed_at=parse_iso_datetime(data.get("lastIndexedAt")),
        picture_count=int(data.get("pictureCount") or 0),
        auto_reindex=bool(data.get("autoReindex", False)),
    )
