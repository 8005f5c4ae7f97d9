"""Display formatting helpers for picture metadata."""

from __future__ import annotations

from datetime import datetime

from core.models import Picture


def format_file_size(size_bytes: int) -> str:
    """Format a byte count as B, KB or MB with one decimal.

    Args:
        size_bytes: Size in bytes

    Returns:
        str: e.g. ``512 B``, ``1.5 KB``, ``3.2 MB``
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def format_date(value: datetime | None) -> str:
    """Format a date for the info panel; 'Unknown' when missing."""
    if value is None:
        return "Unknown"
    return value.strftime("%Y-%m-%d")


def format_dimensions(picture: Picture) -> str:
    if not picture.width or not picture.height:
        return "Unknown"
    return f"{picture.width} x {picture.height}"


def format_count(count: int) -> str:
    """Gallery header count, e.g. ``1 picture`` / ``12 pictures``."""
    return f"{count} {'picture' if count == 1 else 'pictures'}"
