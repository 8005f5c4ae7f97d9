"""Key-based removal shared by the gallery lists and the viewer sequence."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")


def remove_by_key(
    items: Sequence[T], key: str, key_of: Callable[[T], str]
) -> tuple[list[T], int | None]:
    """Return `items` without the entries whose key equals `key`.

    The second element is the index of the first removed entry, or None when
    nothing matched (the input is then returned as an equal new list).
    """
    kept: list[T] = []
    removed_at: int | None = None
    for idx, item in enumerate(items):
        if key_of(item) == key:
            if removed_at is None:
                removed_at = idx
            continue
        kept.append(item)
    return kept, removed_at


def cursor_after_removal(cursor: int, removed_at: int, new_length: int) -> int | None:
    """Return the cursor position once the item at `removed_at` is gone.

    Removing the item under the cursor keeps the index (pointing at the next
    item) unless it was the tail, in which case it moves to the new tail.
    Removing an item before the cursor shifts it left. None means empty.
    """
    if new_length <= 0:
        return None
    if removed_at < cursor:
        cursor -= 1
    return min(cursor, new_length - 1)
