"""Tests for key-based removal and display formatting helpers."""

from __future__ import annotations

from datetime import datetime

import pytest

from app.views.formatting import format_count, format_date, format_dimensions, format_file_size
from conftest import make_picture
from core.removal import cursor_after_removal, remove_by_key


def test_remove_by_key_reports_first_index():
    kept, at = remove_by_key(["a", "b", "a", "c"], "a", lambda s: s)
    assert kept == ["b", "c"]
    assert at == 0


def test_remove_by_key_missing():
    items = ["a", "b"]
    kept, at = remove_by_key(items, "z", lambda s: s)
    assert at is None
    assert kept == items
    assert kept is not items


@pytest.mark.parametrize(
    "cursor,removed_at,new_length,expected",
    [
        (2, 2, 2, 1),
        (1, 1, 2, 1),
        (2, 0, 2, 1),
        (0, 2, 2, 0),
        (0, 0, 0, None),
    ],
)
def test_cursor_after_removal(cursor, removed_at, new_length, expected):
    assert cursor_after_removal(cursor, removed_at, new_length) == expected


@pytest.mark.parametrize(
    "size,text",
    [(512, "512 B"), (1536, "1.5 KB"), (3 * 1024 * 1024 + 200 * 1024, "3.2 MB")],
)
def test_format_file_size(size, text):
    assert format_file_size(size) == text


def test_format_date_and_dimensions():
    assert format_date(None) == "Unknown"
    assert format_date(datetime(2024, 5, 1, 10, 30)) == "2024-05-01"
    pic = make_picture("x")
    assert format_dimensions(pic) == "Unknown"
    pic.width, pic.height = 640, 480
    assert format_dimensions(pic) == "640 x 480"


def test_format_count():
    assert format_count(1) == "1 picture"
    assert format_count(0) == "0 pictures"
