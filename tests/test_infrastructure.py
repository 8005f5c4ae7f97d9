"""Tests for settings, timestamp helpers, the JSON codec and logging setup."""

from __future__ import annotations

from datetime import datetime, timezone
import json

from loguru import logger
import pytest

from core.models import TagType
from infrastructure.codec import folder_from_json, picture_from_json, picture_to_json
from infrastructure.logging import find_latest_log_file, init_logging
from infrastructure.settings import JsonSettings
from infrastructure.utils import format_iso_datetime, parse_iso_datetime


class TestSettings:
    def test_file_overrides_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"backend": {"kind": "memory"}}), encoding="utf-8")
        settings = JsonSettings(path)
        assert settings.get("backend.kind") == "memory"
        assert settings.get("backend.base_url") == "http://127.0.0.1:34115/api"
        assert settings.get_float("backend.timeout_seconds", 1.0) == 30.0

    def test_missing_key_returns_default(self):
        settings = JsonSettings.defaults()
        assert settings.get("nope.deeper", "x") == "x"
        assert settings.get_bool("search.verify_results") is False

    def test_string_booleans(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"logging": {"console": "yes"}}), encoding="utf-8")
        assert JsonSettings(path).get_bool("logging.console")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            JsonSettings(tmp_path / "absent.json")


class TestTimestamps:
    @pytest.mark.parametrize("value", [None, "", "0001-01-01T00:00:00Z", "not a date"])
    def test_unusable_values(self, value):
        assert parse_iso_datetime(value) is None

    def test_utc_suffix(self):
        assert parse_iso_datetime("2024-05-01T10:00:00Z") == datetime(
            2024, 5, 1, 10, tzinfo=timezone.utc
        )

    def test_nanoseconds_are_trimmed(self):
        dt = parse_iso_datetime("2024-05-01T10:00:00.123456789+02:00")
        assert dt.microsecond == 123456
        assert dt.utcoffset().total_seconds() == 7200

    def test_nanoseconds_with_utc_suffix_keep_timezone(self):
        dt = parse_iso_datetime("2024-05-01T10:00:00.999999999Z")
        assert dt == datetime(2024, 5, 1, 10, 0, 0, 999999, tzinfo=timezone.utc)

    def test_short_fraction_is_padded(self):
        dt = parse_iso_datetime("2024-05-01T10:00:00.5-03:00")
        assert dt.microsecond == 500000
        assert dt.utcoffset().total_seconds() == -3 * 3600

    def test_format(self):
        assert format_iso_datetime(None) == "0001-01-01T00:00:00Z"
        dt = datetime(2024, 5, 1, 10, tzinfo=timezone.utc)
        assert format_iso_datetime(dt) == "2024-05-01T10:00:00Z"


class TestCodec:
    def test_picture_defaults_for_missing_fields(self):
        pic = picture_from_json({"path": "/p/x.jpg", "tags": None})
        assert pic.filename == ""
        assert pic.tags == ()
        assert pic.created_at is None

    def test_picture_json_roundtrip(self):
        data = {
            "path": "/p/x.jpg",
            "filename": "x.jpg",
            "size": 2048,
            "width": 640,
            "height": 480,
            "createdAt": "2024-05-01T10:00:00Z",
            "modifiedAt": "2024-05-02T10:00:00Z",
            "indexedAt": "0001-01-01T00:00:00Z",
            "tags": [{"name": "Lyon", "type": "location", "color": "#F97316"}],
        }
        pic = picture_from_json(data)
        assert pic.tags[0].type is TagType.LOCATION
        assert picture_to_json(pic) == data

    def test_unknown_tag_type_falls_back_to_other(self):
        pic = picture_from_json({"path": "/p", "tags": [{"name": "x", "type": "mystery"}]})
        assert pic.tags[0].type is TagType.OTHER

    def test_folder(self):
        folder = folder_from_json({"path": "/photos", "pictureCount": 7, "autoReindex": True})
        assert folder.picture_count == 7
        assert folder.auto_reindex
        assert folder.last_indexed_at is None


def test_init_logging_writes_to_directory(tmp_path):
    init_logging(log_dir=str(tmp_path), level="DEBUG")
    try:
        assert find_latest_log_file(str(tmp_path)) is not None
    finally:
        logger.remove()
