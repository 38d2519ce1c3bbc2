"""
Unit tests for the shared file helpers.

Covers category detection, size caps, storage key derivation and size
formatting.
"""

import re
import uuid
from datetime import datetime, timezone

import pytest

from app.core.config import MEGABYTE, Settings
from app.shared.file_utils import (
    FileCategory,
    format_file_size,
    generate_storage_key,
    generate_unique_filename,
    get_base_name,
    get_file_category,
    get_file_extension,
    get_filename_without_extension,
    get_max_file_size,
    normalize_mime_type,
    sanitize_filename,
)


class TestCategories:
    """Test cases for content type handling."""

    @pytest.mark.parametrize(
        "mime_type,expected",
        [
            ("image/png", FileCategory.image),
            ("video/mp4", FileCategory.video),
            ("application/pdf", FileCategory.document),
            ("text/csv", FileCategory.document),
            ("application/zip", FileCategory.archive),
            ("application/x-msdownload", None),
            (None, None),
        ],
    )
    def test_get_file_category(self, mime_type, expected):
        assert get_file_category(mime_type) == expected

    def test_normalize_mime_type_drops_parameters(self):
        assert normalize_mime_type("Text/Plain; charset=UTF-8") == "text/plain"
        assert get_file_category("text/plain; charset=utf-8") == FileCategory.document

    def test_video_gets_larger_cap(self):
        config = Settings(max_file_size=10 * MEGABYTE, max_video_size=50 * MEGABYTE)

        assert get_max_file_size(FileCategory.video, config) == 50 * MEGABYTE
        assert get_max_file_size(FileCategory.image, config) == 10 * MEGABYTE
        assert get_max_file_size(FileCategory.archive, config) == 10 * MEGABYTE


class TestFilenames:
    """Test cases for filename helpers."""

    def test_get_base_name_strips_directories(self):
        assert get_base_name("../../etc/passwd") == "passwd"
        assert get_base_name("C:\\Users\\me\\report.pdf") == "report.pdf"

    def test_extension_keeps_case_and_dot(self):
        assert get_file_extension("Holiday.JPG") == ".JPG"
        assert get_file_extension("archive") == ""
        assert get_filename_without_extension("my report.final.pdf") == "my report.final"

    def test_sanitize_filename(self):
        assert sanitize_filename("my report (1)") == "my_report__1_"
        assert sanitize_filename("") == "file"
        assert len(sanitize_filename("a" * 300)) == 100

    def test_unique_filename_keeps_extension(self):
        first = generate_unique_filename("photo.png")
        second = generate_unique_filename("photo.png")

        assert first.endswith(".png")
        assert first != second


class TestStorageKey:
    """Test cases for storage key derivation."""

    def test_key_layout(self):
        user_id = uuid.uuid4()
        now = datetime(2025, 3, 9, 12, 0, 0, tzinfo=timezone.utc)

        key = generate_storage_key(user_id, "My Photo.png", now=now, token=42)

        assert key == f"users/{user_id}/2025/03/{int(now.timestamp() * 1000)}-42-My_Photo.png"

    def test_naive_datetime_is_treated_as_utc(self):
        aware = datetime(2025, 1, 31, 23, 59, tzinfo=timezone.utc)
        naive = aware.replace(tzinfo=None)

        assert generate_storage_key("u", "a.txt", now=naive, token=1) == generate_storage_key(
            "u", "a.txt", now=aware, token=1
        )

    def test_path_components_are_discarded(self):
        key = generate_storage_key("u1", "../../secret/evil.sh", token=7)

        assert ".." not in key
        assert key.startswith("users/u1/")
        assert key.endswith("-7-evil.sh")

    def test_random_component(self):
        key = generate_storage_key("u1", "notes.txt")

        assert re.fullmatch(r"users/u1/\d{4}/\d{2}/\d+-\d{1,9}-notes\.txt", key)


class TestSizes:
    """Test cases for size formatting."""

    @pytest.mark.parametrize(
        "size,expected",
        [
            (0, "0 Bytes"),
            (512, "512 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (int(1.5 * MEGABYTE), "1.5 MB"),
            (10 * 1024 * MEGABYTE, "10 GB"),
        ],
    )
    def test_format_file_size(self, size, expected):
        assert format_file_size(size) == expected
