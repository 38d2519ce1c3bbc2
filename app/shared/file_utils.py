"""File helpers shared by the storage layer and the file service.

Covers the content-type allow-list and its categories, per-category size caps,
storage key derivation and size formatting.
"""

import re
import secrets
import time
from datetime import datetime, timezone
from enum import Enum
from pathlib import PurePosixPath, PureWindowsPath

from app.core.config import Settings


class FileCategory(str, Enum):
    image = "image"
    video = "video"
    document = "document"
    archive = "archive"


IMAGE_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    }
)

VIDEO_MIME_TYPES = frozenset(
    {
        "video/mp4",
        "video/mpeg",
        "video/quicktime",  # .mov
        "video/x-msvideo",  # .avi
        "video/x-matroska",  # .mkv
        "video/webm",
        "video/x-flv",
        "video/3gpp",
        "video/3gpp2",
    }
)

DOCUMENT_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "text/plain",
        "text/csv",
    }
)

ARCHIVE_MIME_TYPES = frozenset({"application/zip"})

CATEGORY_MIME_TYPES: dict[FileCategory, frozenset[str]] = {
    FileCategory.image: IMAGE_MIME_TYPES,
    FileCategory.video: VIDEO_MIME_TYPES,
    FileCategory.document: DOCUMENT_MIME_TYPES,
    FileCategory.archive: ARCHIVE_MIME_TYPES,
}


MAX_SANITIZED_NAME_LENGTH = 100

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def normalize_mime_type(mime_type: str | None) -> str:
    """Lower-case a content type and drop parameters such as ``; charset=utf-8``."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def get_file_category(mime_type: str | None) -> FileCategory | None:
    """Return the category a content type belongs to, or None if not allowed."""
    normalized = normalize_mime_type(mime_type)
    for category, mime_types in CATEGORY_MIME_TYPES.items():
        if normalized in mime_types:
            return category
    return None


def get_max_file_size(category: FileCategory, config: Settings) -> int:
    """Size cap in bytes for a category; videos get the larger cap."""
    if category == FileCategory.video:
        return config.max_video_size
    return config.max_file_size


def get_base_name(filename: str) -> str:
    """Strip any directory part a client may have sent with the filename."""
    return PurePosixPath(PureWindowsPath(filename).name).name


def get_file_extension(filename: str) -> str:
    """Extension including the leading dot, or an empty string."""
    suffix = PurePosixPath(get_base_name(filename)).suffix
    if not suffix:
        return ""
    return "." + _NON_ALNUM.sub("_", suffix[1:])


def get_filename_without_extension(filename: str) -> str:
    base = get_base_name(filename)
    suffix = PurePosixPath(base).suffix
    return base[: -len(suffix)] if suffix else base


def sanitize_filename(name: str) -> str:
    """Replace every non-alphanumeric character with ``_`` and bound the length."""
    sanitized = _NON_ALNUM.sub("_", name)[:MAX_SANITIZED_NAME_LENGTH]
    return sanitized or "file"


def generate_storage_key(
    user_id,
    original_name: str,
    now: datetime | None = None,
    token: int | None = None,
) -> str:
    """
    Derive the storage key of a new object.

    The key is namespaced by owner and upload month and suffixed with a
    millisecond timestamp plus a random token, so two uploads of the same
    name at the same instant do not collide. With ``now`` and ``token`` given
    the result is deterministic.

    :param user_id: Owner of the object.
    :param original_name: Filename as sent by the client.
    :param now: Upload instant; defaults to the current UTC time.
    :param token: Random component; defaults to a fresh random integer.
    :return: ``users/{user}/{YYYY}/{MM}/{ms}-{token}-{name}{ext}``
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if token is None:
        token = secrets.randbelow(10**9)

    if now.tzinfo is None:
        timestamp_ms = int(now.replace(tzinfo=timezone.utc).timestamp() * 1000)
    else:
        timestamp_ms = int(now.timestamp() * 1000)

    base = sanitize_filename(get_filename_without_extension(original_name))
    ext = get_file_extension(original_name)

    return f"users/{user_id}/{now:%Y}/{now:%m}/{timestamp_ms}-{token}-{base}{ext}"


def generate_unique_filename(original_name: str) -> str:
    """Collision-resistant temp filename that keeps the original extension."""
    ext = get_file_extension(original_name)
    return f"upload-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


def format_file_size(size: int) -> str:
    """Format bytes to a human readable size, e.g. ``1.5 MB``."""
    if size <= 0:
        return "0 Bytes"

    units = ["Bytes", "KB", "MB", "GB", "TB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    value = round(value, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {units[index]}"
