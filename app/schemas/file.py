"""File schemas for request/response serialization."""

from uuid import UUID

from pydantic import Field

from .base import BaseSchema, RecordSchema


class FileMetadataResponse(RecordSchema):
    """File metadata as shown in listings; the owner is implied by the caller."""

    name: str
    size: int
    mime_type: str
    path: str
    storage_provider: str


class FileDetailResponse(FileMetadataResponse):
    """Single file, including its owner."""

    user_id: UUID


class FileListResponse(BaseSchema):
    files: list[FileMetadataResponse]
    count: int


class BulkDeleteRequest(BaseSchema):
    file_ids: list[UUID] = Field(..., min_length=1, max_length=100)


class BulkDeleteFailure(BaseSchema):
    file_id: UUID
    reason: str


class BulkDeleteResponse(BaseSchema):
    deleted_count: int
    failures: list[BulkDeleteFailure]


class CategoryStats(BaseSchema):
    count: int = 0
    size: int = 0


class StorageStatsResponse(BaseSchema):
    """Storage usage of one user."""

    total_files: int
    total_size: int
    total_size_formatted: str
    quota: int
    quota_formatted: str
    remaining: int
    remaining_formatted: str
    used_percentage: float
    by_category: dict[str, CategoryStats]


class DownloadUrlResponse(BaseSchema):
    url: str
    expires_in: int | None = None
    signed: bool
