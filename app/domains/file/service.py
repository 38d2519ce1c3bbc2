"""File service layer with business logic."""

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.exceptions.file import (
    FileDeleteError,
    FileDownloadError,
    FilePermissionError,
    FileRecordNotFoundError,
    FileRestoreError,
    FileTooLargeError,
    FileTypeNotAllowedError,
    FileUploadError,
    FileValidationError,
    InvalidFileNameError,
    StorageQuotaExceededError,
)
from app.repositories.file import FileRepository
from app.shared.file_utils import (
    CATEGORY_MIME_TYPES,
    FileCategory,
    format_file_size,
    generate_storage_key,
    get_base_name,
    get_file_category,
    get_max_file_size,
    normalize_mime_type,
)
from app.storage.base import IncomingFile, ProviderKind, UploadResult
from app.storage.service import StorageService
from models.file import File

module_logger = logging.getLogger(__name__)


@dataclass
class BulkDeleteFailure:
    file_id: Any
    reason: str


@dataclass
class BulkDeleteResult:
    deleted_count: int = 0
    failures: list[BulkDeleteFailure] = field(default_factory=list)


@dataclass
class DownloadLink:
    """Where the content of a file can be fetched from."""

    file: File
    url: str
    signed: bool
    expires_in: int | None = None

    @property
    def is_local(self) -> bool:
        return self.file.storage_provider == ProviderKind.LOCAL.value


class FileService:
    """
    Upload, listing and deletion of user files.

    Every operation is scoped to the calling user; the caller's identity is
    trusted as given. Storage and metadata writes are not wrapped in one
    transaction: a failed metadata write after a successful upload is
    compensated by deleting the stored object.
    """

    def __init__(
        self,
        db: AsyncSession,
        storage: StorageService,
        config: Settings,
        logger: logging.Logger | None = None,
    ):
        self.db = db
        self.storage = storage
        self.config = config
        self.files = FileRepository(db)
        self.logger = logger or module_logger

    # ----- upload --------------------------------------------------------------

    async def upload_file(self, incoming: IncomingFile, user_id: UUID) -> File:
        """
        Validate, store and record a new file.

        :param incoming: The staged upload.
        :param user_id: Owner of the new file.
        :return: The created metadata row.
        :raises FileValidationError: Type, size or name rejected; nothing was written.
        :raises StorageQuotaExceededError: The upload would exceed the quota; nothing was written.
        :raises FileUploadError: Storage or metadata write failed.
        """
        name, mime_type = self._validate(incoming)
        await self._check_quota(user_id, incoming.size)

        key = generate_storage_key(user_id, name)
        log_context = {"user_id": str(user_id), "storage_key": key}

        try:
            result = await self.storage.upload(incoming, key)
        except Exception as e:
            self.logger.error("Storage upload failed: %s", e, extra=log_context)
            raise FileUploadError(str(e), details={"storage_key": key}) from e

        try:
            record = await self.files.create(
                user_id=user_id,
                name=name,
                size=incoming.size,
                mime_type=mime_type,
                path=result.url,
                storage_key=result.key,
                storage_provider=result.provider_kind.value,
            )
        except (SQLAlchemyError, ValueError) as e:
            self.logger.error("Failed to save file metadata: %s", e, extra=log_context)
            await self._discard_upload(result)
            raise FileUploadError(
                "Failed to save file metadata", details={"storage_key": key}
            ) from e

        self.logger.info(
            "File uploaded",
            extra={
                **log_context,
                "file_id": str(record.id),
                "size": record.size,
                "storage_provider": record.storage_provider,
            },
        )
        return record

    def _validate(self, incoming: IncomingFile) -> tuple[str, str]:
        """Return the display name and normalized content type of a valid upload."""
        name = get_base_name(incoming.original_name or "").strip()
        if not name:
            raise InvalidFileNameError("File name is required")
        if len(name) > self.config.max_filename_length:
            raise InvalidFileNameError(
                "File name is too long",
                details={"length": len(name), "max_length": self.config.max_filename_length},
            )

        mime_type = normalize_mime_type(incoming.content_type)
        category = get_file_category(mime_type)
        if category is None:
            raise FileTypeNotAllowedError(mime_type)

        max_size = get_max_file_size(category, self.config)
        if incoming.size > max_size:
            raise FileTooLargeError(incoming.size, max_size, category.value)

        return name, mime_type

    async def _check_quota(self, user_id: UUID, size: int) -> None:
        try:
            used = await self.files.total_size_for_user(user_id)
        except SQLAlchemyError as e:
            # Quota is best effort; a failing aggregate must not block uploads
            self.logger.warning(
                "Storage quota check failed, allowing upload: %s", e, extra={"user_id": str(user_id)}
            )
            await self.db.rollback()
            return

        quota = self.config.storage_quota_bytes
        if used + size > quota:
            raise StorageQuotaExceededError(used=used, size=size, quota=quota)

    async def _discard_upload(self, result: UploadResult) -> None:
        """Compensate a failed metadata write by removing the stored object."""
        try:
            removed = await self.storage.delete(result.key)
        except Exception as e:
            self.logger.error(
                "Rollback delete failed, storage object orphaned: %s",
                e,
                extra={"storage_key": result.key, "storage_provider": result.provider_kind.value},
            )
            return

        if not removed:
            self.logger.warning(
                "Rollback delete found no storage object", extra={"storage_key": result.key}
            )

    # ----- reads ---------------------------------------------------------------

    async def get_user_files(self, user_id: UUID, file_type: str | None = None) -> list[File]:
        """Active files of a user, newest first, optionally narrowed to one category."""
        criteria = []
        if file_type:
            try:
                category = FileCategory(file_type.lower())
            except ValueError as e:
                raise FileValidationError(
                    "Invalid file type filter",
                    details={"file_type": file_type, "allowed": [c.value for c in FileCategory]},
                ) from e
            criteria.append(File.mime_type.in_(CATEGORY_MIME_TYPES[category]))

        files = await self.files.list_for_user(user_id, *criteria)

        self.logger.info(
            "Listed files",
            extra={
                "user_id": str(user_id),
                "file_type": file_type,
                "summary": self._summarize(files),
            },
        )
        return files

    @staticmethod
    def _summarize(files: list[File]) -> dict[str, dict[str, int]]:
        summary = {category.value: {"count": 0, "size": 0} for category in FileCategory}
        for record in files:
            category = get_file_category(record.mime_type)
            if category is None:
                continue
            summary[category.value]["count"] += 1
            summary[category.value]["size"] += record.size
        return summary

    async def get_file_by_id(self, file_id: UUID, user_id: UUID) -> File:
        """Get an active file, checking existence before ownership."""
        record = await self.files.get(file_id)
        if record is None:
            raise FileRecordNotFoundError(file_id)
        if str(record.user_id) != str(user_id):
            raise FilePermissionError(file_id, user_id)
        return record

    async def get_user_storage_stats(self, user_id: UUID) -> dict[str, Any]:
        """Usage totals, per-category breakdown and remaining quota."""
        by_category = {category.value: {"count": 0, "size": 0} for category in FileCategory}
        total_files = 0
        total_size = 0

        for mime_type, count, size in await self.files.usage_by_mime_type(user_id):
            total_files += count
            total_size += size
            category = get_file_category(mime_type)
            if category is not None:
                by_category[category.value]["count"] += count
                by_category[category.value]["size"] += size

        quota = self.config.storage_quota_bytes
        remaining = max(quota - total_size, 0)
        return {
            "total_files": total_files,
            "total_size": total_size,
            "total_size_formatted": format_file_size(total_size),
            "quota": quota,
            "quota_formatted": format_file_size(quota),
            "remaining": remaining,
            "remaining_formatted": format_file_size(remaining),
            "used_percentage": round(total_size / quota * 100, 2) if quota else 0.0,
            "by_category": by_category,
        }

    async def get_download_url(
        self, file_id: UUID, user_id: UUID, expires_in: int | None = None
    ) -> DownloadLink:
        """Signed URL for files in S3, the stored locator otherwise."""
        record = await self.get_file_by_id(file_id, user_id)

        if record.storage_provider != ProviderKind.REMOTE.value or not self.storage.supports_signed_urls:
            return DownloadLink(file=record, url=record.path, signed=False)

        expires_in = expires_in or self.config.presigned_url_expire_seconds
        try:
            url = await self.storage.generate_presigned_download_url(record.storage_key, expires_in)
        except Exception as e:
            self.logger.error(
                "Failed to sign download URL: %s", e, extra={"file_id": str(file_id)}
            )
            raise FileDownloadError(str(e), details={"file_id": str(file_id)}) from e

        return DownloadLink(file=record, url=url, signed=True, expires_in=expires_in)

    # ----- deletes -------------------------------------------------------------

    async def delete_file(self, file_id: UUID, user_id: UUID) -> None:
        """
        Delete the storage object, then tombstone the metadata row.

        If storage deletion fails the row is kept so the locator is not lost.
        """
        record = await self.get_file_by_id(file_id, user_id)
        log_context = {"file_id": str(file_id), "storage_key": record.storage_key}

        try:
            removed = await self.storage.delete(record.storage_key)
        except Exception as e:
            self.logger.error("Failed to delete storage object: %s", e, extra=log_context)
            raise FileDeleteError(str(e), details={"file_id": str(file_id)}) from e

        if not removed:
            self.logger.warning("Storage object already absent, deleting metadata", extra=log_context)

        try:
            await self.files.delete(record.id)
        except SQLAlchemyError as e:
            self.logger.error("Failed to delete file metadata: %s", e, extra=log_context)
            raise FileDeleteError(
                "Failed to delete file metadata", details={"file_id": str(file_id)}
            ) from e

        self.logger.info("File deleted", extra={**log_context, "user_id": str(user_id)})

    async def delete_multiple_files(self, file_ids: list[UUID], user_id: UUID) -> BulkDeleteResult:
        """Delete files one after another, collecting per-file failures."""
        result = BulkDeleteResult()

        for file_id in file_ids:
            try:
                await self.delete_file(file_id, user_id)
            except FileRecordNotFoundError:
                result.failures.append(BulkDeleteFailure(file_id, "not found"))
            except FilePermissionError:
                result.failures.append(BulkDeleteFailure(file_id, "forbidden"))
            except FileDeleteError as e:
                result.failures.append(BulkDeleteFailure(file_id, e.reason))
            except SQLAlchemyError as e:
                self.logger.error(
                    "File lookup failed during bulk delete: %s", e, extra={"file_id": str(file_id)}
                )
                await self.db.rollback()
                result.failures.append(BulkDeleteFailure(file_id, "database error"))
            else:
                result.deleted_count += 1

        self.logger.info(
            "Bulk delete finished",
            extra={
                "user_id": str(user_id),
                "requested": len(file_ids),
                "deleted": result.deleted_count,
                "failed": len(result.failures),
            },
        )
        return result

    async def restore_file(self, file_id: UUID, user_id: UUID) -> File:
        """
        Bring a deleted file back.

        Only possible while its storage object still exists and the restored
        size fits in the quota. Restoring an active file returns it unchanged.
        """
        record = await self.files.find_one_with_deleted(File.id == file_id)
        if record is None:
            raise FileRecordNotFoundError(file_id)
        if str(record.user_id) != str(user_id):
            raise FilePermissionError(file_id, user_id)
        if not record.is_deleted:
            return record

        try:
            present = await self.storage.exists(record.storage_key)
        except Exception as e:
            self.logger.error(
                "Storage check failed during restore: %s", e, extra={"file_id": str(file_id)}
            )
            raise FileRestoreError(file_id, "storage unavailable") from e

        if not present:
            raise FileRestoreError(file_id, "storage object no longer exists")

        # A failed quota aggregate rolls the session back and expires ``record``
        record_id, size = record.id, record.size
        await self._check_quota(user_id, size)

        restored = await self.files.restore(record_id)
        self.logger.info("File restored", extra={"file_id": str(file_id), "user_id": str(user_id)})
        return restored
