# ruff: noqa: D107
"""File-related exceptions."""

from typing import Any

from .base import AppPermissionError, BaseAppException, ConflictError, NotFoundError, ValidationError


class FileValidationError(ValidationError):
    """Raised when an upload is rejected before any side effect."""

    def __init__(
        self,
        message: str = "File validation failed",
        error_code: str = "FILE_VALIDATION_FAILED",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, error_code=error_code, details=details)


class FileTypeNotAllowedError(FileValidationError):
    """Raised when the content type is not on the allow-list."""

    def __init__(self, mime_type: str):
        super().__init__(
            message="File type is not allowed",
            error_code="FILE_TYPE_NOT_ALLOWED",
            details={"mime_type": mime_type},
        )


class FileTooLargeError(FileValidationError):
    """Raised when a file exceeds the size cap of its category."""

    def __init__(self, size: int, max_size: int, category: str):
        super().__init__(
            message="File size exceeds maximum allowed size",
            error_code="FILE_TOO_LARGE",
            details={"size": size, "max_size": max_size, "category": category},
        )


class InvalidFileNameError(FileValidationError):
    """Raised when the original filename is empty or too long."""

    def __init__(self, message: str = "Invalid file name", details: dict[str, Any] | None = None):
        super().__init__(message=message, error_code="INVALID_FILE_NAME", details=details)


class StorageQuotaExceededError(BaseAppException):
    """Raised when an upload would push the user over the storage quota."""

    def __init__(self, used: int, size: int, quota: int):
        super().__init__(
            message="Storage quota exceeded",
            status_code=413,
            error_code="STORAGE_QUOTA_EXCEEDED",
            details={"used": used, "size": size, "quota": quota},
        )


class FileRecordNotFoundError(NotFoundError):
    """Raised when no active file matches the requested id."""

    def __init__(self, file_id: Any):
        super().__init__(
            message="File not found",
            error_code="FILE_NOT_FOUND",
            details={"file_id": str(file_id)},
        )


class FilePermissionError(AppPermissionError):
    """Raised when the file exists but belongs to another user."""

    def __init__(self, file_id: Any, user_id: Any):
        super().__init__(
            message="You can only access your own files",
            error_code="FILE_NOT_OWNER",
            details={"file_id": str(file_id), "user_id": str(user_id)},
        )


class FileUploadError(BaseAppException):
    """Raised when the storage or metadata write fails after validation passed."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message="File upload failed",
            status_code=500,
            error_code="FILE_UPLOAD_FAILED",
            details={"reason": reason, **(details or {})},
        )
        self.reason = reason


class FileDeleteError(BaseAppException):
    """Raised when the storage object or the metadata row could not be deleted."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message="File deletion failed",
            status_code=500,
            error_code="FILE_DELETE_FAILED",
            details={"reason": reason, **(details or {})},
        )
        self.reason = reason


class FileRestoreError(ConflictError):
    """Raised when a tombstoned file cannot be brought back."""

    def __init__(self, file_id: Any, reason: str):
        super().__init__(
            message="File cannot be restored",
            error_code="FILE_RESTORE_FAILED",
            details={"file_id": str(file_id), "reason": reason},
        )
        self.reason = reason


class FileContentMissingError(NotFoundError):
    """Raised when the metadata row exists but its storage object is gone."""

    def __init__(self, file_id: Any):
        super().__init__(
            message="File content not found in storage",
            error_code="FILE_CONTENT_MISSING",
            details={"file_id": str(file_id)},
        )


class FileDownloadError(BaseAppException):
    """Raised when a download URL cannot be produced."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message="File download failed",
            status_code=500,
            error_code="FILE_DOWNLOAD_FAILED",
            details={"reason": reason, **(details or {})},
        )
        self.reason = reason
