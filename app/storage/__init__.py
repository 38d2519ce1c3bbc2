"""Storage: local filesystem and S3-compatible backends behind one service."""

from app.storage.base import IncomingFile, ProviderKind, StorageProvider, UploadResult
from app.storage.local import LocalStorageProvider
from app.storage.s3 import S3StorageProvider
from app.storage.service import StorageService, select_provider_kind

__all__ = [
    "IncomingFile",
    "ProviderKind",
    "StorageProvider",
    "UploadResult",
    "LocalStorageProvider",
    "S3StorageProvider",
    "StorageService",
    "select_provider_kind",
]
