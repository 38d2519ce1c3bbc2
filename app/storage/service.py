"""Storage service: picks a provider once and hides it behind one contract."""

import logging

from app.core.config import Settings, StorageProviderEnum
from app.storage.base import IncomingFile, ProviderKind, StorageProvider, UploadResult
from app.storage.local import LocalStorageProvider
from app.storage.s3 import S3StorageProvider

module_logger = logging.getLogger(__name__)


def select_provider_kind(config: Settings, logger: logging.Logger = module_logger) -> ProviderKind:
    """
    Decide which provider to use from configuration.

    Remote storage is chosen only when it is requested and bucket, region,
    access key and secret are all present.
    """
    requested_remote = config.storage_provider == StorageProviderEnum.s3

    if requested_remote and config.has_remote_storage_credentials:
        logger.info("Using S3 storage provider")
        return ProviderKind.REMOTE

    if requested_remote:
        logger.warning(
            "S3 storage requested but credentials not found. Falling back to local storage."
        )

    logger.info("Using local storage provider")
    return ProviderKind.LOCAL


class StorageService:
    """
    Provider-agnostic storage operations.

    Holds the resolved provider plus an explicit local provider. Objects may
    live in local storage even while S3 is active, because a failed S3
    upload is retried locally; deletes and existence checks therefore also
    consult the local provider.
    """

    def __init__(
        self,
        config: Settings,
        local_provider: LocalStorageProvider | None = None,
        remote_provider: S3StorageProvider | None = None,
        logger: logging.Logger | None = None,
    ):
        self.logger = logger or module_logger
        self.local_provider = local_provider or LocalStorageProvider(config.local_upload_directory)

        self._kind = select_provider_kind(config, self.logger)
        self._remote_provider: S3StorageProvider | None = None
        if self._kind == ProviderKind.REMOTE:
            self._remote_provider = remote_provider or S3StorageProvider(config)

        self.provider: StorageProvider = self._remote_provider or self.local_provider
        self.logger.info(
            "Storage service initialized with provider: %s", self._kind.value.upper()
        )

    @property
    def provider_kind(self) -> ProviderKind:
        return self._kind

    @property
    def supports_signed_urls(self) -> bool:
        return self._remote_provider is not None

    async def upload(self, file: IncomingFile, key: str) -> UploadResult:
        """
        Upload with the active provider, retrying once locally if S3 fails.

        Callers must persist the returned ``provider_kind``; after a fallback
        it is ``LOCAL`` even though S3 is configured.
        """
        try:
            url = await self.provider.upload(file, key)
            return UploadResult(key=key, url=url, provider_kind=self.provider.kind)
        except Exception as exc:
            self.logger.error(
                "Failed to upload file: %s", exc, extra={"storage_key": key}, exc_info=True
            )
            if self._remote_provider is None:
                raise

        self.logger.warning(
            "S3 upload failed, attempting fallback to local storage",
            extra={"storage_key": key},
        )
        url = await self.local_provider.upload(file, key)
        return UploadResult(key=key, url=url, provider_kind=ProviderKind.LOCAL)

    async def delete(self, key: str) -> bool:
        """
        Delete an object wherever it lives.

        Returns False only when neither provider holds it. An S3 error is
        re-raised unless the local provider turned out to hold the object.
        """
        if self._remote_provider is None:
            return await self.local_provider.delete(key)

        try:
            deleted = await self._remote_provider.delete(key)
        except Exception as exc:
            self.logger.error(
                "Failed to delete file from S3: %s", exc, extra={"storage_key": key}
            )
            if await self.local_provider.delete(key):
                return True
            raise

        if not deleted:
            self.logger.debug("File not found in S3, checking local storage")
            return await self.local_provider.delete(key)
        return True

    async def exists(self, key: str) -> bool:
        if self._remote_provider is None:
            return await self.local_provider.exists(key)

        try:
            if await self._remote_provider.exists(key):
                return True
        except Exception as exc:
            self.logger.error(
                "Error checking file existence in S3: %s", exc, extra={"storage_key": key}
            )

        return await self.local_provider.exists(key)

    def url(self, key: str) -> str:
        return self.provider.url(key)

    async def generate_presigned_upload_url(
        self, key: str, expires_in: int | None = None
    ) -> str | None:
        """Signed upload URL, or None when the active provider is local."""
        if self._remote_provider is None:
            self.logger.warning("Pre-signed URLs are only available with S3 storage")
            return None
        return await self._remote_provider.generate_presigned_upload_url(key, expires_in)

    async def generate_presigned_download_url(
        self, key: str, expires_in: int | None = None
    ) -> str | None:
        """Signed download URL, or None when the active provider is local."""
        if self._remote_provider is None:
            self.logger.warning("Pre-signed URLs are only available with S3 storage")
            return None
        return await self._remote_provider.generate_presigned_download_url(key, expires_in)
