"""S3-compatible object storage provider."""

import asyncio
import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any

import aiofiles
import boto3
from botocore.exceptions import ClientError

from app.core.config import Settings
from app.storage.base import IncomingFile, ProviderKind
from app.storage.local import remove_if_exists

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def is_not_found(error: ClientError) -> bool:
    code = str(error.response.get("Error", {}).get("Code", ""))
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code in NOT_FOUND_CODES or status == 404


class S3StorageProvider:
    """
    Stores objects in a bucket.

    boto3 is synchronous, so every client call is pushed to the default
    executor. Permission and network failures propagate to the caller; only
    "not found" is turned into a ``False`` result.

    :ivar bucket_name: Target bucket.
    :ivar region: Bucket region, used to build direct URLs.
    :ivar cdn_url: Optional CDN base URL served in front of the bucket.
    """

    kind = ProviderKind.REMOTE

    def __init__(self, config: Settings, client: Any = None):
        self.bucket_name = config.s3_bucket_name
        self.region = config.s3_region
        self.cdn_url = config.cdn_url.rstrip("/") if config.cdn_url else None
        self.default_expiry = config.presigned_url_expire_seconds

        self.client = client or boto3.client(
            "s3",
            region_name=config.s3_region,
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
            endpoint_url=config.s3_endpoint_url or None,
        )

        logger.info("S3 storage initialized - Bucket: %s, Region: %s", self.bucket_name, self.region)

    async def _call(self, method: str, **kwargs) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(getattr(self.client, method), **kwargs))

    async def upload(self, file: IncomingFile, key: str) -> str:
        logger.debug("Uploading file to S3: %s", key)

        async with aiofiles.open(file.path, "rb") as source:
            body = await source.read()

        await self._call(
            "put_object",
            Bucket=self.bucket_name,
            Key=key,
            Body=body,
            ContentType=file.content_type,
            Metadata={
                # S3 metadata values must be ASCII
                "original-name": file.original_name.encode("ascii", "replace").decode("ascii"),
                "uploaded-at": datetime.now(timezone.utc).isoformat(),
            },
        )

        await remove_if_exists(file.path)

        logger.info("File uploaded successfully to S3: %s", key)
        return self.url(key)

    async def delete(self, key: str) -> bool:
        if not await self.exists(key):
            logger.warning("File not found in S3: %s", key)
            return False

        await self._call("delete_object", Bucket=self.bucket_name, Key=key)
        logger.info("File deleted from S3: %s", key)
        return True

    async def exists(self, key: str) -> bool:
        try:
            await self._call("head_object", Bucket=self.bucket_name, Key=key)
        except ClientError as error:
            if is_not_found(error):
                return False
            raise
        return True

    def url(self, key: str) -> str:
        # Prefer the CDN for faster delivery
        if self.cdn_url:
            return f"{self.cdn_url}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    async def generate_presigned_upload_url(self, key: str, expires_in: int | None = None) -> str:
        """Signed URL a client can PUT the object to directly."""
        return await self._call(
            "generate_presigned_url",
            ClientMethod="put_object",
            Params={"Bucket": self.bucket_name, "Key": key},
            ExpiresIn=expires_in or self.default_expiry,
        )

    async def generate_presigned_download_url(self, key: str, expires_in: int | None = None) -> str:
        """Signed URL for downloading the object."""
        return await self._call(
            "generate_presigned_url",
            ClientMethod="get_object",
            Params={"Bucket": self.bucket_name, "Key": key},
            ExpiresIn=expires_in or self.default_expiry,
        )
