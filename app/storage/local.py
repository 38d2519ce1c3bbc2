"""Local filesystem storage provider."""

import errno
import logging
import os
from pathlib import Path

import aiofiles
import aiofiles.os

from app.storage.base import IncomingFile, ProviderKind

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024


class LocalStorageProvider:
    """
    Stores objects below a base directory, nested by the key's own segments.

    Filesystem errors are not caught here; the storage service decides how to
    react to them.
    """

    kind = ProviderKind.LOCAL

    def __init__(self, base_path: str):
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info("Local storage initialized at: %s", self.base_path)

    async def upload(self, file: IncomingFile, key: str) -> str:
        target = self._resolve(key)
        logger.debug("Uploading file to local storage: %s", key)

        await aiofiles.os.makedirs(target.parent, exist_ok=True)

        source = Path(file.path)
        if source.resolve() != target:
            await self._move(source, target)

        logger.info("File uploaded successfully to local: %s", target)
        return str(target)

    async def delete(self, key: str) -> bool:
        target = self._resolve(key)
        try:
            await aiofiles.os.remove(target)
        except FileNotFoundError:
            logger.warning("File not found in local storage: %s", target)
            return False

        logger.info("File deleted from local storage: %s", target)
        return True

    async def exists(self, key: str) -> bool:
        return await aiofiles.os.path.isfile(self._resolve(key))

    def url(self, key: str) -> str:
        # Served by a download endpoint or a static file server
        return str(self._resolve(key))

    def _resolve(self, key: str) -> Path:
        """Map a key, or a locator previously returned by ``upload``, to a path."""
        candidate = Path(key)
        if not candidate.is_absolute():
            candidate = self.base_path / key
        resolved = candidate.resolve()
        if resolved == self.base_path or self.base_path not in resolved.parents:
            raise ValueError(f"Storage key escapes the storage directory: {key}")
        return resolved

    async def _move(self, source: Path, target: Path) -> None:
        try:
            await aiofiles.os.replace(source, target)
            return
        except OSError as exc:
            if exc.errno != errno.EXDEV:
                raise

        # Different filesystems: copy, then drop the source
        async with aiofiles.open(source, "rb") as src, aiofiles.open(target, "wb") as dst:
            while chunk := await src.read(COPY_CHUNK_SIZE):
                await dst.write(chunk)
        try:
            await aiofiles.os.remove(source)
        except OSError as exc:
            logger.warning("Could not remove staged upload %s: %s", source, exc)


async def remove_if_exists(path: str | os.PathLike) -> bool:
    """Delete a staged temp file; missing files are ignored."""
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        return False
    return True
