"""Storage provider contract and shared value types."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class ProviderKind(str, Enum):
    LOCAL = "local"
    REMOTE = "s3"


@dataclass(frozen=True)
class IncomingFile:
    """
    An uploaded file staged on local disk, waiting to be handed to a provider.

    :ivar path: Location of the staged temp file.
    :ivar original_name: Filename as sent by the client.
    :ivar content_type: Declared content type.
    :ivar size: Size in bytes of the staged file.
    """

    path: str
    original_name: str
    content_type: str
    size: int

    @classmethod
    def from_path(cls, path: str, original_name: str, content_type: str) -> "IncomingFile":
        return cls(
            path=str(path),
            original_name=original_name,
            content_type=content_type,
            size=os.stat(path).st_size,
        )


@dataclass(frozen=True)
class UploadResult:
    """Where an upload actually landed."""

    key: str
    url: str
    provider_kind: ProviderKind


@runtime_checkable
class StorageProvider(Protocol):
    """All storage implementations must follow this contract."""

    kind: ProviderKind

    async def upload(self, file: IncomingFile, key: str) -> str:
        """Store the file under ``key`` and return its locator."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove the object; False when it was already absent."""
        ...

    async def exists(self, key: str) -> bool: ...

    def url(self, key: str) -> str: ...
