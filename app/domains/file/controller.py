"""File API controller with FastAPI endpoints."""

import logging
import os
import tempfile
from uuid import UUID

import aiofiles
import aiofiles.os
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse, RedirectResponse

from app.core.config import Settings, get_settings
from app.core.dependencies import get_current_user, get_file_service, validate_token
from app.domains.file.service import FileService
from app.exceptions.file import FileContentMissingError, FileTooLargeError
from app.schemas.base import ResponseSchema
from app.schemas.file import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    DownloadUrlResponse,
    FileDetailResponse,
    FileListResponse,
    FileMetadataResponse,
    StorageStatsResponse,
)
from app.shared.file_utils import generate_unique_filename
from app.storage.base import IncomingFile
from app.storage.local import remove_if_exists
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/files",
    tags=["files"],
    dependencies=[Depends(validate_token)],  # Global token validation for all routes
)

STAGING_CHUNK_SIZE = 1024 * 1024


async def stage_upload(upload: UploadFile, config: Settings) -> IncomingFile:
    """
    Write the request body to a temp file and describe it.

    Reading stops as soon as the largest per-category cap is passed, so an
    oversized body never fills the disk.
    """
    temp_dir = config.upload_temp_directory or tempfile.gettempdir()
    await aiofiles.os.makedirs(temp_dir, exist_ok=True)
    path = os.path.join(temp_dir, generate_unique_filename(upload.filename or ""))

    limit = max(config.max_file_size, config.max_video_size)
    size = 0
    try:
        async with aiofiles.open(path, "wb") as target:
            while chunk := await upload.read(STAGING_CHUNK_SIZE):
                size += len(chunk)
                if size > limit:
                    raise FileTooLargeError(size, limit, "any")
                await target.write(chunk)
    except BaseException:
        await remove_if_exists(path)
        raise

    return IncomingFile(
        path=path,
        original_name=upload.filename or "",
        content_type=upload.content_type or "application/octet-stream",
        size=size,
    )


@router.post("/upload", response_model=ResponseSchema, status_code=201)
async def upload_file(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
    config: Settings = Depends(get_settings),
):
    """Upload a single file."""
    incoming = await stage_upload(file, config)
    try:
        record = await service.upload_file(incoming, current_user.id)
    finally:
        # Providers consume the staged file on success; clean up whatever is left
        await remove_if_exists(incoming.path)

    return ResponseSchema(
        status="success",
        message="File uploaded successfully",
        data=FileDetailResponse.model_validate(record).model_dump(mode="json"),
    )


@router.get("", response_model=ResponseSchema)
async def get_files(
    file_type: str | None = Query(None, alias="type", description="image, video, document or archive"),
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """List the caller's files, newest first."""
    files = await service.get_user_files(current_user.id, file_type)
    listing = FileListResponse(
        files=[FileMetadataResponse.model_validate(f) for f in files], count=len(files)
    )

    return ResponseSchema(
        status="success",
        message="Files retrieved successfully",
        data=listing.model_dump(mode="json"),
    )


@router.get("/stats", response_model=ResponseSchema)
async def get_storage_stats(
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """Get storage usage of the caller."""
    stats = await service.get_user_storage_stats(current_user.id)

    return ResponseSchema(
        status="success",
        message="Storage statistics retrieved successfully",
        data=StorageStatsResponse.model_validate(stats).model_dump(mode="json"),
    )


@router.post("/delete-multiple", response_model=ResponseSchema)
async def delete_multiple_files(
    request_data: BulkDeleteRequest,
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """Delete several files; failures are reported per file."""
    result = await service.delete_multiple_files(request_data.file_ids, current_user.id)

    return ResponseSchema(
        status="success",
        message=f"{result.deleted_count} file(s) deleted successfully",
        data=BulkDeleteResponse.model_validate(result).model_dump(mode="json"),
    )


@router.get("/{file_id}", response_model=ResponseSchema)
async def get_file(
    file_id: UUID,
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """Get a specific file."""
    record = await service.get_file_by_id(file_id, current_user.id)

    return ResponseSchema(
        status="success",
        message="File retrieved successfully",
        data=FileDetailResponse.model_validate(record).model_dump(mode="json"),
    )


@router.get("/{file_id}/download-url", response_model=ResponseSchema)
async def get_download_url(
    file_id: UUID,
    expires_in: int | None = Query(None, ge=1, le=7 * 24 * 3600),
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """Get a URL the file can be downloaded from."""
    link = await service.get_download_url(file_id, current_user.id, expires_in)

    return ResponseSchema(
        status="success",
        message="Download URL generated successfully",
        data=DownloadUrlResponse(
            url=link.url, expires_in=link.expires_in, signed=link.signed
        ).model_dump(mode="json"),
    )


@router.get("/{file_id}/download")
async def download_file(
    file_id: UUID,
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """Stream a locally stored file or redirect to its remote URL."""
    link = await service.get_download_url(file_id, current_user.id)

    if not link.is_local:
        return RedirectResponse(link.url)

    if not await aiofiles.os.path.isfile(link.url):
        logger.error(
            "Local storage object missing", extra={"file_id": str(file_id), "path": link.url}
        )
        raise FileContentMissingError(file_id)

    return FileResponse(link.url, media_type=link.file.mime_type, filename=link.file.name)


@router.delete("/{file_id}", response_model=ResponseSchema)
async def delete_file(
    file_id: UUID,
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """Delete a file."""
    await service.delete_file(file_id, current_user.id)

    return ResponseSchema(status="success", message="File deleted successfully")


@router.post("/{file_id}/restore", response_model=ResponseSchema)
async def restore_file(
    file_id: UUID,
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """Restore a deleted file while its content is still stored."""
    record = await service.restore_file(file_id, current_user.id)

    return ResponseSchema(
        status="success",
        message="File restored successfully",
        data=FileDetailResponse.model_validate(record).model_dump(mode="json"),
    )
