"""
File API endpoints.

This module provides API endpoints for uploading, listing, searching,
serving, downloading and deleting files. Every endpoint that addresses a
single file runs the ownership guard first.
"""
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import StreamingResponse

from app.dependencies.auth import get_current_user, require_elevated_role
from app.dependencies.files import (
    authorize_file_access,
    authorize_stored_file_access,
    get_file_service,
)
from app.exceptions import (
    ConflictError,
    InvalidInputError,
    PayloadTooLargeError,
    RecordNotFoundError,
    UnsupportedFileTypeError,
)
from app.logging_config import setup_logging
from app.models.file_record import FileRecord
from app.models.user import User
from app.schemas.common import APIResponse, DeleteResponseData, api_error
from app.schemas.files import (
    ExtensionCountData,
    FileInfoResponseData,
    FileListItem,
    FileListResponseData,
    FileListStatistics,
    FileRecordResponse,
    FileStatisticsResponseData,
    OrphanedFilesResponseData,
    UserUsageResponseData,
)
from app.services.files import FileService
from app.storage.exceptions import FileNotFoundError, StorageError
from app.utils.formatting import format_file_size

router = APIRouter(prefix="/files", tags=["files"])

FILES_URL_PREFIX = "/api/v1/files"

# Setup logger for error tracking
logger = setup_logging()


def _serve_url(file_id: int) -> str:
    return f"{FILES_URL_PREFIX}/{file_id}/serve"


def _download_url(file_id: int) -> str:
    return f"{FILES_URL_PREFIX}/{file_id}/download"


def _info_url(file_id: int) -> str:
    return f"{FILES_URL_PREFIX}/{file_id}/info"


def _content_disposition(disposition_type: str, file_name: str) -> str:
    quoted = quote(file_name)
    if quoted != file_name:
        return f"{disposition_type}; filename*=utf-8''{quoted}"
    return f'{disposition_type}; filename="{file_name}"'


async def _stream_file(
    service: FileService,
    reference: int | str,
    disposition_type: str,
) -> StreamingResponse:
    """
    Open a file through the service and wrap it in a streaming response.

    Missing metadata and missing bytes both answer 404, but missing bytes
    mean the stores disagree and are logged as an error.
    """
    try:
        file_stream, content_type, file_name = await service.retrieve_file(reference)
    except RecordNotFoundError as e:
        logger.warning(f"File retrieval failed: {str(e)}")
        raise api_error(status.HTTP_404_NOT_FOUND, "Not Found", "File not found")
    except FileNotFoundError as e:
        logger.warning(f"File not available: {str(e)}")
        raise api_error(status.HTTP_404_NOT_FOUND, "Not Found", "File not available")

    logger.info(f"File served: {reference} - {file_name} ({disposition_type})")

    return StreamingResponse(
        file_stream,
        media_type=content_type or "application/octet-stream",
        headers={"Content-Disposition": _content_disposition(disposition_type, file_name)},
    )


@router.post(
    "/upload",
    response_model=APIResponse[FileRecordResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    request: Request,
    title: str = Form(...),
    file: UploadFile = File(...),
    description: str | None = Form(None),
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """
    Upload a file.

    **Request (multipart/form-data):**
    - title: Display title (max 200 characters)
    - file: File content; extension must be in the allow-list
    - description: Optional description (max 500 characters)

    **Example:**
    ```bash
    curl -X POST http://localhost:8000/api/v1/files/upload \\
      -H "Authorization: Bearer <jwt>" \\
      -F "title=Quarterly report" \\
      -F "file=@report.pdf;type=application/pdf"
    ```

    Raises:
        HTTPException 400: Empty file, invalid title/description
        HTTPException 409: Stored file name collision
        HTTPException 413: File exceeds the size limit
        HTTPException 415: File type not allowed
        HTTPException 500: Content could not be written
    """
    ip_address = request.client.host if request.client else None

    try:
        record = await service.store_file(
            title=title,
            content=file.file,
            size=file.size,
            file_name=file.filename or "",
            content_type=file.content_type or "application/octet-stream",
            description=description,
            user_id=current_user.identity,
            ip_address=ip_address,
        )
    except PayloadTooLargeError as e:
        logger.warning(f"Upload rejected: {str(e)}")
        raise api_error(
            status.HTTP_413_CONTENT_TOO_LARGE, "Payload Too Large", str(e)
        )
    except UnsupportedFileTypeError as e:
        logger.warning(f"Upload rejected: {str(e)}")
        raise api_error(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, "Unsupported Media Type", str(e)
        )
    except InvalidInputError as e:
        logger.warning(f"Upload rejected: {str(e)}")
        raise api_error(status.HTTP_400_BAD_REQUEST, "Bad Request", str(e))
    except ConflictError as e:
        logger.warning(f"Upload rejected: {str(e)}")
        raise api_error(
            status.HTTP_409_CONFLICT, "Conflict", "A file with the same stored name already exists"
        )
    except StorageError as e:
        # Log detailed error (may include paths); return a static message
        logger.error(f"Failed to store uploaded file: {str(e)}", exc_info=True)
        raise api_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", "Failed to store file"
        )

    return APIResponse(success=True, data=FileRecordResponse.model_validate(record))


@router.get(
    "",
    response_model=APIResponse[FileListResponseData],
    status_code=status.HTTP_200_OK,
)
def list_files(
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """
    List all active files, newest first, with count and total size.
    """
    files = service.get_all_files()
    total_size = sum(f.file_size_in_bytes for f in files)

    logger.info(f"File list retrieved - Count: {len(files)}, Total Size: {total_size}")

    return APIResponse(
        success=True,
        data=FileListResponseData(
            files=[_list_item(f) for f in files],
            statistics=FileListStatistics(
                total_files=len(files),
                total_size_in_bytes=total_size,
                total_size_formatted=format_file_size(total_size),
            ),
        ),
    )


@router.get(
    "/recent",
    response_model=APIResponse[list[FileListItem]],
    status_code=status.HTTP_200_OK,
)
def list_recent_files(
    count: int = Query(10, ge=1, le=100, description="Number of files to return."),
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """Most recently uploaded active files."""
    files = service.get_recent_files(count)
    return APIResponse(success=True, data=[_list_item(f) for f in files])


@router.get(
    "/search",
    response_model=APIResponse[list[FileListItem]],
    status_code=status.HTTP_200_OK,
)
def search_files(
    q: str = Query(..., min_length=1, max_length=200, description="Text to find in titles."),
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """Active files whose title contains `q` (case-insensitive)."""
    files = service.search_files(q)
    return APIResponse(success=True, data=[_list_item(f) for f in files])


@router.get(
    "/stats",
    response_model=APIResponse[FileStatisticsResponseData],
    status_code=status.HTTP_200_OK,
)
def get_file_statistics(
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """
    Aggregate statistics over active files: totals, average / largest /
    smallest size, recent uploads and the most common extensions.
    """
    stats = service.get_statistics()

    logger.info(f"File statistics calculated: {stats.total_active_files} files")

    return APIResponse(
        success=True,
        data=FileStatisticsResponseData(
            total_active_files=stats.total_active_files,
            total_size_in_bytes=stats.total_size_in_bytes,
            average_file_size=stats.average_file_size,
            largest_file_size=stats.largest_file_size,
            smallest_file_size=stats.smallest_file_size,
            recent_uploads=stats.recent_uploads,
            most_common_extensions=[
                ExtensionCountData(extension=item.extension, count=item.count)
                for item in stats.most_common_extensions
            ],
        ),
    )


@router.get(
    "/usage",
    response_model=APIResponse[UserUsageResponseData],
    status_code=status.HTTP_200_OK,
)
def get_my_usage(
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """Active file count and total size for the calling user."""
    usage = service.get_user_usage(current_user.identity)
    return APIResponse(
        success=True,
        data=UserUsageResponseData(
            user_id=usage.user_id,
            file_count=usage.file_count,
            total_size_in_bytes=usage.total_size_in_bytes,
            total_size_formatted=format_file_size(usage.total_size_in_bytes),
        ),
    )


@router.get(
    "/orphans",
    response_model=APIResponse[OrphanedFilesResponseData],
    status_code=status.HTTP_200_OK,
)
def list_orphaned_files(
    admin: User = Depends(require_elevated_role),
    service: FileService = Depends(get_file_service),
):
    """
    Stored files that have no metadata record.

    These are left behind when a metadata write fails after the content
    write succeeded. Nothing is deleted by this endpoint.

    **Role required:** Admin
    """
    orphans = service.find_orphaned_files()
    if orphans:
        logger.warning(f"Found {len(orphans)} orphaned stored files")
    return APIResponse(
        success=True,
        data=OrphanedFilesResponseData(count=len(orphans), stored_file_names=orphans),
    )


@router.get(
    "/stored/{stored_file_name}/download",
    status_code=status.HTTP_200_OK,
)
async def download_file_by_stored_name(
    stored_file_name: str,
    record: FileRecord = Depends(authorize_stored_file_access),
    service: FileService = Depends(get_file_service),
):
    """Download a file addressed by its stored name."""
    return await _stream_file(service, stored_file_name, "attachment")


@router.get(
    "/{file_id}/info",
    response_model=APIResponse[FileInfoResponseData],
    status_code=status.HTTP_200_OK,
)
def get_file_info(
    file_id: int,
    record: FileRecord = Depends(authorize_file_access),
    service: FileService = Depends(get_file_service),
):
    """
    File details with serve and download links.

    `exists` reports whether the file content is still present in storage.

    Raises:
        HTTPException 401: Not authenticated
        HTTPException 403: Caller is neither owner nor administrator
        HTTPException 404: File not found or deleted
    """
    info = FileRecordResponse.model_validate(record).model_dump()

    logger.info(f"File info retrieved: {file_id} - {record.title}")

    return APIResponse(
        success=True,
        data=FileInfoResponseData(
            **info,
            exists=service.file_exists(record.stored_file_name),
            serve_url=_serve_url(file_id),
            download_url=_download_url(file_id),
        ),
    )


@router.get(
    "/{file_id}/serve",
    status_code=status.HTTP_200_OK,
)
async def serve_file(
    file_id: int,
    record: FileRecord = Depends(authorize_file_access),
    service: FileService = Depends(get_file_service),
):
    """
    Serve file content for display in the browser.

    **Streaming Response:**
    - Content-Type: the type declared at upload
    - Content-Disposition: inline
    """
    return await _stream_file(service, file_id, "inline")


@router.get(
    "/{file_id}/download",
    status_code=status.HTTP_200_OK,
)
async def download_file(
    file_id: int,
    record: FileRecord = Depends(authorize_file_access),
    service: FileService = Depends(get_file_service),
):
    """
    Download file content.

    **Streaming Response:**
    - Content-Type: the type declared at upload
    - Content-Disposition: attachment (triggers browser download)
    """
    return await _stream_file(service, file_id, "attachment")


@router.delete(
    "/{file_id}",
    response_model=APIResponse[DeleteResponseData],
    status_code=status.HTTP_200_OK,
)
async def delete_file(
    file_id: int,
    record: FileRecord = Depends(authorize_file_access),
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    """
    Delete a file.

    The record is soft-deleted and disappears from listings; the stored
    content is then removed. A failure to remove the content is logged and
    does not fail the request.
    """
    deleted = await service.delete_file(file_id, deleted_by=current_user.identity)
    if not deleted:
        raise api_error(status.HTTP_404_NOT_FOUND, "Not Found", "File not found")

    return APIResponse(success=True, data=DeleteResponseData(id=file_id, deleted=True))


@router.delete(
    "/{file_id}/purge",
    response_model=APIResponse[DeleteResponseData],
    status_code=status.HTTP_200_OK,
)
async def purge_file(
    file_id: int,
    admin: User = Depends(require_elevated_role),
    service: FileService = Depends(get_file_service),
):
    """
    Permanently remove a file record and its content, including records
    that were already soft-deleted.

    **Role required:** Admin
    """
    deleted = await service.hard_delete_file(file_id)
    if not deleted:
        raise api_error(status.HTTP_404_NOT_FOUND, "Not Found", "File not found")

    logger.info(f"File purged by {admin.identity}: {file_id}")
    return APIResponse(success=True, data=DeleteResponseData(id=file_id, deleted=True))


def _list_item(record: FileRecord) -> FileListItem:
    return FileListItem(
        id=record.id,
        title=record.title,
        original_file_name=record.original_file_name,
        file_size_in_bytes=record.file_size_in_bytes,
        uploaded_at=record.uploaded_at,
        serve_url=_serve_url(record.id),
        download_url=_download_url(record.id),
        info_url=_info_url(record.id),
    )
