"""
File service dependencies for FastAPI.

Builds the FileService for a request from the database session, the
storage backend and the upload policy in settings, and provides the
ownership guard used by per-file endpoints.
"""
from fastapi import Depends, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.dependencies.auth import get_current_user_optional
from app.dependencies.storage import get_storage
from app.exceptions import ForbiddenError, RecordNotFoundError, UnauthorizedError
from app.logging_config import setup_logging
from app.models.file_record import FileRecord
from app.models.user import User
from app.repositories.sql import SQLFileRecordRepository
from app.schemas.common import api_error
from app.services.files import FileService
from app.storage.base import StorageBackend
from app.utils.authorization import ensure_file_access

logger = setup_logging()


def get_file_service(
    db: Session = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
) -> FileService:
    return FileService(
        repository=SQLFileRecordRepository(db),
        storage=storage,
        max_upload_bytes=settings.max_upload_size_bytes,
        allowed_extensions=settings.ALLOWED_FILE_EXTENSIONS,
        generate_unique_names=settings.GENERATE_UNIQUE_NAMES,
    )


def _guard(
    user: User | None,
    file_reference: int | str,
    service: FileService,
) -> FileRecord:
    """
    Run the ownership guard for one file and translate its verdict.

    An unauthenticated caller is rejected before the record is looked up,
    so a 401 never reveals whether a file exists.
    """
    if user is None:
        logger.warning(f"Unauthorized access attempt to file {file_reference}")
        raise api_error(status.HTTP_401_UNAUTHORIZED, "Unauthorized", "Not authenticated")

    if isinstance(file_reference, int):
        record = service.get_file_info(file_reference, include_inactive=True)
    else:
        record = service.get_file_info_by_stored_name(file_reference, include_inactive=True)

    try:
        record = ensure_file_access(user.identity, user.roles, record, file_reference)
    except UnauthorizedError:
        raise api_error(status.HTTP_401_UNAUTHORIZED, "Unauthorized", "Not authenticated")
    except RecordNotFoundError:
        logger.warning(f"File not found or inactive: {file_reference}")
        raise api_error(status.HTTP_404_NOT_FOUND, "Not Found", "File not found")
    except ForbiddenError:
        logger.warning(
            f"Access denied: user {user.identity} attempted to access file "
            f"{file_reference} owned by {record.uploaded_by_user}"
        )
        raise api_error(
            status.HTTP_403_FORBIDDEN, "Forbidden", "You do not have access to this file"
        )

    logger.info(f"File access granted: user {user.identity} accessing file {file_reference}")
    return record


def authorize_file_access(
    file_id: int,
    user: User | None = Depends(get_current_user_optional),
    service: FileService = Depends(get_file_service),
) -> FileRecord:
    """Guard for endpoints addressing a file by id."""
    return _guard(user, file_id, service)


def authorize_stored_file_access(
    stored_file_name: str,
    user: User | None = Depends(get_current_user_optional),
    service: FileService = Depends(get_file_service),
) -> FileRecord:
    """Guard for endpoints addressing a file by stored name."""
    return _guard(user, stored_file_name, service)
