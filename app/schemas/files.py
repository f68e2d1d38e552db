"""
File API schemas.

This module defines Pydantic schemas for file upload, listing, info,
statistics and maintenance responses. The storage path of a file is never
part of any response.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from app.utils.datetime import ensure_aware


class FileRecordResponse(BaseModel):
    """File record as returned to clients."""

    id: int
    """Record identifier."""

    title: str
    """Display title."""

    original_file_name: str
    """File name declared by the uploader."""

    stored_file_name: str
    """Server-generated name the file is stored under."""

    file_extension: str
    """Lower-cased extension including the dot (e.g. ".pdf")."""

    file_size_in_bytes: int
    """Content length in bytes."""

    content_type: str
    """Declared MIME type."""

    description: str | None = None
    """Optional description."""

    file_hash: str
    """Base64 SHA-256 digest computed at upload time."""

    is_active: bool
    """False once the file has been deleted."""

    uploaded_by_user: str
    """Owner identity."""

    uploaded_at: datetime
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "examples": [
                {
                    "id": 1,
                    "title": "Quarterly report",
                    "original_file_name": "report.pdf",
                    "stored_file_name": "20250101_120000_a3b8f2d4.pdf",
                    "file_extension": ".pdf",
                    "file_size_in_bytes": 1024,
                    "content_type": "application/pdf",
                    "description": None,
                    "file_hash": "47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU=",
                    "is_active": True,
                    "uploaded_by_user": "1",
                    "uploaded_at": "2025-01-01T12:00:00Z",
                    "created_at": "2025-01-01T12:00:00Z",
                    "updated_at": None,
                }
            ]
        },
    )

    # 資料庫讀回的時間沒有時區資訊，但實際上是UTC
    @field_validator("uploaded_at", "created_at", "updated_at")
    @classmethod
    def _as_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v)


class FileInfoResponseData(FileRecordResponse):
    """File record plus storage status and links."""

    exists: bool
    """Whether the file content is still present in storage."""

    serve_url: str
    download_url: str


class FileListItem(BaseModel):
    id: int
    title: str
    original_file_name: str
    file_size_in_bytes: int
    uploaded_at: datetime
    serve_url: str
    download_url: str
    info_url: str

    @field_validator("uploaded_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return ensure_aware(v)


class FileListStatistics(BaseModel):
    total_files: int
    total_size_in_bytes: int
    total_size_formatted: str


class FileListResponseData(BaseModel):
    files: list[FileListItem]
    statistics: FileListStatistics


class ExtensionCountData(BaseModel):
    extension: str
    count: int


class FileStatisticsResponseData(BaseModel):
    """Aggregate statistics over active files."""

    total_active_files: int
    total_size_in_bytes: int
    average_file_size: float
    largest_file_size: int
    smallest_file_size: int
    recent_uploads: int
    most_common_extensions: list[ExtensionCountData]


class UserUsageResponseData(BaseModel):
    user_id: str
    file_count: int
    total_size_in_bytes: int
    total_size_formatted: str


class OrphanedFilesResponseData(BaseModel):
    """Stored files on disk with no metadata record."""

    count: int
    stored_file_names: list[str]
