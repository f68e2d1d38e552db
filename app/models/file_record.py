"""
Uploaded file database model.

This module defines the FileRecord model holding the metadata of every
uploaded file: names, size, declared content type, storage location,
content hash, provenance and soft-delete state.
"""
from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

ANONYMOUS_USER = "Anonymous"
UNKNOWN_IP_ADDRESS = "Unknown"


class FileRecord(Base):
    """
    Uploaded file metadata.

    Attributes:
        id: Primary key
        title: Display title supplied by the uploader
        original_file_name: File name declared by the client
        stored_file_name: Server-generated name, unique across all rows
        file_extension: Lower-cased extension of the original name (".pdf")
        file_size_in_bytes: Content length at upload time
        content_type: Client-declared MIME type
        description: Optional free text
        storage_path: Resolved filesystem location (never exposed)
        file_hash: Base64 SHA-256 digest computed at upload time
        is_active: False once soft-deleted
        uploaded_by_user: Owner identity, used for ownership checks
        ip_address: Uploader IP address
        created_at: Row creation timestamp
        uploaded_at: Upload timestamp
        updated_at: Last modification timestamp
        updated_by_user: Identity that last modified the row
    """

    __tablename__ = "uploaded_files"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200))
    original_file_name: Mapped[str] = mapped_column(String(255))
    stored_file_name: Mapped[str] = mapped_column(String(255))
    file_extension: Mapped[str] = mapped_column(String(10))
    file_size_in_bytes: Mapped[int] = mapped_column(BigInteger)
    content_type: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    storage_path: Mapped[str] = mapped_column(String(500))
    file_hash: Mapped[str] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    uploaded_by_user: Mapped[str] = mapped_column(String(100), default=ANONYMOUS_USER)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    uploaded_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    updated_by_user: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        Index("ix_uploaded_files_stored_file_name", "stored_file_name", unique=True),
        Index("ix_uploaded_files_uploaded_at", "uploaded_at"),
        Index("ix_uploaded_files_uploaded_by_user", "uploaded_by_user"),
        Index("ix_uploaded_files_is_active", "is_active"),
    )

    def __repr__(self) -> str:
        return (
            f"<FileRecord(id={self.id}, stored_file_name={self.stored_file_name}, "
            f"is_active={self.is_active})>"
        )
