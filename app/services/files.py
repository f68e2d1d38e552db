"""
File storage service.

This module orchestrates uploads, retrieval and deletion across the two
stores: file bytes go to a StorageBackend, file metadata goes to a
FileRecordRepository. The two writes are not transactional; see
store_file and delete_file for how partial failures are handled.
"""
from collections import Counter
from dataclasses import dataclass
from typing import AsyncIterator, BinaryIO

from app.exceptions import (
    ConflictError,
    InvalidInputError,
    PayloadTooLargeError,
    RecordNotFoundError,
    UnsupportedFileTypeError,
)
from app.logging_config import setup_logging
from app.models.file_record import ANONYMOUS_USER, UNKNOWN_IP_ADDRESS, FileRecord
from app.repositories.base import FileRecordRepository
from app.storage.base import StorageBackend
from app.storage.exceptions import FileAlreadyExistsError, FileNotFoundError, StorageError
from app.utils.hashing import compute_content_hash
from app.utils.naming import generate_stored_name, get_file_extension

logger = setup_logging()

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 500
MAX_FILE_NAME_LENGTH = 255
MAX_CONTENT_TYPE_LENGTH = 100
MAX_EXTENSION_LENGTH = 10
RECENT_UPLOADS_WINDOW = 5
TOP_EXTENSIONS = 5


@dataclass
class UserUsage:
    """Active file count and total size for one owner."""
    user_id: str
    file_count: int
    total_size_in_bytes: int


@dataclass
class ExtensionCount:
    extension: str
    count: int


@dataclass
class FileStatistics:
    """Aggregate statistics over all active files."""
    total_active_files: int
    total_size_in_bytes: int
    average_file_size: float
    largest_file_size: int
    smallest_file_size: int
    recent_uploads: int
    most_common_extensions: list[ExtensionCount]


class FileService:
    """
    Upload, retrieval and deletion of files.

    Policy (size limit, allowed extensions, naming mode) is resolved by the
    caller and passed in; the service does not read configuration itself.
    """

    def __init__(
        self,
        repository: FileRecordRepository,
        storage: StorageBackend,
        max_upload_bytes: int,
        allowed_extensions: list[str],
        generate_unique_names: bool = True,
    ):
        self.repository = repository
        self.storage = storage
        self.max_upload_bytes = max_upload_bytes
        self.allowed_extensions = [ext.lower() for ext in allowed_extensions]
        self.generate_unique_names = generate_unique_names

    async def store_file(
        self,
        title: str,
        content: BinaryIO | None,
        size: int | None,
        file_name: str,
        content_type: str,
        description: str | None = None,
        user_id: str | None = None,
        ip_address: str | None = None,
    ) -> FileRecord:
        """
        Validate an upload, write its bytes, then persist its metadata.

        Args:
            title: Display title (required, at most 200 characters)
            content: Seekable binary stream with the file content
            size: Declared content length in bytes (None if unknown)
            file_name: File name declared by the client
            content_type: Declared MIME type
            description: Optional description (at most 500 characters)
            user_id: Owner identity, "Anonymous" when absent
            ip_address: Uploader address, "Unknown" when absent

        Returns:
            The persisted FileRecord

        Raises:
            InvalidInputError: Empty content, bad title/description, an
                oversized file name or content type, or a declared size
                that does not match the content
            PayloadTooLargeError: Content exceeds the size limit
            UnsupportedFileTypeError: Extension not in the allow-list
            ConflictError: Stored name already taken
            StorageError: Content could not be written

        Notes:
            If the metadata write fails after the content write succeeded,
            the written file is left on disk. It is logged and shows up in
            find_orphaned_files().
        """
        # 1. Validate
        if content is None or size == 0:
            raise InvalidInputError("File is empty")

        if size is not None and size > self.max_upload_bytes:
            raise PayloadTooLargeError(size, self.max_upload_bytes)

        extension = get_file_extension(file_name or "")
        if extension not in self.allowed_extensions or len(extension) > MAX_EXTENSION_LENGTH:
            raise UnsupportedFileTypeError(extension, self.allowed_extensions)

        title = (title or "").strip()
        if not title:
            raise InvalidInputError("Title is required")
        if len(title) > MAX_TITLE_LENGTH:
            raise InvalidInputError(f"Title cannot exceed {MAX_TITLE_LENGTH} characters")
        if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
            raise InvalidInputError(
                f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
            )
        if len(file_name or "") > MAX_FILE_NAME_LENGTH:
            raise InvalidInputError(f"File name cannot exceed {MAX_FILE_NAME_LENGTH} characters")
        if len(content_type or "") > MAX_CONTENT_TYPE_LENGTH:
            raise InvalidInputError(
                f"Content type cannot exceed {MAX_CONTENT_TYPE_LENGTH} characters"
            )

        # 2. Hash (consumes the stream) and check the real length
        file_hash, actual_size = compute_content_hash(content)
        if actual_size == 0:
            raise InvalidInputError("File is empty")
        if actual_size > self.max_upload_bytes:
            raise PayloadTooLargeError(actual_size, self.max_upload_bytes)
        if size is not None and size != actual_size:
            raise InvalidInputError(
                f"Declared size ({size} bytes) does not match content length ({actual_size} bytes)"
            )
        content.seek(0)

        # 3. Name
        stored_file_name = generate_stored_name(file_name, unique=self.generate_unique_names)
        if not stored_file_name:
            raise InvalidInputError("File name is empty")
        if self.repository.exists_by_stored_name(stored_file_name):
            raise ConflictError(stored_file_name)

        # 4. Write content, then metadata
        try:
            storage_path = await self.storage.save_file(
                stored_file_name, content, overwrite=False
            )
        except FileAlreadyExistsError:
            # Lost a race for the name; the other upload keeps its bytes
            raise ConflictError(stored_file_name)
        except StorageError:
            logger.error(f"Error storing file: {file_name}", exc_info=True)
            raise

        record = FileRecord(
            title=title,
            original_file_name=file_name,
            stored_file_name=stored_file_name,
            file_extension=extension,
            file_size_in_bytes=actual_size,
            content_type=content_type,
            description=description,
            storage_path=storage_path,
            file_hash=file_hash,
            is_active=True,
            uploaded_by_user=user_id or ANONYMOUS_USER,
            ip_address=ip_address or UNKNOWN_IP_ADDRESS,
        )

        try:
            record = self.repository.add(record)
        except Exception:
            logger.error(
                f"Metadata write failed after content write; orphaned file left at {storage_path}",
                exc_info=True,
            )
            raise

        logger.info(f"File stored successfully: {file_name} -> {stored_file_name}")
        return record

    async def retrieve_file(
        self, reference: int | str
    ) -> tuple[AsyncIterator[bytes], str, str]:
        """
        Resolve an active record by id or stored name and open its content.

        Args:
            reference: Record id (int) or stored file name (str)

        Returns:
            Tuple of (content stream, content type, original file name)

        Raises:
            RecordNotFoundError: Metadata missing or soft-deleted
            FileNotFoundError: Metadata exists but the bytes are gone
                (storage exception, indicates store corruption)
        """
        if isinstance(reference, int):
            record = self.repository.get_by_id(reference)
        else:
            record = self.repository.get_by_stored_name(reference)

        if record is None or not record.is_active:
            raise RecordNotFoundError(reference)

        try:
            file_stream = self.storage.open_file(record.stored_file_name)
        except FileNotFoundError:
            logger.error(
                f"Metadata exists but content is missing for file {record.id} "
                f"({record.stored_file_name})"
            )
            raise
        return file_stream, record.content_type, record.original_file_name

    async def delete_file(self, file_id: int, deleted_by: str | None = None) -> bool:
        """
        Soft-delete a record, then remove its bytes.

        Physical removal is attempted only after the soft delete succeeded;
        a failure there is logged and swallowed, so the record disappears
        from listings even if its bytes linger on disk.

        Returns:
            False if the record does not exist, True otherwise
        """
        record = self.repository.get_by_id(file_id)
        if record is None:
            return False

        stored_file_name = record.stored_file_name
        if not self.repository.soft_delete(file_id, updated_by=deleted_by):
            return False

        try:
            await self.storage.delete_file(stored_file_name)
        except StorageError:
            logger.error(
                f"Physical delete failed for soft-deleted file {file_id} ({stored_file_name})",
                exc_info=True,
            )

        logger.info(f"File deleted: {stored_file_name}")
        return True

    async def hard_delete_file(self, file_id: int) -> bool:
        """
        Remove a record row and, best effort, its bytes.

        Returns:
            False if the record does not exist, True otherwise
        """
        record = self.repository.get_by_id(file_id)
        if record is None:
            return False

        stored_file_name = record.stored_file_name
        if not self.repository.hard_delete(file_id):
            return False

        try:
            await self.storage.delete_file(stored_file_name)
        except StorageError:
            logger.error(
                f"Physical delete failed for purged file {file_id} ({stored_file_name})",
                exc_info=True,
            )

        logger.info(f"File purged: {stored_file_name}")
        return True

    def get_all_files(self) -> list[FileRecord]:
        return self.repository.get_all_active()

    def get_file_info(self, file_id: int, include_inactive: bool = False) -> FileRecord | None:
        """Return the record for file_id; soft-deleted records only when asked."""
        record = self.repository.get_by_id(file_id)
        if record is None:
            return None
        if not record.is_active and not include_inactive:
            return None
        return record

    def get_file_info_by_stored_name(
        self, stored_file_name: str, include_inactive: bool = False
    ) -> FileRecord | None:
        record = self.repository.get_by_stored_name(stored_file_name)
        if record is None:
            return None
        if not record.is_active and not include_inactive:
            return None
        return record

    def file_exists(self, stored_file_name: str) -> bool:
        """True when both an active record and its bytes exist."""
        record = self.repository.get_by_stored_name(stored_file_name)
        return (
            record is not None
            and record.is_active
            and self.storage.file_exists(stored_file_name)
        )

    def get_secure_file_path(self, stored_file_name: str) -> str:
        return self.storage.get_file_path(stored_file_name)

    def get_user_files(self, user_id: str) -> list[FileRecord]:
        return self.repository.get_by_user(user_id)

    def get_user_usage(self, user_id: str) -> UserUsage:
        return UserUsage(
            user_id=user_id,
            file_count=self.repository.get_count_by_user(user_id),
            total_size_in_bytes=self.repository.get_total_size_by_user(user_id),
        )

    def get_recent_files(self, count: int = 10) -> list[FileRecord]:
        return self.repository.get_recent(count)

    def search_files(self, search_term: str) -> list[FileRecord]:
        return self.repository.search_by_title(search_term)

    def get_statistics(self) -> FileStatistics:
        files = self.repository.get_all_active()
        sizes = [f.file_size_in_bytes for f in files]
        extensions = Counter(f.file_extension for f in files)

        return FileStatistics(
            total_active_files=len(files),
            total_size_in_bytes=sum(sizes),
            average_file_size=sum(sizes) / len(sizes) if sizes else 0,
            largest_file_size=max(sizes) if sizes else 0,
            smallest_file_size=min(sizes) if sizes else 0,
            recent_uploads=len(self.repository.get_recent(RECENT_UPLOADS_WINDOW)),
            most_common_extensions=[
                ExtensionCount(extension=ext, count=count)
                for ext, count in extensions.most_common(TOP_EXTENSIONS)
            ],
        )

    def find_orphaned_files(self) -> list[str]:
        """Stored names present in storage that have no metadata row."""
        return [
            stored_file_name
            for stored_file_name in self.storage.list_files()
            if not self.repository.exists_by_stored_name(stored_file_name)
        ]
