"""
Abstract base class for file metadata repositories.

The file service depends only on this interface, so the metadata backing
can be swapped (SQL database, in-memory test double) without touching the
orchestration logic.
"""
from abc import ABC, abstractmethod

from app.models.file_record import FileRecord


class FileRecordRepository(ABC):
    """
    Keyed CRUD and indexed queries over file records.

    Listing, search, recency and aggregate queries only see active
    records. Lookups by id or stored name return the record regardless of
    the active flag so callers can tell "never existed" from "soft-deleted".
    """

    @abstractmethod
    def add(self, record: FileRecord) -> FileRecord:
        """
        Persist a new record, stamping created_at and uploaded_at.

        Raises:
            ConflictError: If stored_file_name is already taken
        """
        pass

    @abstractmethod
    def get_by_id(self, record_id: int) -> FileRecord | None:
        pass

    @abstractmethod
    def get_by_stored_name(self, stored_file_name: str) -> FileRecord | None:
        pass

    @abstractmethod
    def get_all_active(self) -> list[FileRecord]:
        """Active records, newest upload first."""
        pass

    @abstractmethod
    def get_by_user(self, user_id: str) -> list[FileRecord]:
        """Active records owned by user_id, newest upload first."""
        pass

    @abstractmethod
    def get_recent(self, count: int = 10) -> list[FileRecord]:
        """The `count` most recently uploaded active records."""
        pass

    @abstractmethod
    def search_by_title(self, search_term: str) -> list[FileRecord]:
        """Active records whose title contains search_term, case-insensitive."""
        pass

    @abstractmethod
    def update(self, record: FileRecord) -> FileRecord:
        """
        Persist changes to an existing record, stamping updated_at.

        Raises:
            RecordNotFoundError: If the record id does not exist
        """
        pass

    @abstractmethod
    def soft_delete(self, record_id: int, updated_by: str | None = None) -> bool:
        """Mark a record inactive. Returns False if the id does not exist."""
        pass

    @abstractmethod
    def hard_delete(self, record_id: int) -> bool:
        """Remove a record. Returns False if the id does not exist."""
        pass

    @abstractmethod
    def exists(self, record_id: int) -> bool:
        pass

    @abstractmethod
    def exists_by_stored_name(self, stored_file_name: str) -> bool:
        pass

    @abstractmethod
    def get_total_size_by_user(self, user_id: str) -> int:
        """Sum of file sizes over the user's active records."""
        pass

    @abstractmethod
    def get_count_by_user(self, user_id: str) -> int:
        """Number of the user's active records."""
        pass
