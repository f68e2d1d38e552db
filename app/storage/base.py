"""
Abstract base class for storage backends.

This module defines the interface that all content storage backends must
implement. Files are addressed by their server-generated stored name.
"""
from abc import ABC, abstractmethod
from typing import AsyncIterator, BinaryIO


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    All storage implementations must implement these methods so the
    file service can stay unaware of where the bytes live.
    """

    @abstractmethod
    async def save_file(
        self,
        stored_file_name: str,
        file_stream: BinaryIO,
        overwrite: bool = True,
    ) -> str:
        """
        Save file content to storage.

        Args:
            stored_file_name: Server-generated name of the file
            file_stream: Readable binary stream positioned at the start
            overwrite: Replace an existing file; when False an existing
                file is left untouched and the save fails

        Returns:
            Full file path or key

        Raises:
            FileAlreadyExistsError: overwrite is False and the file exists
            StorageError: If save operation fails
        """
        pass

    @abstractmethod
    def open_file(self, stored_file_name: str) -> AsyncIterator[bytes]:
        """
        Open a stored file for reading.

        Args:
            stored_file_name: Server-generated name of the file

        Returns:
            Async iterator yielding file chunks

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        pass

    @abstractmethod
    def get_file_path(self, stored_file_name: str) -> str:
        """
        Get the path/key of a stored file without checking it exists.

        Args:
            stored_file_name: Server-generated name of the file

        Returns:
            File path or key
        """
        pass

    @abstractmethod
    async def delete_file(self, stored_file_name: str) -> bool:
        """
        Delete a file from storage. A missing file is not an error.

        Args:
            stored_file_name: Server-generated name of the file

        Returns:
            True if a file was removed, False if there was nothing to remove

        Raises:
            StorageError: If delete operation fails
        """
        pass

    @abstractmethod
    def file_exists(self, stored_file_name: str) -> bool:
        """
        Check if a file exists in storage.

        Args:
            stored_file_name: Server-generated name of the file

        Returns:
            True if file exists, False otherwise
        """
        pass

    @abstractmethod
    def list_files(self) -> list[str]:
        """
        List the stored names of all files currently held in storage.

        Returns:
            List of stored file names
        """
        pass
