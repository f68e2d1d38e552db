"""
Local filesystem storage implementation.

This module provides a local filesystem implementation of the storage backend
with async file operations. Files live directly under the storage root,
named by their server-generated stored name.
"""
import os
from pathlib import Path
from typing import AsyncIterator, BinaryIO

import aiofiles

from app.config import settings
from app.logging_config import setup_logging
from app.storage.base import StorageBackend
from app.storage.exceptions import FileAlreadyExistsError, FileNotFoundError, StorageError

logger = setup_logging()

# Stream file content in 64KB chunks
CHUNK_SIZE = 64 * 1024

# Deny-all marker written into a freshly created storage root so a generic
# static file handler pointed at it refuses to serve the raw files.
ACCESS_MARKER_FILE = ".htaccess"
ACCESS_MARKER_CONTENT = "deny from all"


class LocalStorageBackend(StorageBackend):
    """
    Local filesystem storage with async operations.

    Layout: <base_path>/<stored_file_name>
    """

    def __init__(self, base_path: str | None = None):
        """
        Initialize local storage backend.

        Args:
            base_path: Base directory for file storage (default from config)
        """
        self.base_path = Path(base_path or settings.STORAGE_BASE_PATH)

    async def save_file(
        self,
        stored_file_name: str,
        file_stream: BinaryIO,
        overwrite: bool = True,
    ) -> str:
        """
        Stream file to disk in chunks (async).

        With overwrite=False the file is created exclusively, so of two
        concurrent writers to the same name only one gets to write.

        Args:
            stored_file_name: Server-generated name of the file
            file_stream: Readable binary stream positioned at the start
            overwrite: Replace an existing file (default True)

        Returns:
            Full file path where file was saved

        Raises:
            FileAlreadyExistsError: overwrite is False and the file exists
            StorageError: If save operation fails
        """
        file_path = self._get_file_path(stored_file_name)
        mode = "wb" if overwrite else "xb"

        try:
            await self._ensure_storage_root()
        except OSError as e:
            raise StorageError(f"Failed to prepare storage root: {str(e)}") from e

        try:
            f = await aiofiles.open(file_path, mode)
        except FileExistsError as e:
            # Belongs to another writer; must not be cleaned up here
            raise FileAlreadyExistsError(stored_file_name) from e
        except OSError as e:
            raise StorageError(f"Failed to save file {stored_file_name}: {str(e)}") from e

        try:
            async with f:
                while True:
                    chunk = file_stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    await f.write(chunk)

        except Exception as e:
            # Clean up partial file on error
            if os.path.exists(file_path):
                try:
                    os.remove(file_path)
                except OSError:
                    logger.warning(f"Could not remove partial file: {file_path}")
            raise StorageError(f"Failed to save file {stored_file_name}: {str(e)}") from e

        return str(file_path)

    def open_file(self, stored_file_name: str) -> AsyncIterator[bytes]:
        """
        Open a stored file for streaming.

        The existence check happens immediately so callers get
        FileNotFoundError before any response is started.

        Args:
            stored_file_name: Server-generated name of the file

        Returns:
            Async iterator yielding file chunks

        Raises:
            FileNotFoundError: If file doesn't exist
        """
        file_path = self._get_file_path(stored_file_name)

        if not file_path.is_file():
            raise FileNotFoundError(stored_file_name)

        return self._iter_file(file_path)

    def get_file_path(self, stored_file_name: str) -> str:
        """
        Get the full path for a stored file.

        Args:
            stored_file_name: Server-generated name of the file

        Returns:
            Full file path
        """
        return str(self._get_file_path(stored_file_name))

    async def delete_file(self, stored_file_name: str) -> bool:
        """
        Delete a file from storage.

        Args:
            stored_file_name: Server-generated name of the file

        Returns:
            True if the file was removed, False if it did not exist

        Raises:
            StorageError: If the file exists but cannot be removed
        """
        file_path = self._get_file_path(stored_file_name)

        if not file_path.exists():
            return False

        try:
            os.remove(file_path)
        except OSError as e:
            raise StorageError(f"Failed to delete file {stored_file_name}: {str(e)}") from e

        return True

    def file_exists(self, stored_file_name: str) -> bool:
        """
        Check if a file exists in storage.

        Args:
            stored_file_name: Server-generated name of the file

        Returns:
            True if file exists, False otherwise
        """
        return self._get_file_path(stored_file_name).is_file()

    def list_files(self) -> list[str]:
        """
        List stored names of all files under the storage root.

        Returns:
            List of stored file names (the access marker is excluded)
        """
        if not self.base_path.exists():
            return []

        return sorted(
            entry.name
            for entry in self.base_path.iterdir()
            if entry.is_file() and entry.name != ACCESS_MARKER_FILE
        )

    def _get_file_path(self, stored_file_name: str) -> Path:
        """
        Resolve the path of a stored file.

        Stored names are single path components; anything that would
        escape the storage root is rejected.

        Args:
            stored_file_name: Server-generated name of the file

        Returns:
            Full file path as Path object

        Raises:
            StorageError: If the name is not a plain file name
        """
        if (
            not stored_file_name
            or stored_file_name in (".", "..")
            or Path(stored_file_name).name != stored_file_name
            or "\\" in stored_file_name
        ):
            raise StorageError(f"Invalid stored file name: {stored_file_name!r}")

        return self.base_path / stored_file_name

    async def _ensure_storage_root(self) -> None:
        """
        Create the storage root if absent.

        A root created here also receives the deny-all access marker.
        """
        if self.base_path.is_dir():
            return

        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created secure storage directory: {self.base_path}")

        marker_path = self.base_path / ACCESS_MARKER_FILE
        if not marker_path.exists():
            async with aiofiles.open(marker_path, "w") as f:
                await f.write(ACCESS_MARKER_CONTENT)

    async def _iter_file(self, file_path: Path) -> AsyncIterator[bytes]:
        async with aiofiles.open(file_path, "rb") as f:
            while True:
                chunk = await f.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
