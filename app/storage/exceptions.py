"""
Storage-specific exceptions.

These exceptions provide detailed error handling for storage operations.
"""


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class FileNotFoundError(StorageError):
    """Raised when requested file is not found in storage."""

    def __init__(self, stored_file_name: str):
        self.stored_file_name = stored_file_name
        super().__init__(f"Physical file not found: {stored_file_name}")


class FileAlreadyExistsError(StorageError):
    """Raised when a save that must not overwrite finds the file present."""

    def __init__(self, stored_file_name: str):
        self.stored_file_name = stored_file_name
        super().__init__(f"Physical file already exists: {stored_file_name}")
