"""
File service exceptions.

Storage-level failures live in app.storage.exceptions; the classes here
cover validation, metadata and authorization outcomes of file operations.
"""


class FileServiceError(Exception):
    """Base exception for file service operations."""

    pass


class InvalidInputError(FileServiceError):
    """Raised when an upload is empty, malformed or violates policy."""

    pass


class PayloadTooLargeError(InvalidInputError):
    """Raised when uploaded content exceeds the configured size limit."""

    def __init__(self, file_size: int, max_size: int):
        self.file_size = file_size
        self.max_size = max_size
        super().__init__(
            f"File size ({file_size} bytes) exceeds maximum allowed size ({max_size} bytes)"
        )


class UnsupportedFileTypeError(InvalidInputError):
    """Raised when the file extension is not in the allow-list."""

    def __init__(self, extension: str, allowed_extensions: list[str]):
        self.extension = extension
        self.allowed_extensions = allowed_extensions
        super().__init__(
            f"File type '{extension or '(none)'}' is not allowed. "
            f"Allowed types: {', '.join(allowed_extensions)}"
        )


class ConflictError(FileServiceError):
    """Raised when a stored file name collides with an existing record."""

    def __init__(self, stored_file_name: str):
        self.stored_file_name = stored_file_name
        super().__init__(f"Stored file name already exists: {stored_file_name}")


class RecordNotFoundError(FileServiceError):
    """Raised when file metadata is missing or soft-deleted."""

    def __init__(self, reference: int | str):
        self.reference = reference
        super().__init__(f"File record not found: {reference}")


class UnauthorizedError(FileServiceError):
    """Raised when no caller identity is present."""

    pass


class ForbiddenError(FileServiceError):
    """Raised when the caller neither owns the file nor holds an elevated role."""

    pass


class AuthError(Exception):
    """Base exception for account registration and login."""
    pass


class EmailAlreadyRegisteredError(AuthError):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email already registered: {email}")


class InvalidCredentialsError(AuthError):
    """Raised when the email is unknown or the password does not match."""
    pass


class InactiveUserError(AuthError):
    """Raised when a deactivated account tries to log in."""
    pass
