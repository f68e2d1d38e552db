"""
Utility functions for naming stored files.

Stored names are decoupled from the names clients upload with: by default
they are generated from a UTC timestamp plus a random hex suffix, which
keeps them unique in practice and safe to use as a single path component.
"""
import os
import re
import uuid
from datetime import datetime, timezone

# Characters that are invalid in file names on common filesystems,
# plus ASCII control characters
INVALID_FILE_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

MAX_SANITIZED_LENGTH = 100


def get_file_extension(file_name: str) -> str:
    """
    Return the lower-cased extension of a file name, including the dot.

    Examples:
        >>> get_file_extension("Report.PDF")
        '.pdf'
        >>> get_file_extension("README")
        ''
    """
    return os.path.splitext(file_name)[1].lower()


def sanitize_file_name(file_name: str) -> str:
    """
    Strip characters that are invalid in file names and truncate to 100 chars.

    Examples:
        >>> sanitize_file_name('bad:name?.txt')
        'badname.txt'
    """
    sanitized = INVALID_FILE_NAME_CHARS.sub("", file_name)
    return sanitized[:MAX_SANITIZED_LENGTH]


def generate_stored_name(original_file_name: str, unique: bool = True) -> str:
    """
    Generate the name a file is stored under.

    Args:
        original_file_name: File name declared by the client
        unique: Generate a timestamped random name instead of sanitizing
            the original name

    Returns:
        "{YYYYmmdd_HHMMSS}_{8 hex chars}{extension}" in unique mode,
        otherwise the sanitized original name

    Examples:
        >>> generate_stored_name("my report.pdf", unique=False)
        'my report.pdf'

    Notes:
        - No collision retry happens here; a duplicate name is rejected by
          the exclusive content write and the unique constraint on the
          metadata store.
    """
    if not unique:
        return sanitize_file_name(original_file_name)

    extension = os.path.splitext(original_file_name)[1]
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    unique_id = uuid.uuid4().hex[:8]

    return f"{timestamp}_{unique_id}{extension}"
