"""Content hashing for upload integrity records."""
import base64
import hashlib
from typing import BinaryIO

HASH_CHUNK_SIZE = 64 * 1024


def compute_content_hash(file_stream: BinaryIO) -> tuple[str, int]:
    """
    Compute the base64-encoded SHA-256 digest of a stream.

    The stream is read to the end; callers must rewind it before reading
    the content again.

    Args:
        file_stream: Readable binary stream

    Returns:
        Tuple of (base64 digest, number of bytes read)

    Examples:
        >>> from io import BytesIO
        >>> compute_content_hash(BytesIO(b""))
        ('47DEQpj8HBSa+/TImW+5JCeuQeRkm5NMpJWZG3hSuFU=', 0)
    """
    sha256 = hashlib.sha256()
    total_size = 0

    while True:
        chunk = file_stream.read(HASH_CHUNK_SIZE)
        if not chunk:
            break
        sha256.update(chunk)
        total_size += len(chunk)

    return base64.b64encode(sha256.digest()).decode("ascii"), total_size
