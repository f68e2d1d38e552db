"""Human-readable formatting helpers."""

SIZE_UNITS = ["B", "KB", "MB", "GB"]


def format_file_size(size_in_bytes: int) -> str:
    """
    Format a byte count using binary units, up to GB.

    Examples:
        >>> format_file_size(512)
        '512 B'
        >>> format_file_size(1536)
        '1.5 KB'
        >>> format_file_size(10 * 1024 * 1024)
        '10 MB'
    """
    size = float(size_in_bytes)
    order = 0
    while size >= 1024 and order < len(SIZE_UNITS) - 1:
        order += 1
        size /= 1024

    formatted = f"{size:.2f}".rstrip("0").rstrip(".")
    return f"{formatted} {SIZE_UNITS[order]}"
