"""
Authorization utilities for file access.

The ownership guard is a pure function of (caller identity, caller roles,
file record). Endpoints call it explicitly before serving, downloading,
describing or deleting a file.
"""
from collections.abc import Iterable
from enum import Enum

from app.config import settings
from app.exceptions import ForbiddenError, RecordNotFoundError, UnauthorizedError
from app.models.file_record import FileRecord


class AccessDecision(str, Enum):
    GRANTED = "granted"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


def has_elevated_role(
    roles: Iterable[str],
    elevated_roles: Iterable[str] | None = None,
) -> bool:
    """Check whether any of the caller's roles grants access to every file."""
    elevated = set(settings.ELEVATED_ROLES if elevated_roles is None else elevated_roles)
    return any(role in elevated for role in roles)


def check_file_access(
    identity: str | None,
    roles: Iterable[str],
    record: FileRecord | None,
    elevated_roles: Iterable[str] | None = None,
) -> AccessDecision:
    """
    Decide whether a caller may act on a file record.

    Rules, in order:
    - No identity: UNAUTHORIZED (the record is not consulted)
    - Record missing or soft-deleted: NOT_FOUND
    - Caller owns the record, or holds an elevated role: GRANTED
    - Otherwise: FORBIDDEN

    Args:
        identity: Caller identity, None for unauthenticated callers
        roles: Roles held by the caller
        record: The file record being accessed, if it exists
        elevated_roles: Roles that may access any file (default from config)

    Returns:
        AccessDecision for the request
    """
    if not identity:
        return AccessDecision.UNAUTHORIZED

    if record is None or not record.is_active:
        return AccessDecision.NOT_FOUND

    if record.uploaded_by_user == identity or has_elevated_role(roles, elevated_roles):
        return AccessDecision.GRANTED

    return AccessDecision.FORBIDDEN


def ensure_file_access(
    identity: str | None,
    roles: Iterable[str],
    record: FileRecord | None,
    file_reference: int | str,
    elevated_roles: Iterable[str] | None = None,
) -> FileRecord:
    """
    Raise the matching exception unless access is granted.

    Returns:
        The record, when access is granted

    Raises:
        UnauthorizedError: No identity
        RecordNotFoundError: Record missing or soft-deleted
        ForbiddenError: Identity present but not owner and not elevated
    """
    decision = check_file_access(identity, roles, record, elevated_roles)

    if decision is AccessDecision.UNAUTHORIZED:
        raise UnauthorizedError("Authentication required")
    if decision is AccessDecision.NOT_FOUND:
        raise RecordNotFoundError(file_reference)
    if decision is AccessDecision.FORBIDDEN:
        raise ForbiddenError(f"Access to file {file_reference} denied")

    return record
