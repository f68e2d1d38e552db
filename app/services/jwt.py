"""
JWT access tokens.

Tokens carry the user id as "sub" plus "iat"/"exp". A "role" claim is
added for clients to read; authorization never trusts it and always
loads the role from the database.
"""
from datetime import datetime, timedelta, timezone

import jwt

from app.config import settings
from app.logging_config import setup_logging

logger = setup_logging()

REQUIRED_CLAIMS = ["sub", "exp"]


def create_access_token(
    user_id: int,
    role: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    payload = {"sub": str(user_id), "iat": issued_at, "exp": expire}
    if role is not None:
        payload["role"] = role
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Return the claims of a valid token, or None if it is invalid or expired."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except jwt.PyJWTError as e:
        logger.warning(f"Rejected invalid access token: {e.__class__.__name__}")
        return None
