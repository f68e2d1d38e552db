"""
Caller resolution for FastAPI endpoints.

Bearer tokens are JWTs issued by /auth/login. The user row is loaded on
every request, so role changes and deactivation apply immediately.
"""
from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.common import api_error
from app.services.jwt import decode_access_token
from app.utils.authorization import has_elevated_role

# auto_error=False：沒有Authorization標頭時不自動回傳錯誤，
# 交給下面的依賴函式決定要回傳401還是允許匿名
security = HTTPBearer(auto_error=False)


def _unauthorized(message: str):
    return api_error(status.HTTP_401_UNAUTHORIZED, "Unauthorized", message)


def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User | None:
    """
    Resolve the caller from a bearer token.

    Returns None when no token is sent, so file endpoints can reject the
    caller themselves before looking anything up.

    Raises:
        HTTPException 401: Token invalid or user unknown
        HTTPException 403: User inactive
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token")

    user = db.get(User, user_id)
    if not user:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise api_error(status.HTTP_403_FORBIDDEN, "Forbidden", "User is inactive")

    return user


def get_current_user(
    user: User | None = Depends(get_current_user_optional),
) -> User:
    if user is None:
        raise _unauthorized("Not authenticated")
    return user


def require_elevated_role(
    user: User = Depends(get_current_user),
) -> User:
    """Allow only callers holding an elevated role (Admin by default)."""
    if not has_elevated_role(user.roles):
        raise api_error(status.HTTP_403_FORBIDDEN, "Forbidden", "Administrator role required")
    return user
