"""
Response envelopes shared by every endpoint.

Successful responses wrap their payload in APIResponse; failures carry an
ErrorResponse body (success=False, a short error label and a message).
"""
from typing import Generic, TypeVar

from fastapi import HTTPException
from pydantic import BaseModel

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str


class DeleteResponseData(BaseModel):
    id: int
    deleted: bool


def api_error(status_code: int, error: str, message: str) -> HTTPException:
    """
    Build an HTTPException whose detail is an ErrorResponse body.

    The application's HTTPException handler unwraps the detail, so clients
    receive {"success": false, "error": ..., "message": ...} directly.
    """
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(error=error, message=message).model_dump(),
    )
