from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.utils.datetime import ensure_aware
from app.utils.validators import (
    MIN_PASSWORD_LENGTH,
    PasswordValidationError,
    validate_password_complexity,
)


class UserRegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=128)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        try:
            validate_password_complexity(v)
        except PasswordValidationError as e:
            # 轉成ValueError，Pydantic才會回傳422並附上所有未通過的規則
            raise ValueError('; '.join(e.errors))
        return v


class UserResponse(BaseModel):
    id: int
    email: str
    role: str
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return ensure_aware(v)


class UserLoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
