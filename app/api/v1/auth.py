from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import EmailAlreadyRegisteredError, InactiveUserError, InvalidCredentialsError
from app.schemas.auth import TokenResponse, UserLoginRequest, UserRegisterRequest, UserResponse
from app.schemas.common import APIResponse, api_error
from app.services.auth import authenticate_user, register_user
from app.services.jwt import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=APIResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
def register(request: UserRegisterRequest, db: Session = Depends(get_db)):
    """
    Create an account with the User role.

    Password rules: at least 6 characters with an uppercase letter, a
    lowercase letter and a digit.
    """
    try:
        user = register_user(db, request.email, request.password)
    except EmailAlreadyRegisteredError:
        raise api_error(status.HTTP_400_BAD_REQUEST, "Bad Request", "Email already exists")

    return APIResponse(success=True, data=UserResponse.model_validate(user))


@router.post("/login", response_model=APIResponse[TokenResponse])
def login(request: UserLoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    try:
        user = authenticate_user(db, request.email, request.password)
    except InvalidCredentialsError:
        raise api_error(status.HTTP_401_UNAUTHORIZED, "Unauthorized", "Invalid credentials")
    except InactiveUserError:
        raise api_error(status.HTTP_403_FORBIDDEN, "Forbidden", "User is inactive")

    access_token = create_access_token(user.id, user.role)
    return APIResponse(
        success=True,
        data=TokenResponse(access_token=access_token, role=user.role),
    )
