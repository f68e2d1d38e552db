"""
Account service: password hashing, registration, login and the default
administrator account.
"""
import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import EmailAlreadyRegisteredError, InactiveUserError, InvalidCredentialsError
from app.logging_config import setup_logging
from app.models.user import User, UserRole

logger = setup_logging()


def hash_password(password: str) -> str:
    # bcrypt.gensalt()每次產生不同的鹽值；.decode()轉成字串方便存入資料庫
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()


def register_user(db: Session, email: str, password: str, role: str = UserRole.USER) -> User:
    """
    Create an account.

    Args:
        db: Database session
        email: Email address (stored lower-cased)
        password: Plain password, already validated for complexity
        role: Role of the new account

    Returns:
        The created user

    Raises:
        EmailAlreadyRegisteredError: The email already has an account
    """
    email = email.lower()
    if get_user_by_email(db, email):
        raise EmailAlreadyRegisteredError(email)

    user = User(email=email, hashed_password=hash_password(password), role=role)
    try:
        db.add(user)
        db.commit()
        # 重新讀取資料庫產生的欄位（id、created_at）
        db.refresh(user)
    except IntegrityError as e:
        # Concurrent registration of the same email
        db.rollback()
        raise EmailAlreadyRegisteredError(email) from e

    logger.info(f"User registered: {user.id} ({role})")
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    """
    Check an email/password pair.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        InactiveUserError: The account is deactivated
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        logger.warning(f"Failed login attempt for {email.lower()}")
        raise InvalidCredentialsError("Invalid credentials")

    if not user.is_active:
        logger.warning(f"Login attempt for inactive user {user.id}")
        raise InactiveUserError("User is inactive")

    return user


def ensure_default_admin(db: Session, email: str, password: str) -> User:
    """
    Create the default administrator account if it does not exist yet.

    An existing account with that email is returned unchanged.
    """
    user = get_user_by_email(db, email)
    if user:
        return user

    user = register_user(db, email, password, role=UserRole.ADMIN)
    logger.info(f"Default admin user created: {user.email}")
    return user
