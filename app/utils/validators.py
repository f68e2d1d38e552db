"""Password policy for new accounts."""
import re

MIN_PASSWORD_LENGTH = 6

# (pattern that must match, message when it does not)
PASSWORD_CHARACTER_RULES = [
    (re.compile(r"[A-Z]"), "Password must contain at least 1 uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least 1 lowercase letter"),
    (re.compile(r"\d"), "Password must contain at least 1 digit"),
]


class PasswordValidationError(Exception):
    """Raised with every rule the password breaks."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__('; '.join(errors))


def validate_password_complexity(password: str) -> None:
    """
    Check a password against the account policy.

    The password needs at least 6 characters, one uppercase letter, one
    lowercase letter and one digit. Special characters are allowed but
    not required.

    Raises:
        PasswordValidationError: Listing all broken rules, not just the first
    """
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    errors.extend(
        message for pattern, message in PASSWORD_CHARACTER_RULES if not pattern.search(password)
    )

    if errors:
        raise PasswordValidationError(errors)
