"""Auth service: password lifecycle and login business logic.

Pure business logic with no HTTP dependencies.
Raises domain errors that the API layer maps to HTTP status codes.

A password moves one way, from "no password" to "password set"; after that
it can only be changed, never removed.
"""

import logging
import os
import re

import bcrypt

from domain.model.email import normalize_email
from domain.model.errors import (
    EmailNotVerifiedError,
    InvalidCredentialsError,
    NoPasswordSetError,
    PasswordAlreadySetError,
    SamePasswordError,
    UserNotFoundError,
    ValidationError,
)
from domain.model.user import User
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
MIN_PASSWORD_LENGTH = 6
REQUIRE_MIXED_CASE = os.getenv("PASSWORD_REQUIRE_MIXED_CASE", "false").lower() in ("1", "true", "yes")


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def validate_password(password: str, field: str = "password",
                      require_mixed_case: bool | None = None) -> None:
    """Raise ValidationError unless password meets the strength policy."""
    if require_mixed_case is None:
        require_mixed_case = REQUIRE_MIXED_CASE
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long", field=field
        )
    if not re.search(r"[0-9]", password):
        raise ValidationError("Password must contain at least one number", field=field)
    if require_mixed_case:
        if not re.search(r"[A-Z]", password):
            raise ValidationError("Password must contain at least one uppercase letter", field=field)
        if not re.search(r"[a-z]", password):
            raise ValidationError("Password must contain at least one lowercase letter", field=field)


def _require_user(repo: UserRepository, user_id: str) -> User:
    user = repo.get_by_id(user_id)
    if not user:
        raise UserNotFoundError()
    return user


def authenticate(repo: UserRepository, email: str, password: str) -> User:
    """Authenticate a user by email and password.

    Doesn't reveal whether the email exists or which check failed, except
    that a correct password on an unverified local account says so.

    Raises:
        InvalidCredentialsError: unknown email, no password yet, or mismatch
        EmailNotVerifiedError: local account that never confirmed its code
    """
    user = repo.get_by_email(normalize_email(email))
    if not user or not user.has_password or not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()

    if user.auth_provider in (None, "local") and not user.is_verified:
        raise EmailNotVerifiedError()

    repo.update_last_login(user.id)
    logger.info("User logged in", extra={"userId": user.id})
    return user


def set_password(repo: UserRepository, user_id: str, new_password: str) -> User:
    """First-time password for an account that has none (typically OAuth-created).

    Raises:
        PasswordAlreadySetError: a password exists; checked before validation
        ValidationError: password does not meet strength requirements
    """
    user = _require_user(repo, user_id)
    if user.password_set:
        raise PasswordAlreadySetError()

    validate_password(new_password)
    if not repo.set_password_hash(user_id, hash_password(new_password)):
        # Lost a race with a concurrent set-password for the same user
        raise PasswordAlreadySetError()

    logger.info("Password set", extra={"userId": user_id})
    return _require_user(repo, user_id)


def change_password(repo: UserRepository, user_id: str, current_password: str, new_password: str) -> None:
    """Replace an existing password after re-checking the current one.

    Raises:
        NoPasswordSetError: account has no password to change
        SamePasswordError: new equals current (checked before hashing)
        InvalidCredentialsError: current password does not match
        ValidationError: new password does not meet strength requirements
    """
    user = _require_user(repo, user_id)
    if not user.password_set:
        raise NoPasswordSetError()

    if new_password == current_password:
        raise SamePasswordError()

    if not verify_password(current_password, user.password_hash):
        raise InvalidCredentialsError("Current password is incorrect")

    validate_password(new_password, field="newPassword")
    if not repo.replace_password_hash(user_id, hash_password(new_password)):
        raise NoPasswordSetError()

    logger.info("Password changed", extra={"userId": user_id})


def password_status(user: User) -> dict:
    return {
        "has_password": user.has_password,
        "auth_provider": user.auth_provider,
        "has_google": user.google_id is not None,
    }
