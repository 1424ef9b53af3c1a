"""Email verification service: one-time codes for local signup.

A signup request stores the account unverified together with a 6-digit
code, then emails the code. Only the most recently issued code is valid.
"""

import logging
import os
import secrets
from datetime import datetime, timedelta, timezone

from domain.model.email import normalize_email
from domain.model.errors import (
    AlreadyRegisteredError,
    DuplicateError,
    InvalidOrExpiredCodeError,
    NotificationError,
)
from domain.model.user import User
from port.notification import NotificationPort
from port.user_repository import UserRepository
from services.auth_service import hash_password, validate_password

logger = logging.getLogger(__name__)

OTP_TTL_MINUTES = int(os.getenv("OTP_TTL_MINUTES", "10"))
OTP_SUBJECT = "Your Recipe Portal verification code"


def generate_code() -> str:
    """Six-digit code drawn uniformly from 100000-999999."""
    return str(100000 + secrets.randbelow(900000))


def _render_message(name: str, code: str) -> str:
    return (
        f"Hi {name},\n"
        f"Your verification code is {code}.\n"
        f"It expires in {OTP_TTL_MINUTES} minutes. "
        "If you did not sign up, you can ignore this email."
    )


def request_code(
    repo: UserRepository,
    notifier: NotificationPort,
    name: str,
    email: str,
    raw_password: str,
    now: datetime | None = None,
) -> User:
    """Issue (or re-issue) a verification code for a pending signup.

    Raises:
        AlreadyRegisteredError: a verified account owns the email
        ValidationError: password does not meet strength requirements
        NotificationError: the email could not be sent; the code is revoked
    """
    email = normalize_email(email)
    existing = repo.get_by_email(email)
    if existing and existing.is_verified:
        raise AlreadyRegisteredError()

    validate_password(raw_password)
    now = now or datetime.now(timezone.utc)
    code = generate_code()

    try:
        user = repo.upsert_pending(
            email=email,
            name=name.strip(),
            password_hash=hash_password(raw_password),
            otp_code=code,
            otp_expires_at=now + timedelta(minutes=OTP_TTL_MINUTES),
        )
    except DuplicateError:
        raise AlreadyRegisteredError()

    try:
        notifier.send(email, OTP_SUBJECT, _render_message(user.name, code))
    except NotificationError:
        repo.clear_otp(user.id)
        logger.error("Verification code not delivered, code revoked", extra={"userId": user.id})
        raise

    logger.info("Verification code issued", extra={"userId": user.id})
    return user


def verify_code(
    repo: UserRepository,
    email: str,
    submitted_code: str,
    now: datetime | None = None,
) -> User:
    """Confirm a code and mark the account verified.

    Wrong and expired codes raise the same InvalidOrExpiredCodeError.
    """
    email = normalize_email(email)
    user = repo.consume_otp(email, submitted_code.strip(), now or datetime.now(timezone.utc))
    if user is None:
        logger.info("Verification code rejected", extra={"email": email})
        raise InvalidOrExpiredCodeError()

    logger.info("Email verified", extra={"userId": user.id})
    return user
