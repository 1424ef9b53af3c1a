"""Session issuer: stateless bearer tokens.

Tokens are HS256 JWTs carrying the user id and email. Expiry is the only
invalidation mechanism; there is no revocation list.
"""

import logging
import os
import secrets
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from domain.model.errors import InvalidTokenError
from domain.model.session import TokenClaims

logger = logging.getLogger(__name__)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not JWT_SECRET_KEY:
    raise ValueError(
        "JWT_SECRET_KEY environment variable is required. "
        "Generate a secure key with: openssl rand -hex 32"
    )
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_DAYS = int(os.getenv("JWT_EXPIRATION_DAYS", "7"))


def issue(user_id: str, email: str, now: datetime | None = None) -> str:
    """Create a signed access token for user."""
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "iat": issued_at,
        "exp": issued_at + timedelta(days=JWT_EXPIRATION_DAYS),
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify(token: str) -> TokenClaims:
    """Check signature and expiry and return the embedded claims.

    Raises:
        InvalidTokenError: bad signature, expired, malformed or missing claims
    """
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        logger.debug("JWT expired")
        raise InvalidTokenError()
    except JWTError as e:
        logger.debug(f"JWT verification failed: {e}")
        raise InvalidTokenError()

    user_id = payload.get("sub")
    if not user_id or "exp" not in payload:
        raise InvalidTokenError()

    return TokenClaims(
        user_id=user_id,
        email=payload.get("email", ""),
        issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


# ── OAuth state ──────────────────────────────────────────────

STATE_TTL_MINUTES = 10


def issue_state(redirect_to: str, nonce: str) -> str:
    """Signed, short-lived OAuth state carrying where to land after sign-in.

    nonce is also handed to the browser as a cookie; read_state() only
    accepts the state back from the browser holding it.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "redirectTo": redirect_to,
        "nonce": nonce,
        "purpose": "oauth_state",
        "iat": now,
        "exp": now + timedelta(minutes=STATE_TTL_MINUTES),
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def read_state(state: str, nonce: str | None) -> str:
    """Return the redirect path from a state issued by issue_state() for this nonce."""
    try:
        payload = jwt.decode(state, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise InvalidTokenError("Sign-in session expired, please try again")
    if payload.get("purpose") != "oauth_state":
        raise InvalidTokenError()
    expected = payload.get("nonce")
    if not nonce or not expected or not secrets.compare_digest(nonce, expected):
        logger.warning("OAuth state presented without its browser nonce")
        raise InvalidTokenError("Sign-in session expired, please try again")
    return payload.get("redirectTo", "/")
