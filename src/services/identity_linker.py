"""OAuth identity linker.

Resolves an external identity to exactly one local account: first by
provider id, then by normalized email (merging a prior local signup),
otherwise by creating a verified account without a password.
"""

import logging
from datetime import datetime, timezone
from urllib.parse import urlparse

from domain.model.email import normalize_email
from domain.model.errors import DuplicateError, IdentityLinkError
from domain.model.user import ExternalIdentity, User
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)

PROVIDER_PHOTO_HOSTS = ("googleusercontent.com", "ggpht.com")


def is_provider_photo(url: str | None) -> bool:
    """True when url is hosted by the identity provider rather than uploaded."""
    if not url:
        return False
    host = urlparse(url).hostname or ""
    return any(host == h or host.endswith("." + h) for h in PROVIDER_PHOTO_HOSTS)


def _backfill(user: User, identity: ExternalIdentity, provider: str) -> dict:
    """Fields to update on an existing account during a provider login.

    password_set and auth_provider are only filled when missing, never overwritten.
    """
    changes = {}
    if identity.photo and (not user.photo or is_provider_photo(user.photo)):
        if user.photo != identity.photo:
            changes["photo"] = identity.photo
    if user.password_set is None:
        changes["password_set"] = user.password_hash is not None
    if user.auth_provider is None:
        changes["auth_provider"] = provider
    return changes


def link_or_create(repo: UserRepository, identity: ExternalIdentity) -> User:
    """Return the account for identity, linking or creating it as needed.

    Calling twice with the same provider id yields the same account.

    Raises:
        IdentityLinkError: any persistence failure; the single-document
            update either commits fully or not at all
    """
    email = normalize_email(identity.email)
    try:
        user = repo.get_by_google_id(identity.provider_id)
        if user:
            return _apply(repo, user, _backfill(user, identity, "google"))

        user = repo.get_by_email(email)
        if user:
            changes = _backfill(user, identity, "local" if user.password_hash else "google")
            changes["google_id"] = identity.provider_id
            # Pending signups stay unverified; only the emailed code verifies them
            logger.info("Linked Google account to existing user", extra={"userId": user.id})
            return _apply(repo, user, changes)

        return _create(repo, identity, email)
    except IdentityLinkError:
        raise
    except Exception as e:
        logger.error(
            "Identity linking failed",
            extra={"providerId": identity.provider_id, "error": str(e)},
            exc_info=True,
        )
        raise IdentityLinkError() from e


def _apply(repo: UserRepository, user: User, changes: dict) -> User:
    if not changes:
        return user
    updated = repo.update_fields(user.id, changes)
    if updated is None:
        raise IdentityLinkError("User disappeared while linking")
    return updated


def _create(repo: UserRepository, identity: ExternalIdentity, email: str) -> User:
    now = datetime.now(timezone.utc)
    try:
        user = repo.create(User(
            id="",
            name=identity.name,
            email=email,
            created_at=now,
            updated_at=now,
            password_set=False,
            auth_provider="google",
            google_id=identity.provider_id,
            is_verified=True,
            photo=identity.photo,
        ))
    except DuplicateError:
        # A concurrent callback for the same identity created it first
        user = repo.get_by_google_id(identity.provider_id)
        if user is None:
            raise IdentityLinkError("Email is linked to a different Google account")
        return user

    logger.info("Created user from Google sign-in", extra={"userId": user.id})
    return user
