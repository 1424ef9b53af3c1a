from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class User:
    """Domain model representing a user account.

    ``password_set`` is stored explicitly and always matches
    ``password_hash is not None``; once True it never reverts.
    ``password_set`` and ``auth_provider`` are None only on legacy
    records that predate those fields and have not been backfilled.
    """
    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime
    last_login: datetime | None = None
    password_hash: str | None = None
    password_set: bool | None = None
    auth_provider: str | None = None
    google_id: str | None = None
    is_verified: bool = False
    otp_code: str | None = None
    otp_expires_at: datetime | None = None
    favorites: list[str] = field(default_factory=list)
    photo: str | None = None
    banner_image: str | None = None
    age: int | None = None
    bio: str | None = None

    @property
    def has_password(self) -> bool:
        return bool(self.password_set and self.password_hash)


@dataclass(frozen=True)
class ExternalIdentity:
    """Identity handed back by an external OAuth provider after the handshake."""
    provider_id: str
    email: str
    name: str
    photo: str | None = None
