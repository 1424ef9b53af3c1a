from datetime import datetime
from typing import Protocol

from domain.model.user import User


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Every mutating method is a single-document atomic operation. Emails
    passed in are expected to be normalized already.
    """

    def create(self, user: User) -> User:
        """Insert a new user. Raise DuplicateError on email/google_id collision."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def get_by_google_id(self, google_id: str) -> User | None:
        """Find a user by linked Google account id."""
        ...

    def upsert_pending(
        self,
        email: str,
        name: str,
        password_hash: str,
        otp_code: str,
        otp_expires_at: datetime,
    ) -> User:
        """Create or refresh the unverified record for email with a new code.

        Raise DuplicateError if a verified user already owns the email.
        """
        ...

    def consume_otp(self, email: str, otp_code: str, now: datetime) -> User | None:
        """Mark the matching, unexpired code as used and the user verified.

        Return None when email, code and expiry do not all match.
        """
        ...

    def clear_otp(self, user_id: str) -> bool:
        """Drop any outstanding code for user."""
        ...

    def update_fields(self, user_id: str, fields: dict) -> User | None:
        """Set exactly the given fields. Return the updated User or None if missing."""
        ...

    def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        """First-time password write. Return False if a password is already set."""
        ...

    def replace_password_hash(self, user_id: str, password_hash: str) -> bool:
        """Overwrite an existing password. Return False if none is set."""
        ...

    def toggle_favorite(self, user_id: str, recipe_id: str) -> list[str] | None:
        """Flip membership of recipe_id. Return the new favorites or None if user is missing."""
        ...

    def update_last_login(self, user_id: str) -> bool:
        """Update the last login timestamp for a user. Return True if successful."""
        ...
