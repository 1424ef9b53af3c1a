"""In-memory implementation of UserRepository for testing."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone

from domain.model.errors import DuplicateError
from domain.model.user import User


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}

    def _check_unique(self, email: str, google_id: str | None, exclude_id: str | None = None):
        for user in self.store.values():
            if user.id == exclude_id:
                continue
            if user.email == email or (google_id and user.google_id == google_id):
                raise DuplicateError("Duplicate email or google_id")

    # ── write operations ─────────────────────────────────────

    def create(self, user: User) -> User:
        self._check_unique(user.email, user.google_id)
        stored = replace(user, id=user.id or uuid.uuid4().hex, favorites=list(user.favorites))
        self.store[stored.id] = stored
        return replace(stored)

    def upsert_pending(
        self,
        email: str,
        name: str,
        password_hash: str,
        otp_code: str,
        otp_expires_at: datetime,
    ) -> User:
        now = datetime.now(timezone.utc)
        existing = self._find(email=email)
        if existing and existing.is_verified:
            raise DuplicateError("Email already registered")

        if existing is None:
            existing = User(
                id=uuid.uuid4().hex,
                name=name,
                email=email,
                created_at=now,
                updated_at=now,
                auth_provider='local',
                is_verified=False,
            )
            self.store[existing.id] = existing

        existing.name = name
        existing.password_hash = password_hash
        existing.password_set = True
        existing.otp_code = otp_code
        existing.otp_expires_at = otp_expires_at
        existing.updated_at = now
        return replace(existing)

    def consume_otp(self, email: str, otp_code: str, now: datetime) -> User | None:
        user = self._find(email=email)
        if (
            not user
            or user.otp_code is None
            or user.otp_code != otp_code
            or user.otp_expires_at is None
            or not now < user.otp_expires_at
        ):
            return None

        user.is_verified = True
        user.otp_code = None
        user.otp_expires_at = None
        user.updated_at = now
        return replace(user)

    def clear_otp(self, user_id: str) -> bool:
        user = self.store.get(user_id)
        if not user:
            return False
        user.otp_code = None
        user.otp_expires_at = None
        return True

    def update_fields(self, user_id: str, fields: dict) -> User | None:
        user = self.store.get(user_id)
        if not user:
            return None
        if 'email' in fields or 'google_id' in fields:
            self._check_unique(
                fields.get('email', user.email),
                fields.get('google_id', user.google_id),
                exclude_id=user_id,
            )
        for key, value in fields.items():
            setattr(user, key, value)
        user.updated_at = datetime.now(timezone.utc)
        return replace(user)

    def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        user = self.store.get(user_id)
        if not user or user.password_set:
            return False
        user.password_hash = password_hash
        user.password_set = True
        user.updated_at = datetime.now(timezone.utc)
        return True

    def replace_password_hash(self, user_id: str, password_hash: str) -> bool:
        user = self.store.get(user_id)
        if not user or not user.password_set:
            return False
        user.password_hash = password_hash
        user.updated_at = datetime.now(timezone.utc)
        return True

    def toggle_favorite(self, user_id: str, recipe_id: str) -> list[str] | None:
        user = self.store.get(user_id)
        if not user:
            return None
        if recipe_id in user.favorites:
            user.favorites = [f for f in user.favorites if f != recipe_id]
        else:
            user.favorites = user.favorites + [recipe_id]
        return list(user.favorites)

    def update_last_login(self, user_id: str) -> bool:
        user = self.store.get(user_id)
        if not user:
            return False

        now = datetime.now(timezone.utc)
        user.last_login = now
        user.updated_at = now
        return True

    # ── read operations ──────────────────────────────────────

    def _find(self, email: str | None = None, google_id: str | None = None) -> User | None:
        for user in self.store.values():
            if email is not None and user.email == email:
                return user
            if google_id is not None and user.google_id == google_id:
                return user
        return None

    def get_by_email(self, email: str) -> User | None:
        user = self._find(email=email)
        return replace(user) if user else None

    def get_by_google_id(self, google_id: str) -> User | None:
        user = self._find(google_id=google_id)
        return replace(user) if user else None

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return replace(user) if user else None
