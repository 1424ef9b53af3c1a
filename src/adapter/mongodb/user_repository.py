"""MongoDB implementation of UserRepository.

Each mutation is one single-document operation, so concurrent requests
against the same user are serialized by MongoDB itself.
"""

import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from logging import getLogger

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb import USERS_COLLECTION_NAME, to_key
from domain.model.errors import DuplicateError
from domain.model.user import User

logger = getLogger(__name__)

_OTP_FIELDS = {'otp_code': '', 'otp_expires_at': ''}


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            create_index_safe(
                self.collection, [('google_id', 1)], 'idx_users_google_id',
                unique=True,
                partialFilterExpression={'google_id': {'$type': 'string'}},
            )
            create_index_safe(self.collection, [('created_at', -1)], 'idx_users_created_at')
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=str(doc['_id']),
            name=doc.get('name', ''),
            email=doc['email'],
            created_at=doc['created_at'],
            updated_at=doc.get('updated_at', doc['created_at']),
            last_login=doc.get('last_login'),
            password_hash=doc.get('password_hash'),
            password_set=doc.get('password_set'),
            auth_provider=doc.get('auth_provider'),
            google_id=doc.get('google_id'),
            is_verified=doc.get('is_verified', False),
            otp_code=doc.get('otp_code'),
            otp_expires_at=doc.get('otp_expires_at'),
            favorites=[str(f) for f in doc.get('favorites', [])],
            photo=doc.get('photo'),
            banner_image=doc.get('banner_image'),
            age=doc.get('age'),
            bio=doc.get('bio'),
        )

    def _find_one(self, query: dict, label: str) -> User | None:
        try:
            doc = self.collection.find_one(query)
            return self._to_domain(doc) if doc else None
        except PyMongoError as e:
            logger.error(f"Failed to get user by {label}", extra={"query": label, "error": str(e)})
            raise

    # ── write operations ─────────────────────────────────────

    def create(self, user: User) -> User:
        """Insert a new user document. Raise DuplicateError on unique-key collision."""
        user_doc = asdict(user)
        user_doc['_id'] = user_doc.pop('id') or uuid.uuid4().hex
        # Unlinked accounts must not carry the key at all (partial unique index)
        if user_doc['google_id'] is None:
            user_doc.pop('google_id')
        try:
            self.collection.insert_one(user_doc)
        except DuplicateKeyError:
            logger.warning("User creation failed: duplicate key", extra={"email": user.email})
            raise DuplicateError("Email or Google account already registered")
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"email": user.email, "error": str(e)})
            raise

        logger.info("User created", extra={"userId": user_doc['_id'], "email": user.email})
        return self._to_domain(user_doc)

    def upsert_pending(
        self,
        email: str,
        name: str,
        password_hash: str,
        otp_code: str,
        otp_expires_at: datetime,
    ) -> User:
        """Create or refresh the unverified record for email in one atomic step.

        Filtering on is_verified=False means a verified owner of the email makes
        the upsert attempt an insert, which the unique email index rejects.
        """
        now = datetime.now(timezone.utc)
        query = {'email': email, 'is_verified': False}
        changes = {
            'name': name,
            'password_hash': password_hash,
            'password_set': True,
            'otp_code': otp_code,
            'otp_expires_at': otp_expires_at,
            'updated_at': now,
        }
        on_insert = {
            '_id': uuid.uuid4().hex,
            'created_at': now,
            'auth_provider': 'local',
            'favorites': [],
        }
        try:
            doc = self.collection.find_one_and_update(
                query,
                {'$set': changes, '$setOnInsert': on_insert},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            # Either a verified user owns the email, or a concurrent request
            # inserted the pending record first; only the latter is retried.
            doc = self.collection.find_one_and_update(
                query, {'$set': changes}, return_document=ReturnDocument.AFTER,
            )
            if doc is None:
                raise DuplicateError("Email already registered")
        except PyMongoError as e:
            logger.error("Failed to upsert pending user", extra={"email": email, "error": str(e)})
            raise
        return self._to_domain(doc)

    def consume_otp(self, email: str, otp_code: str, now: datetime) -> User | None:
        try:
            doc = self.collection.find_one_and_update(
                {'email': email, 'otp_code': otp_code, 'otp_expires_at': {'$gt': now}},
                {'$set': {'is_verified': True, 'updated_at': now}, '$unset': _OTP_FIELDS},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Failed to consume verification code", extra={"email": email, "error": str(e)})
            raise
        return self._to_domain(doc) if doc else None

    def clear_otp(self, user_id: str) -> bool:
        try:
            result = self.collection.update_one({'_id': to_key(user_id)}, {'$unset': _OTP_FIELDS})
            return result.matched_count > 0
        except PyMongoError as e:
            logger.error("Failed to clear verification code", extra={"userId": user_id, "error": str(e)})
            raise

    def update_fields(self, user_id: str, fields: dict) -> User | None:
        """Apply a partial $set touching exactly the given fields."""
        changes = dict(fields, updated_at=datetime.now(timezone.utc))
        try:
            doc = self.collection.find_one_and_update(
                {'_id': to_key(user_id)},
                {'$set': changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            logger.warning("User update hit a unique key", extra={"userId": user_id, "fields": sorted(fields)})
            raise DuplicateError("Email or Google account already linked to another user")
        except PyMongoError as e:
            logger.error("Failed to update user", extra={"userId": user_id, "error": str(e)})
            raise
        return self._to_domain(doc) if doc else None

    def set_password_hash(self, user_id: str, password_hash: str) -> bool:
        """Write the first password; the filter refuses users that already have one."""
        try:
            result = self.collection.update_one(
                {'_id': to_key(user_id), 'password_set': {'$ne': True}},
                {'$set': {
                    'password_hash': password_hash,
                    'password_set': True,
                    'updated_at': datetime.now(timezone.utc),
                }},
            )
        except PyMongoError as e:
            logger.error("Failed to set password", extra={"userId": user_id, "error": str(e)})
            raise
        return result.modified_count > 0

    def replace_password_hash(self, user_id: str, password_hash: str) -> bool:
        try:
            result = self.collection.update_one(
                {'_id': to_key(user_id), 'password_set': True},
                {'$set': {'password_hash': password_hash, 'updated_at': datetime.now(timezone.utc)}},
            )
        except PyMongoError as e:
            logger.error("Failed to change password", extra={"userId": user_id, "error": str(e)})
            raise
        return result.matched_count > 0

    def toggle_favorite(self, user_id: str, recipe_id: str) -> list[str] | None:
        """Flip membership with one pipeline update so concurrent toggles never lose writes."""
        current = {'$ifNull': ['$favorites', []]}
        pipeline = [{'$set': {
            'favorites': {'$cond': [
                {'$in': [recipe_id, current]},
                {'$filter': {'input': current, 'cond': {'$ne': ['$$this', recipe_id]}}},
                {'$concatArrays': [current, [recipe_id]]},
            ]},
            'updated_at': datetime.now(timezone.utc),
        }}]
        try:
            doc = self.collection.find_one_and_update(
                {'_id': to_key(user_id)}, pipeline, return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Failed to toggle favorite", extra={
                "userId": user_id, "recipeId": recipe_id, "error": str(e),
            })
            raise
        if doc is None:
            return None
        return [str(f) for f in doc.get('favorites', [])]

    def update_last_login(self, user_id: str) -> bool:
        """Update the last login timestamp for a user. Return True if successful."""
        try:
            now = datetime.now(timezone.utc)
            result = self.collection.update_one(
                {'_id': to_key(user_id)},
                {'$set': {'last_login': now, 'updated_at': now}}
            )
            if result.modified_count > 0:
                logger.debug("Updated last_login", extra={"userId": user_id})
                return True
            return False
        except PyMongoError as e:
            logger.error("Failed to update last_login", extra={"userId": user_id, "error": str(e)})
            return False

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        return self._find_one({'email': email}, 'email')

    def get_by_google_id(self, google_id: str) -> User | None:
        return self._find_one({'google_id': google_id}, 'google_id')

    def get_by_id(self, user_id: str) -> User | None:
        return self._find_one({'_id': to_key(user_id)}, 'id')
