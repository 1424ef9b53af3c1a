"""One-off data migrations for the users collection.

Users written by the earlier Node backend use camelCase fields, keep the
bcrypt hash under ``password`` and predate password_set/auth_provider and
email normalization. These functions bring such records in line with the
current invariants.
"""

from dataclasses import dataclass, field
from logging import getLogger

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from adapter.mongodb import USERS_COLLECTION_NAME
from domain.model.email import normalize_email

logger = getLogger(__name__)

# Earlier backend field name -> current field name
LEGACY_FIELDS = {
    'password': 'password_hash',
    'authProvider': 'auth_provider',
    'googleId': 'google_id',
    'isVerified': 'is_verified',
    'bannerImage': 'banner_image',
    'lastLogin': 'last_login',
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
}
# Dropped outright: password_set is re-derived from the hash, codes are reissued
LEGACY_DROPPED_FIELDS = ['passwordSet', 'otp', 'otpCode', 'otpExpires', 'otpExpiresAt']


@dataclass
class MigrationReport:
    legacy_records_converted: int = 0
    legacy_conflicts: list[str] = field(default_factory=list)
    password_set_backfilled: int = 0
    auth_provider_backfilled: int = 0
    verified_backfilled: int = 0
    emails_normalized: int = 0
    email_collisions: list[str] = field(default_factory=list)


def _legacy_filter() -> dict:
    return {'$or': [{name: {'$exists': True}} for name in [*LEGACY_FIELDS, *LEGACY_DROPPED_FIELDS]]}


def legacy_update(doc: dict) -> dict:
    """Update document that brings one legacy user record to the current shape.

    A value already stored under the current name wins over the legacy one.
    password_set is derived from hash presence, never copied from passwordSet.
    Favorites stored as ObjectIds become strings.
    """
    changes = {}
    for old, new in LEGACY_FIELDS.items():
        if doc.get(old) is not None and doc.get(new) is None:
            changes[new] = doc[old]
    if doc.get('password_set') is None:
        changes['password_set'] = (changes.get('password_hash') or doc.get('password_hash')) is not None
    if doc.get('favorites'):
        changes['favorites'] = [str(f) for f in doc['favorites']]

    update = {}
    if changes:
        update['$set'] = changes
    stale = [name for name in [*LEGACY_FIELDS, *LEGACY_DROPPED_FIELDS] if name in doc]
    if stale:
        update['$unset'] = {name: '' for name in stale}
    return update


def convert_legacy_fields(db: Database, report: MigrationReport | None = None,
                          dry_run: bool = False) -> MigrationReport:
    """Rewrite every legacy-shaped user record with legacy_update().

    Records whose converted google_id or email collides with another user are
    left untouched and listed in legacy_conflicts.
    """
    users = db[USERS_COLLECTION_NAME]
    report = report or MigrationReport()

    for doc in users.find(_legacy_filter()):
        update = legacy_update(doc)
        if not update:
            continue
        if dry_run:
            report.legacy_records_converted += 1
            continue
        try:
            users.update_one({'_id': doc['_id']}, update)
            report.legacy_records_converted += 1
        except DuplicateKeyError:
            logger.warning("Legacy record conversion collision", extra={"userId": str(doc['_id'])})
            report.legacy_conflicts.append(str(doc['_id']))

    logger.info("Converted legacy user records", extra={
        "count": report.legacy_records_converted, "conflicts": len(report.legacy_conflicts),
    })
    return report


def backfill_credentials(db: Database, dry_run: bool = False) -> MigrationReport:
    """Convert legacy records, then fill password_set, auth_provider and is_verified.

    password_set follows password_hash presence. auth_provider is "local"
    for records with a password and "google" otherwise. Records without
    is_verified predate email codes and count as verified; pending signups
    written here always carry is_verified=False.
    """
    users = db[USERS_COLLECTION_NAME]
    report = convert_legacy_fields(db, dry_run=dry_run)

    missing_flag = {'password_set': {'$exists': False}}
    missing_provider = {'auth_provider': {'$exists': False}}
    missing_verified = {'is_verified': {'$exists': False}}
    if dry_run:
        report.password_set_backfilled = users.count_documents(missing_flag)
        report.auth_provider_backfilled = users.count_documents(missing_provider)
        report.verified_backfilled = users.count_documents(missing_verified)
        return report

    has_hash = {'$gt': [{'$ifNull': ['$password_hash', None]}, None]}
    report.password_set_backfilled = users.update_many(
        missing_flag, [{'$set': {'password_set': has_hash}}],
    ).modified_count
    report.auth_provider_backfilled = users.update_many(
        missing_provider,
        [{'$set': {'auth_provider': {'$cond': [has_hash, 'local', 'google']}}}],
    ).modified_count
    report.verified_backfilled = users.update_many(
        missing_verified, {'$set': {'is_verified': True}},
    ).modified_count

    logger.info("Backfilled credential flags", extra={
        "password_set": report.password_set_backfilled,
        "auth_provider": report.auth_provider_backfilled,
        "is_verified": report.verified_backfilled,
    })
    return report


def normalize_emails(db: Database, report: MigrationReport | None = None,
                     dry_run: bool = False) -> MigrationReport:
    """Rewrite stored emails to their normalized form.

    A record whose normalized email already belongs to another user is left
    untouched and listed in email_collisions for manual merging.
    """
    users = db[USERS_COLLECTION_NAME]
    report = report or MigrationReport()

    for doc in users.find({}, {'email': 1}):
        normalized = normalize_email(doc['email'])
        if normalized == doc['email']:
            continue
        if dry_run:
            report.emails_normalized += 1
            continue
        try:
            users.update_one({'_id': doc['_id']}, {'$set': {'email': normalized}})
            report.emails_normalized += 1
        except DuplicateKeyError:
            logger.warning("Email normalization collision", extra={"userId": str(doc['_id'])})
            report.email_collisions.append(str(doc['_id']))

    return report
