"""Bring existing user records in line with the current account invariants.

Converts records written by the earlier Node backend (camelCase fields,
hash under "password"), backfills password_set / auth_provider / is_verified
and, optionally, normalizes stored emails.

Usage:
    PYTHONPATH=src python scripts/migrate_users.py --dry-run
    PYTHONPATH=src python scripts/migrate_users.py --normalize-emails
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()

from adapter.mongodb import DATABASE_NAME
from adapter.mongodb.connection import get_mongodb_client
from adapter.mongodb.migrations import backfill_credentials, normalize_emails
from utils.logging import setup_structured_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Migrate user records")
    parser.add_argument("--dry-run", action="store_true", help="Only count what would change")
    parser.add_argument("--normalize-emails", action="store_true", help="Also normalize stored emails")
    args = parser.parse_args()

    setup_structured_logging()
    client = get_mongodb_client()
    if client is None:
        print("MongoDB unavailable (is MONGO_URL set?)", file=sys.stderr)
        return 1

    db = client[DATABASE_NAME]
    report = backfill_credentials(db, dry_run=args.dry_run)
    if args.normalize_emails:
        normalize_emails(db, report, dry_run=args.dry_run)

    prefix = "[dry run] " if args.dry_run else ""
    print(f"{prefix}legacy records converted: {report.legacy_records_converted}")
    for user_id in report.legacy_conflicts:
        print(f"legacy record conflicts with another user, merge manually: {user_id}")
    print(f"{prefix}password_set backfilled: {report.password_set_backfilled}")
    print(f"{prefix}auth_provider backfilled: {report.auth_provider_backfilled}")
    print(f"{prefix}is_verified backfilled: {report.verified_backfilled}")
    if args.normalize_emails:
        print(f"{prefix}emails normalized: {report.emails_normalized}")
        for user_id in report.email_collisions:
            print(f"collision, merge manually: {user_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
