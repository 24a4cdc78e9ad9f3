#!/usr/bin/env python3
"""Promote an existing account to ADMIN.

Accounts are created through POST /auth/register; this script only changes
the role of an account that already exists. Sessions issued before the
promotion keep the old role until they expire or are revoked, so the user
should log in again afterwards.

Usage:
    python scripts/bootstrap_admin.py --email admin@example.com
    ADMIN_EMAIL=admin@example.com python scripts/bootstrap_admin.py --dry-run
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add project root to path for imports
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


async def bootstrap_admin(email: str, dry_run: bool = False) -> dict:
    """Promote the account registered under ``email``.

    Returns:
        dict with user_id, email and status
        ('not_found', 'already_admin', 'dry_run' or 'promoted')
    """
    # Import here so settings are read after argument parsing
    from session_auth.core.database_connection import db_manager
    from session_auth.models.users_model import UserRole
    from session_auth.psql_db_services.users_service import UsersService

    await db_manager.initialize()
    try:
        users_service = UsersService(db_manager)
        user = await users_service.get_user_by_email(email)

        if user is None:
            print(f"No account registered for {email}; register it first")
            return {"user_id": None, "email": email, "status": "not_found"}

        if user.role == UserRole.ADMIN:
            print(f"User {email} is already an admin (id: {user.id})")
            return {"user_id": user.id, "email": email, "status": "already_admin"}

        if dry_run:
            print(f"[DRY RUN] Would promote {email} to admin (id: {user.id})")
            return {"user_id": user.id, "email": email, "status": "dry_run"}

        await users_service.update_user_role(user.id, UserRole.ADMIN)
        print(f"Promoted {email} to admin (id: {user.id})")
        return {"user_id": user.id, "email": email, "status": "promoted"}
    finally:
        await db_manager.close()


def main():
    parser = argparse.ArgumentParser(
        description="Promote an existing account to ADMIN",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--email",
        default=os.environ.get("ADMIN_EMAIL"),
        help="Account email (or set ADMIN_EMAIL env var)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without making changes",
    )

    args = parser.parse_args()

    if not args.email:
        print("Error: --email or ADMIN_EMAIL environment variable required")
        sys.exit(1)

    try:
        result = asyncio.run(bootstrap_admin(args.email.strip().lower(), args.dry_run))
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)

    sys.exit(1 if result["status"] == "not_found" else 0)


if __name__ == "__main__":
    main()
