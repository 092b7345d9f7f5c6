"""Create a to-do/admin user, or reset the password of an existing one.

Usage:
    DATABASE_URL=... python scripts/create_user.py <username> [--password PASSWORD]

If --password is omitted you are prompted for it without echo.
"""

from __future__ import annotations

import argparse
import getpass
import os
import sys


def main() -> None:
    parser = argparse.ArgumentParser(description="Create or reset a unified-api user.")
    parser.add_argument("username")
    parser.add_argument("--password", help="New password. Prompted when omitted.")
    args = parser.parse_args()

    if not os.environ.get("DATABASE_URL"):
        print("ERROR: DATABASE_URL not set")
        sys.exit(1)

    password = args.password or getpass.getpass("New password: ")
    if not password:
        print("ERROR: empty password is not allowed")
        sys.exit(1)

    # Import after env validation so missing DB doesn't blow up on import
    from unifiedapi.api.auth import hash_password
    from unifiedapi.config import load_settings
    from unifiedapi.infra.db import database_from_settings
    from unifiedapi.infra.repositories.users_repository import upsert_user

    db = database_from_settings(load_settings())
    try:
        with db.txn() as cur:
            user_id, created = upsert_user(cur, args.username.strip(), hash_password(password))
    finally:
        db.close()

    action = "Created" if created else "Password reset for"
    print(f"{action} user {args.username} (id={user_id})")


if __name__ == "__main__":
    main()
