"""Create a user for Inkwell, optionally a super admin.

Usage:
    python -m inkwell.scripts.create_user --username admin --email admin@example.com \
        --password <password> [--super-admin]
"""

from __future__ import annotations

import argparse
import sys

from inkwell.db.session import SessionLocal
from inkwell.services.auth import create_user
from inkwell.services.errors import UserExistsError


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create an Inkwell user")
    parser.add_argument("--username", required=True, help="Username for the new user")
    parser.add_argument("--email", required=True, help="Email address for the new user")
    parser.add_argument("--password", required=True, help="Password for the new user")
    parser.add_argument("--first-name", default="", help="Optional first name")
    parser.add_argument("--last-name", default="", help="Optional last name")
    parser.add_argument(
        "--super-admin",
        action="store_true",
        help="Grant platform-wide administrator rights",
    )
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        try:
            user = create_user(
                db,
                args.username,
                args.email,
                args.password,
                first_name=args.first_name,
                last_name=args.last_name,
                is_super_admin=args.super_admin,
            )
        except UserExistsError as e:
            print(f"User '{args.username}' not created: {e.message}.")
            sys.exit(1)
        role = "super admin" if user.is_super_admin else "user"
        print(f"{role.capitalize()} '{user.username}' created successfully (id={user.id}).")
    finally:
        db.close()


if __name__ == "__main__":
    main()
