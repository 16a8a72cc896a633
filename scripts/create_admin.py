#!/usr/bin/env python3
"""Create an admin account, or reset the password of an existing one."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from werkzeug.security import generate_password_hash

# Ensure the project root is on sys.path so ``beauty_portfolio`` can be imported when the script is executed directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from beauty_portfolio import create_app
from beauty_portfolio.extensions import db
from beauty_portfolio.models import AdminUser

MIN_PASSWORD_LENGTH = 6


def set_admin(username: str, email: str, password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Error: password must be at least {MIN_PASSWORD_LENGTH} characters")
        return

    app = create_app()

    with app.app_context():
        db.create_all()

        admin = AdminUser.query.filter_by(username=username).first()
        if admin is None:
            admin = AdminUser(username=username, email=email)
            db.session.add(admin)
            print(f"Created admin user: {username} <{email}>")
        elif admin.email != email:
            print(f"Updating admin email from '{admin.email}' to '{email}'")
            admin.email = email

        admin.password_hash = generate_password_hash(password)
        db.session.commit()

        print(f"Password for admin '{username}' has been set successfully.")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or update a back office admin account.")
    parser.add_argument("--username", default="admin", help="Admin username (default: admin)")
    parser.add_argument(
        "--email",
        default="admin@beautyportfolio.com",
        help="Admin email address (default: admin@beautyportfolio.com)"
    )
    parser.add_argument("--password", default="admin123", help="Plain-text password to hash and store")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    set_admin(args.username, args.email, args.password)


if __name__ == "__main__":
    main()
