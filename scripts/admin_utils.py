#!/usr/bin/env python
"""
Admin utilities for managing accounts and watermark texts from the shell.
"""

import sys
from pathlib import Path

# Add the project root to the path
sys.path.append(str(Path(__file__).parent.parent))

from watermark_app import store
from watermark_app.config import Settings
from watermark_app.deps import init_store
from watermark_app.errors import ValidationError
from watermark_app.models import User
from watermark_app.routes.auth import create_user


def open_session(settings=None):
    settings = settings or Settings.from_env()
    _, session_factory = init_store(settings)
    return session_factory()


def list_users(db):
    """List all users in the database"""
    users = db.query(User).order_by(User.created_at).all()
    if not users:
        print("No users found in the database.")
        return users

    print(f"Found {len(users)} users:")
    print("--------------------------------------------------")
    for user in users:
        print(f"ID: {user.id}")
        print(f"Name: {user.name}")
        print(f"Email: {user.email}")
        print(f"Created: {user.created_at}")
        print("--------------------------------------------------")
    return users


def add_user(db, name, email, password):
    """Create an account without going through the signup page"""
    try:
        user = create_user(db, name, email, password)
    except ValidationError as e:
        print(f"Error creating user: {e.message}")
        return None

    print(f"User {user.email} created with ID {user.id}")
    return user


def list_texts(db, email, settings=None):
    """List the watermark texts owned by the user with this email"""
    settings = settings or Settings.from_env()
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        print(f"User with email {email} not found.")
        return None

    rows = store.list_texts(db, user.id)
    print(f"{len(rows)} watermark texts for {user.email} (default: {user.name} {settings.default_text_suffix})")
    for row in rows:
        print(f"  {row.id}  {row.created_at:%Y-%m-%d %H:%M}  {row.text}")
    return rows


def main():
    """Main function for command-line usage"""
    import argparse

    parser = argparse.ArgumentParser(description="Admin utilities for accounts and watermark texts")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("list-users", help="List all users")

    create_parser = subparsers.add_parser("create-user", help="Create a user")
    create_parser.add_argument("name", help="Display name")
    create_parser.add_argument("email", help="Login email")
    create_parser.add_argument("password", help="Password (8 characters minimum)")

    texts_parser = subparsers.add_parser("texts", help="List a user's watermark texts")
    texts_parser.add_argument("email", help="Email of the owner")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return

    db = open_session()
    try:
        if args.command == "list-users":
            list_users(db)
        elif args.command == "create-user":
            add_user(db, args.name, args.email, args.password)
        elif args.command == "texts":
            list_texts(db, args.email)
    finally:
        db.close()


if __name__ == "__main__":
    main()
