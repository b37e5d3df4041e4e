#!/usr/bin/env python
"""Database administration commands.

Commands:
    check               Verify connectivity and print row counts per table
    clear               Delete all users, chats and messages (local/test only)
    delete-user EMAIL   Delete one user; their chats and messages cascade

Usage:
    DATABASE_URL=... python scripts/db_admin.py check
"""

import argparse
import os
import sys

from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import SQLAlchemyError

from chatjournal.db import Chat, Message, User, create_session_factory
from chatjournal.services import users as users_service


def check(db) -> int:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        print(f"ERROR: database unreachable: {e}")
        return 1

    print("Database connection OK")
    for model in (User, Chat, Message):
        count = db.scalar(select(func.count()).select_from(model))
        print(f"  {model.__tablename__}: {count}")
    return 0


def clear(db) -> int:
    app_env = os.getenv("APP_ENV", "local")
    if app_env not in ("local", "test"):
        print(f"ERROR: refusing to clear the database in APP_ENV={app_env}")
        return 1

    db.execute(delete(Message))
    db.execute(delete(Chat))
    db.execute(delete(User))
    db.commit()
    print("All users, chats and messages deleted")
    return 0


def delete_user(db, email: str) -> int:
    user = users_service.find_by_email(db, email)
    if user is None:
        print(f"ERROR: no user with email {email}")
        return 1

    users_service.delete_user(db, user.id)
    print(f"Deleted {email} and all of their chats")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Database administration commands.")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("check", help="verify connectivity and print table counts")
    subparsers.add_parser("clear", help="delete all data (local/test only)")
    delete_parser = subparsers.add_parser("delete-user", help="delete a user by email")
    delete_parser.add_argument("email")
    args = parser.parse_args()

    if not os.getenv("DATABASE_URL"):
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    db = create_session_factory()()
    try:
        if args.command == "check":
            code = check(db)
        elif args.command == "clear":
            code = clear(db)
        else:
            code = delete_user(db, args.email)
    finally:
        db.close()

    sys.exit(code)


if __name__ == "__main__":
    main()
