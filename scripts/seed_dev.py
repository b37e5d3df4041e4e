#!/usr/bin/env python
"""Seed development database with demo users and chats.

Constraints:
- Refuses to run in staging or prod (APP_ENV check)
- Existing demo users are left alone unless --clear is given
- Never runs automatically (manual invocation only)

Usage:
    DATABASE_URL=... python scripts/seed_dev.py [--clear]

All demo users share the password "password123".
"""

import argparse
import os
import sys

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {
        "email": "alice@example.com",
        "name": "Alice Johnson",
        "chats": [
            {
                "title": "Learning Python",
                "messages": [
                    ("user", "What is the difference between a list and a tuple?"),
                    ("model", "Lists are mutable; tuples are immutable and hashable."),
                    ("user", "When should I prefer a tuple?"),
                ],
            },
            {
                "title": "Trip planning",
                "messages": [("user", "Suggest a three day itinerary for Lisbon.")],
            },
        ],
    },
    {
        "email": "bob@example.com",
        "name": "Bob Smith",
        "chats": [
            {
                "title": None,
                "messages": [
                    ("user", "Give me a quick recipe for dinner."),
                    ("model", "Try a tomato and garlic pasta: it takes 20 minutes."),
                ],
            },
        ],
    },
    {
        "email": "charlie@example.com",
        "name": "Charlie Brown",
        "chats": [],
    },
]


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo users and chats.")
    parser.add_argument("--clear", action="store_true", help="delete all data before seeding")
    args = parser.parse_args()

    # 1. Environment check (hard fail in staging/prod)
    app_env = os.getenv("APP_ENV", "local")
    if app_env not in ("local", "test"):
        print(f"ERROR: seed_dev.py refuses to run in APP_ENV={app_env}")
        sys.exit(1)

    # 2. Check DATABASE_URL
    if not os.getenv("DATABASE_URL"):
        print("ERROR: DATABASE_URL environment variable must be set")
        sys.exit(1)

    from sqlalchemy import delete

    from chatjournal.config import get_settings
    from chatjournal.db import Chat, Message, User, create_session_factory
    from chatjournal.services import chats as chats_service
    from chatjournal.services import passwords
    from chatjournal.services import users as users_service

    settings = get_settings()
    db = create_session_factory()()

    try:
        if args.clear:
            db.execute(delete(Message))
            db.execute(delete(Chat))
            db.execute(delete(User))
            db.commit()
            print("Cleared existing data")

        for demo in DEMO_USERS:
            if users_service.find_by_email(db, demo["email"]) is not None:
                print(f"Skipped {demo['email']} (already exists)")
                continue

            user = users_service.create_user(
                db,
                demo["email"],
                passwords.hash_password(DEMO_PASSWORD, rounds=settings.bcrypt_rounds),
                name=demo["name"],
            )
            for chat in demo["chats"]:
                (_, first_content), *rest = chat["messages"]
                created = chats_service.create_chat(db, user.id, first_content, chat["title"])
                for role, content in rest:
                    chats_service.add_message(db, user.id, created.id, role, content)

            print(f"Created {demo['email']} with {len(demo['chats'])} chat(s)")
    finally:
        db.close()

    print(f"Done. Log in with any demo email and password {DEMO_PASSWORD!r}")


if __name__ == "__main__":
    main()
