"""Database module for chatjournal.

Provides engine creation, session management, transaction helpers, and ORM models.
"""

from chatjournal.db.engine import create_db_engine, get_engine
from chatjournal.db.models import Base, Chat, Message, MessageRole, User, utc_now
from chatjournal.db.session import create_session_factory, get_db, transaction

__all__ = [
    # Engine and session
    "create_db_engine",
    "get_engine",
    "create_session_factory",
    "get_db",
    "transaction",
    # Base
    "Base",
    "utc_now",
    # Enums
    "MessageRole",
    # Models
    "User",
    "Chat",
    "Message",
]
