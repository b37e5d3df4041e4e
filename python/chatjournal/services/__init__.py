"""Business logic services.

This module contains service-layer functions that implement business logic.
Services are called by route handlers and orchestrate database operations.
"""

from chatjournal.services.auth import get_current_user, login, register
from chatjournal.services.chats import (
    add_message,
    create_chat,
    delete_chat,
    get_chat,
    get_chat_stats,
    list_chats,
    update_chat_title,
)

__all__ = [
    "register",
    "login",
    "get_current_user",
    "create_chat",
    "add_message",
    "list_chats",
    "get_chat",
    "update_chat_title",
    "delete_chat",
    "get_chat_stats",
]
