"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from chatjournal.schemas.auth import AuthResult, LoginRequest, RegisterRequest, UserOut
from chatjournal.schemas.base import ApiModel
from chatjournal.schemas.chat import (
    AddMessageRequest,
    ChatDetailOut,
    ChatOut,
    ChatOwnerOut,
    ChatStatsOut,
    ChatSummaryOut,
    ChatWithOwnerOut,
    CreateChatRequest,
    MessageOut,
    Pagination,
    UpdateChatTitleRequest,
)

__all__ = [
    "ApiModel",
    # Auth schemas
    "UserOut",
    "AuthResult",
    "RegisterRequest",
    "LoginRequest",
    # Chat schemas
    "MessageOut",
    "ChatOut",
    "ChatDetailOut",
    "ChatOwnerOut",
    "ChatWithOwnerOut",
    "ChatSummaryOut",
    "Pagination",
    "ChatStatsOut",
    "CreateChatRequest",
    "AddMessageRequest",
    "UpdateChatTitleRequest",
]
