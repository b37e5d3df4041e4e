"""Chat and Message Pydantic schemas.

Contains request and response models for the /chats endpoints.
"""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field

from chatjournal.schemas.base import ApiModel

# Valid message roles - must match DB constraint
MESSAGE_ROLES = ("user", "model")


# =============================================================================
# Response Schemas
# =============================================================================


class MessageOut(ApiModel):
    """Response schema for a message.

    Messages are immutable and ordered by seq within a chat.
    """

    id: UUID
    chat_id: UUID
    seq: int
    role: str  # "user" | "model"
    content: str
    created_at: datetime


class ChatOut(ApiModel):
    """Response schema for a chat without its messages."""

    id: UUID
    title: str
    user_id: UUID
    created_at: datetime
    updated_at: datetime


class ChatOwnerOut(ApiModel):
    """The owner of a chat, as shown in the chat detail view."""

    id: UUID
    email: str
    name: str | None = None


class ChatDetailOut(ChatOut):
    """A chat with all of its messages, oldest first."""

    messages: list[MessageOut]


class ChatWithOwnerOut(ChatDetailOut):
    """Chat detail view: all messages plus the owner's public profile."""

    user: ChatOwnerOut


class ChatSummaryOut(ChatOut):
    """A chat list entry: only the first message (for preview) and a total count."""

    messages: list[MessageOut]
    message_count: int


class Pagination(ApiModel):
    """Offset pagination information for list responses."""

    limit: int
    offset: int
    count: int


class ChatStatsOut(ApiModel):
    """Aggregate counts across all chats owned by the viewer."""

    total_chats: int
    total_messages: int


# =============================================================================
# Request Schemas
# =============================================================================


class _ChatRequest(ApiModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class CreateChatRequest(_ChatRequest):
    """Request schema for POST /chats.

    A blank or missing title gets a timestamped default.
    """

    title: str | None = None
    initial_message: str


class AddMessageRequest(_ChatRequest):
    """Request schema for POST /chats/{chat_id}/messages.

    role is validated by the chat service so the error message is specific.
    """

    role: str
    content: str


class UpdateChatTitleRequest(_ChatRequest):
    """Request schema for PATCH /chats/{chat_id}."""

    title: str = Field(description="New non-empty title")
