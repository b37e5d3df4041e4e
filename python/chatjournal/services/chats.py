"""Chat and Message service layer.

All operations:
- Filter by owner in the query itself (user_id = viewer_id)
- Use E_CHAT_NOT_FOUND for both "missing" and "not yours" (existence is not revealed)
- Validate input before touching storage

Service functions correspond 1:1 with route handlers.
Routes are transport-only and call exactly one service function.
"""

import re
from uuid import UUID

from sqlalchemy import and_, delete, func, select
from sqlalchemy.orm import Session

from chatjournal.db.models import Chat, Message, MessageRole, utc_now
from chatjournal.db.session import transaction
from chatjournal.errors import ApiErrorCode, InvalidRequestError, NotFoundError
from chatjournal.logging import get_logger
from chatjournal.schemas.chat import (
    MESSAGE_ROLES,
    ChatDetailOut,
    ChatOut,
    ChatOwnerOut,
    ChatStatsOut,
    ChatSummaryOut,
    ChatWithOwnerOut,
    MessageOut,
    Pagination,
)

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Pagination limits
DEFAULT_LIMIT = 50
MIN_LIMIT = 1
MAX_LIMIT = 100

# Leading integer of a query value, e.g. "20" or "20abc"
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

CHAT_NOT_FOUND_MESSAGE = "Chat not found or unauthorized"


# =============================================================================
# Helper Functions
# =============================================================================


def parse_int_param(value: int | str | None, default: int) -> int:
    """Read a query value leniently: the leading integer, or default.

    Missing, unparseable and zero values all fall back to the default,
    so `limit=abc` and `limit=0` both mean "use the default page size".
    """
    if isinstance(value, int):
        return value or default
    match = _LEADING_INT.match(value or "")
    if match is None:
        return default
    return int(match.group(1)) or default


def clamp_limit(limit: int) -> int:
    """Clamp limit to valid range [MIN_LIMIT, MAX_LIMIT]; non-positive means default."""
    if limit < MIN_LIMIT:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def default_chat_title() -> str:
    """Timestamped placeholder title for chats created without one."""
    return f"New Chat - {utc_now():%Y-%m-%d %H:%M} UTC"


def get_chat_for_viewer_or_404(
    db: Session, viewer_id: UUID, chat_id: UUID, for_update: bool = False
) -> Chat:
    """Load a chat owned by the viewer.

    Args:
        for_update: Lock the chat row (used when assigning message seq).

    Raises:
        NotFoundError(E_CHAT_NOT_FOUND): If the chat doesn't exist
            OR the viewer is not the owner.
    """
    query = select(Chat).where(Chat.id == chat_id, Chat.user_id == viewer_id)
    if for_update:
        query = query.with_for_update()
    chat = db.scalar(query)
    if chat is None:
        raise NotFoundError(ApiErrorCode.E_CHAT_NOT_FOUND, CHAT_NOT_FOUND_MESSAGE)
    return chat


def chat_to_out(chat: Chat) -> ChatOut:
    """Convert Chat ORM model to ChatOut schema."""
    return ChatOut(
        id=chat.id,
        title=chat.title,
        user_id=chat.user_id,
        created_at=chat.created_at,
        updated_at=chat.updated_at,
    )


def message_to_out(message: Message) -> MessageOut:
    """Convert Message ORM model to MessageOut schema."""
    return MessageOut(
        id=message.id,
        chat_id=message.chat_id,
        seq=message.seq,
        role=message.role,
        content=message.content,
        created_at=message.created_at,
    )


def _list_messages(db: Session, chat_id: UUID) -> list[Message]:
    return list(
        db.scalars(select(Message).where(Message.chat_id == chat_id).order_by(Message.seq))
    )


def _validate_message(role: str | None, content: str | None) -> str:
    """Validate role and content of a new message; return trimmed content."""
    content = (content or "").strip()
    if not role or not content:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, "Role and content are required")
    if role not in MESSAGE_ROLES:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_ROLE, 'Role must be either "user" or "model"'
        )
    return content


# =============================================================================
# Service Functions
# =============================================================================


def create_chat(
    db: Session,
    viewer_id: UUID,
    initial_message: str | None,
    title: str | None = None,
) -> ChatDetailOut:
    """Create a chat together with its first user message.

    Both rows are written in a single transaction, so a chat is never
    persisted without at least one message.

    Args:
        db: Database session.
        viewer_id: The ID of the user creating the chat.
        initial_message: Content of the seed message (required, non-blank).
        title: Optional title; blank or missing gets a timestamped default.

    Returns:
        The created chat with its single message.

    Raises:
        InvalidRequestError(E_INVALID_REQUEST): If initial_message is blank.
    """
    content = (initial_message or "").strip()
    if not content:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, "Initial message is required")

    title = (title or "").strip() or default_chat_title()
    now = utc_now()

    chat = Chat(user_id=viewer_id, title=title, next_seq=2, created_at=now, updated_at=now)
    message = Message(seq=1, role=MessageRole.user.value, content=content, created_at=now)
    chat.messages.append(message)

    with transaction(db):
        db.add(chat)
        db.flush()

    logger.info("chat_created", chat_id=str(chat.id))

    return ChatDetailOut(**chat_to_out(chat).model_dump(), messages=[message_to_out(message)])


def add_message(
    db: Session,
    viewer_id: UUID,
    chat_id: UUID,
    role: str | None,
    content: str | None,
) -> MessageOut:
    """Append a message to a chat owned by the viewer.

    The chat row is locked while the next seq is assigned, so concurrent
    appends to the same chat get distinct, increasing seq values.

    Raises:
        InvalidRequestError: Missing content, or role not in {user, model}.
        NotFoundError(E_CHAT_NOT_FOUND): Chat doesn't exist or viewer is not the owner.
    """
    content = _validate_message(role, content)

    with transaction(db):
        chat = get_chat_for_viewer_or_404(db, viewer_id, chat_id, for_update=True)
        now = utc_now()
        message = Message(
            chat_id=chat.id,
            seq=chat.next_seq,
            role=role,
            content=content,
            created_at=now,
        )
        chat.next_seq += 1
        chat.updated_at = now
        db.add(message)
        db.flush()

    logger.info("message_added", chat_id=str(chat_id), seq=message.seq, role=role)

    return message_to_out(message)


def list_chats(
    db: Session,
    viewer_id: UUID,
    limit: int | str | None = DEFAULT_LIMIT,
    offset: int | str | None = 0,
) -> tuple[list[ChatSummaryOut], Pagination]:
    """List chats owned by the viewer, most recently updated first.

    Each entry carries only its first message (for preview) and the total
    message count.

    Args:
        db: Database session.
        viewer_id: The ID of the viewer.
        limit: Maximum number of results. Raw query strings are accepted;
            unparseable or non-positive values mean the default (50), and
            anything above 100 is capped.
        offset: Number of chats to skip. Unparseable or negative means 0.

    Returns:
        Tuple of (chats, pagination).
    """
    limit = clamp_limit(parse_int_param(limit, DEFAULT_LIMIT))
    offset = max(parse_int_param(offset, 0), 0)

    chats = list(
        db.scalars(
            select(Chat)
            .where(Chat.user_id == viewer_id)
            .order_by(Chat.updated_at.desc(), Chat.id.desc())
            .limit(limit)
            .offset(offset)
        )
    )
    chat_ids = [c.id for c in chats]

    counts: dict[UUID, int] = {}
    first_messages: dict[UUID, Message] = {}
    if chat_ids:
        counts = {
            row[0]: row[1]
            for row in db.execute(
                select(Message.chat_id, func.count())
                .where(Message.chat_id.in_(chat_ids))
                .group_by(Message.chat_id)
            )
        }

        first_seq = (
            select(Message.chat_id, func.min(Message.seq).label("seq"))
            .where(Message.chat_id.in_(chat_ids))
            .group_by(Message.chat_id)
            .subquery()
        )
        first_messages = {
            m.chat_id: m
            for m in db.scalars(
                select(Message).join(
                    first_seq,
                    and_(Message.chat_id == first_seq.c.chat_id, Message.seq == first_seq.c.seq),
                )
            )
        }

    summaries = [
        ChatSummaryOut(
            **chat_to_out(chat).model_dump(),
            messages=[message_to_out(first_messages[chat.id])] if chat.id in first_messages else [],
            message_count=counts.get(chat.id, 0),
        )
        for chat in chats
    ]

    return summaries, Pagination(limit=limit, offset=offset, count=len(summaries))


def get_chat(db: Session, viewer_id: UUID, chat_id: UUID) -> ChatWithOwnerOut:
    """Get a chat with all of its messages, oldest first, and its owner.

    Raises:
        NotFoundError(E_CHAT_NOT_FOUND): Chat doesn't exist or viewer is not the owner.
    """
    chat = get_chat_for_viewer_or_404(db, viewer_id, chat_id)
    messages = _list_messages(db, chat.id)
    owner = chat.owner
    return ChatWithOwnerOut(
        **chat_to_out(chat).model_dump(),
        messages=[message_to_out(m) for m in messages],
        user=ChatOwnerOut(id=owner.id, email=owner.email, name=owner.name),
    )


def update_chat_title(db: Session, viewer_id: UUID, chat_id: UUID, title: str | None) -> ChatOut:
    """Rename a chat.

    Applying the same title twice leaves the same title.

    Raises:
        InvalidRequestError(E_INVALID_REQUEST): If title is blank.
        NotFoundError(E_CHAT_NOT_FOUND): Chat doesn't exist or viewer is not the owner.
    """
    title = (title or "").strip()
    if not title:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, "Title is required")

    with transaction(db):
        chat = get_chat_for_viewer_or_404(db, viewer_id, chat_id)
        chat.title = title
        chat.updated_at = utc_now()
        db.flush()

    return chat_to_out(chat)


def delete_chat(db: Session, viewer_id: UUID, chat_id: UUID) -> None:
    """Delete a chat.

    Cascades to messages via FK ON DELETE CASCADE.

    Raises:
        NotFoundError(E_CHAT_NOT_FOUND): Chat doesn't exist or viewer is not the owner.
    """
    get_chat_for_viewer_or_404(db, viewer_id, chat_id)

    with transaction(db):
        db.execute(delete(Chat).where(Chat.id == chat_id, Chat.user_id == viewer_id))

    logger.info("chat_deleted", chat_id=str(chat_id))


def get_chat_stats(db: Session, viewer_id: UUID) -> ChatStatsOut:
    """Count the viewer's chats and the messages across them.

    Two independent owner-filtered counts.
    """
    total_chats = db.scalar(
        select(func.count()).select_from(Chat).where(Chat.user_id == viewer_id)
    )
    total_messages = db.scalar(
        select(func.count())
        .select_from(Message)
        .join(Chat, Chat.id == Message.chat_id)
        .where(Chat.user_id == viewer_id)
    )
    return ChatStatsOut(total_chats=total_chats or 0, total_messages=total_messages or 0)
