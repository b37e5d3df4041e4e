"""Chats and Messages API routes.

Route handlers for chat and message CRUD operations.
Routes are transport-only: each calls exactly one service function.

All routes require authentication. A chat owned by someone else is
reported exactly like a missing one (404 E_CHAT_NOT_FOUND).

Response envelope: {"success": true, "message"?: ..., "data": ...}
List envelope adds a top-level "pagination" object.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from chatjournal.api.deps import get_db
from chatjournal.auth.middleware import Viewer, get_viewer
from chatjournal.responses import success_response
from chatjournal.schemas.chat import AddMessageRequest, CreateChatRequest, UpdateChatTitleRequest
from chatjournal.services import chats as chats_service

router = APIRouter(tags=["chats"])


# =============================================================================
# Chat Endpoints
# =============================================================================


@router.post("/chats", status_code=201)
def create_chat(
    body: CreateChatRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Create a chat with its first user message.

    Returns 201 Created with the chat and its single message.

    Errors:
        E_INVALID_REQUEST (400): initialMessage missing or blank.
    """
    result = chats_service.create_chat(
        db=db,
        viewer_id=viewer.user_id,
        initial_message=body.initial_message,
        title=body.title,
    )
    return success_response(result.to_json(), message="Chat created successfully")


@router.get("/chats")
def list_chats(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    limit: str | None = Query(
        default=None, description="Maximum results, clamped to 1-100; invalid or 0 means 50"
    ),
    offset: str | None = Query(default=None, description="Number of chats to skip"),
) -> dict:
    """List chats owned by the viewer, most recently updated first.

    Each chat carries its first message only and a messageCount.
    """
    chats, pagination = chats_service.list_chats(
        db=db,
        viewer_id=viewer.user_id,
        limit=limit,
        offset=offset,
    )
    return success_response(
        [c.to_json() for c in chats],
        pagination=pagination.to_json(),
    )


# Registered before /chats/{chat_id} so "stats" is never parsed as an id.
@router.get("/chats/stats")
def get_chat_stats(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get chat and message totals for the viewer."""
    result = chats_service.get_chat_stats(db=db, viewer_id=viewer.user_id)
    return success_response(result.to_json())


@router.get("/chats/{chat_id}")
def get_chat(
    chat_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get a chat with all of its messages, oldest first.

    Errors:
        E_CHAT_NOT_FOUND (404): Chat doesn't exist or viewer is not owner.
    """
    result = chats_service.get_chat(db=db, viewer_id=viewer.user_id, chat_id=chat_id)
    return success_response(result.to_json())


@router.patch("/chats/{chat_id}")
def update_chat_title(
    chat_id: UUID,
    body: UpdateChatTitleRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Rename a chat.

    Errors:
        E_INVALID_REQUEST (400): Title missing or blank.
        E_CHAT_NOT_FOUND (404): Chat doesn't exist or viewer is not owner.
    """
    result = chats_service.update_chat_title(
        db=db,
        viewer_id=viewer.user_id,
        chat_id=chat_id,
        title=body.title,
    )
    return success_response(result.to_json(), message="Chat title updated successfully")


@router.delete("/chats/{chat_id}")
def delete_chat(
    chat_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Delete a chat and all of its messages.

    Errors:
        E_CHAT_NOT_FOUND (404): Chat doesn't exist or viewer is not owner.
    """
    chats_service.delete_chat(db=db, viewer_id=viewer.user_id, chat_id=chat_id)
    return success_response(message="Chat deleted successfully")


# =============================================================================
# Message Endpoints
# =============================================================================


@router.post("/chats/{chat_id}/messages", status_code=201)
def add_message(
    chat_id: UUID,
    body: AddMessageRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Append a message to a chat.

    Errors:
        E_INVALID_REQUEST (400): Content missing or blank.
        E_INVALID_ROLE (400): Role is not "user" or "model".
        E_CHAT_NOT_FOUND (404): Chat doesn't exist or viewer is not owner.
    """
    result = chats_service.add_message(
        db=db,
        viewer_id=viewer.user_id,
        chat_id=chat_id,
        role=body.role,
        content=body.content,
    )
    return success_response(result.to_json(), message="Message added successfully")
