"""Initial schema - users, chats, messages

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Tables:
- users: accounts (unique email, bcrypt password hash)
- chats: user-owned threads with a per-chat message sequence counter
- messages: immutable chat messages ordered by seq

Invariants:
- a chat belongs to exactly one user; deleting the user deletes its chats
- deleting a chat deletes its messages
- message seq is unique and positive per chat
- message role is 'user' or 'model'
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # ==========================================================================
    # Step 1: users
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column(
            "id",
            sa.UUID(),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    # ==========================================================================
    # Step 2: chats
    # ==========================================================================
    op.create_table(
        "chats",
        sa.Column(
            "id",
            sa.UUID(),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column(
            "user_id",
            sa.UUID(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("next_seq", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )

    op.create_check_constraint("ck_chats_title_not_empty", "chats", "length(title) > 0")
    op.create_check_constraint("ck_chats_next_seq_positive", "chats", "next_seq >= 1")

    # Listing is always "my chats, most recently updated first"
    op.create_index(
        "ix_chats_user_id_updated_at",
        "chats",
        ["user_id", "updated_at"],
    )

    # ==========================================================================
    # Step 3: messages
    # ==========================================================================
    op.create_table(
        "messages",
        sa.Column(
            "id",
            sa.UUID(),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "chat_id",
            sa.UUID(),
            sa.ForeignKey("chats.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column("role", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.UniqueConstraint("chat_id", "seq", name="uix_messages_chat_seq"),
    )

    op.create_check_constraint("ck_messages_seq_positive", "messages", "seq >= 1")
    op.create_check_constraint("ck_messages_role", "messages", "role IN ('user', 'model')")


def downgrade() -> None:
    op.drop_table("messages")
    op.drop_index("ix_chats_user_id_updated_at", table_name="chats")
    op.drop_table("chats")
    op.drop_table("users")
