"""Tests for schema constraints and cascades."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chatjournal.db.models import Chat, Message, User
from chatjournal.db.session import transaction
from chatjournal.errors import ApiErrorCode, ConflictError
from chatjournal.services import chats as chats_service
from chatjournal.services import users as users_service
from tests.helpers import unique_email


@pytest.fixture
def user(db_session: Session) -> User:
    return users_service.create_user(db_session, unique_email(), "not-a-real-hash")


def _count(db: Session, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


class TestConstraints:
    def test_duplicate_seq_rejected(self, db_session: Session, user: User):
        chat = chats_service.create_chat(db_session, user.id, "first")

        with pytest.raises(IntegrityError):
            with transaction(db_session):
                db_session.add(Message(chat_id=chat.id, seq=1, role="model", content="dup"))

    def test_unknown_role_rejected(self, db_session: Session, user: User):
        chat = chats_service.create_chat(db_session, user.id, "first")

        with pytest.raises(IntegrityError):
            with transaction(db_session):
                db_session.add(Message(chat_id=chat.id, seq=2, role="system", content="x"))

    def test_empty_title_rejected(self, db_session: Session, user: User):
        with pytest.raises(IntegrityError):
            with transaction(db_session):
                db_session.add(Chat(user_id=user.id, title=""))

    def test_duplicate_email_rejected(self, db_session: Session, user: User):
        with pytest.raises(IntegrityError):
            with transaction(db_session):
                db_session.add(User(email=user.email, password_hash="x"))


class TestCreateUserRace:
    """The unique constraint catches a duplicate the lookup missed."""

    def test_constraint_violation_becomes_conflict(
        self, db_session: Session, user: User, monkeypatch: pytest.MonkeyPatch
    ):
        email = user.email
        monkeypatch.setattr(users_service, "find_by_email", lambda db, email: None)

        with pytest.raises(ConflictError) as exc_info:
            users_service.create_user(db_session, email, "another-hash")

        assert exc_info.value.code == ApiErrorCode.E_EMAIL_TAKEN
        assert exc_info.value.status_code == 409
        assert _count(db_session, User) == 1

    def test_session_usable_after_conflict(
        self, db_session: Session, user: User, monkeypatch: pytest.MonkeyPatch
    ):
        email = user.email
        monkeypatch.setattr(users_service, "find_by_email", lambda db, email: None)
        with pytest.raises(ConflictError):
            users_service.create_user(db_session, email, "another-hash")
        monkeypatch.undo()

        created = users_service.create_user(db_session, unique_email("after"), "hash")

        assert users_service.get_user(db_session, created.id) is not None
        assert _count(db_session, User) == 2


class TestCascades:
    def test_deleting_user_removes_chats_and_messages(self, db_session: Session, user: User):
        other = users_service.create_user(db_session, unique_email("other"), "x")
        chat = chats_service.create_chat(db_session, user.id, "first")
        chats_service.add_message(db_session, user.id, chat.id, "model", "second")
        chats_service.create_chat(db_session, other.id, "kept")

        assert users_service.delete_user(db_session, user.id) is True

        assert _count(db_session, User) == 1
        assert _count(db_session, Chat) == 1
        assert _count(db_session, Message) == 1

    def test_deleting_unknown_user(self, db_session: Session, user: User):
        other = users_service.create_user(db_session, unique_email("gone"), "x")
        users_service.delete_user(db_session, other.id)

        assert users_service.delete_user(db_session, other.id) is False
