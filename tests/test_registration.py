from __future__ import annotations

import pytest
from sqlalchemy import func, select

from boilerplate.core.exceptions import ConflictError
from boilerplate.models.csrf_token import CsrfToken
from boilerplate.models.refresh_token import RefreshToken
from boilerplate.models.user import User
from boilerplate.models.verification_token import VerificationToken
from boilerplate.services import auth as auth_service

PASSWORD = "Str0ng!Passw0rd"


def _count(db, model) -> int:  # noqa: ANN001
    return db.scalar(select(func.count()).select_from(model)) or 0


def test_registration_writes_user_tokens_and_session_together(db, monkeypatch) -> None:  # noqa: ANN001
    sent: list = []
    monkeypatch.setattr(auth_service, "send_email", sent.append)

    session = auth_service.register_user(db, email="New@test.com", password=PASSWORD, name="New")

    assert session.user.email == "new@test.com"
    assert _count(db, User) == 1
    assert _count(db, VerificationToken) == 1
    assert _count(db, RefreshToken) == 1
    assert _count(db, CsrfToken) == 1
    assert len(sent) == 1 and "verify-email?token=" in sent[0].body


def test_failed_session_staging_leaves_no_user_behind(db, monkeypatch) -> None:  # noqa: ANN001
    sent: list = []
    monkeypatch.setattr(auth_service, "send_email", sent.append)

    def failing_csrf(_db, _user_id, *, now=None):  # noqa: ANN001
        raise RuntimeError("csrf store down")

    monkeypatch.setattr(auth_service, "stage_csrf_token", failing_csrf)

    with pytest.raises(RuntimeError):
        auth_service.register_user(db, email="half@test.com", password=PASSWORD)
    db.rollback()

    assert _count(db, User) == 0
    assert _count(db, VerificationToken) == 0
    assert sent == []


def test_duplicate_email_is_a_conflict(db, monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(auth_service, "send_email", lambda _message: None)
    auth_service.register_user(db, email="dup@test.com", password=PASSWORD)

    with pytest.raises(ConflictError):
        auth_service.register_user(db, email="DUP@test.com", password=PASSWORD)
