from __future__ import annotations

import pytest
from sqlalchemy import select

from boilerplate.core.exceptions import BadRequestError, ConflictError, InvalidRefreshTokenError, NotFoundError
from boilerplate.core.security import verify_password
from boilerplate.models.password_reset_token import PasswordResetToken
from boilerplate.models.verification_token import VerificationToken
from boilerplate.services import email as email_service
from boilerplate.services.password_reset import request_password_reset, reset_password
from boilerplate.services.refresh_tokens import rotate_refresh_token, stage_refresh_token
from boilerplate.services.verification import create_verification_token, resend_verification, verify_email


@pytest.fixture()
def outbox(monkeypatch) -> list:  # noqa: ANN001
    sent: list = []
    for module_name in ("boilerplate.services.verification", "boilerplate.services.password_reset"):
        monkeypatch.setattr(f"{module_name}.send_email", sent.append)
    return sent


def test_reset_password_changes_hash_and_ends_sessions(db, make_user, outbox) -> None:  # noqa: ANN001
    user = make_user("reset@test.com")
    session_token = stage_refresh_token(db, user.id)
    db.commit()

    request_password_reset(db, "Reset@test.com")
    token = db.scalars(select(PasswordResetToken.token).where(PasswordResetToken.user_id == user.id)).one()
    assert outbox and token in outbox[0].body

    updated = reset_password(db, token, "N3w!Passw0rd-long")

    assert verify_password("N3w!Passw0rd-long", updated.password_hash)
    with pytest.raises(InvalidRefreshTokenError):
        rotate_refresh_token(db, session_token)
    with pytest.raises(BadRequestError):
        reset_password(db, token, "An0ther!Passw0rd")


def test_reset_request_for_unknown_email_is_silent(db, outbox) -> None:  # noqa: ANN001
    request_password_reset(db, "nobody@test.com")

    assert outbox == []
    assert db.scalars(select(PasswordResetToken)).all() == []


def test_verification_flow_marks_user_verified(db, make_user, outbox) -> None:  # noqa: ANN001
    user = make_user("verify@test.com")
    first = create_verification_token(db, user)
    second = resend_verification(db, "verify@test.com")

    with pytest.raises(BadRequestError):
        verify_email(db, first)

    verified = verify_email(db, second)
    assert verified.email_verified is True
    assert db.scalars(select(VerificationToken)).all() == []

    with pytest.raises(ConflictError):
        resend_verification(db, "verify@test.com")
    with pytest.raises(NotFoundError):
        resend_verification(db, "ghost@test.com")


def test_verification_email_contains_link() -> None:
    message = email_service.build_verification_email("someone@test.com", "abc123")

    assert message.to == "someone@test.com"
    assert "verify-email?token=abc123" in message.body
