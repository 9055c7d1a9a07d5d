from __future__ import annotations

import datetime as dt

from sqlalchemy import func, select, update

from boilerplate.models.csrf_token import CsrfToken
from boilerplate.services.csrf import generate_csrf_token, revoke_csrf_tokens, verify_csrf_token


def test_issuing_replaces_previous_token(db, make_user) -> None:  # noqa: ANN001
    user = make_user()
    first = generate_csrf_token(db, user.id)
    second = generate_csrf_token(db, user.id)

    assert first != second
    assert len(second) == 64
    assert db.scalar(select(func.count()).select_from(CsrfToken)) == 1
    assert not verify_csrf_token(db, first, user.id)
    assert verify_csrf_token(db, second, user.id)


def test_token_of_another_user_is_rejected(db, make_user) -> None:  # noqa: ANN001
    alice = make_user("alice@test.com")
    bob = make_user("bob@test.com")
    alice_token = generate_csrf_token(db, alice.id)

    assert not verify_csrf_token(db, alice_token, bob.id)
    assert verify_csrf_token(db, alice_token, alice.id)


def test_expired_token_is_rejected_and_removed(db, make_user) -> None:  # noqa: ANN001
    user = make_user()
    token = generate_csrf_token(db, user.id)
    db.execute(
        update(CsrfToken)
        .where(CsrfToken.token == token)
        .values(expires_at=dt.datetime.now(dt.timezone.utc) - dt.timedelta(seconds=5))
    )
    db.commit()

    assert not verify_csrf_token(db, token, user.id)
    assert db.scalar(select(func.count()).select_from(CsrfToken)) == 0


def test_revoke_removes_user_tokens(db, make_user) -> None:  # noqa: ANN001
    user = make_user()
    token = generate_csrf_token(db, user.id)

    revoke_csrf_tokens(db, user.id)

    assert not verify_csrf_token(db, token, user.id)
