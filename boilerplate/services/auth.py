"""Service helpers for registration, login and session issuance."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from boilerplate.core.exceptions import ConflictError, InvalidCredentialsError
from boilerplate.core.security import DUMMY_PASSWORD_HASH, create_access_token, hash_password, verify_password
from boilerplate.models.enums import UserRole
from boilerplate.models.user import User
from boilerplate.services.csrf import revoke_csrf_tokens, stage_csrf_token
from boilerplate.services.email import build_verification_email, send_email
from boilerplate.services.refresh_tokens import revoke_refresh_token, rotate_refresh_token, stage_refresh_token
from boilerplate.services.verification import stage_verification_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    user: User
    access_token: str
    refresh_token: str
    csrf_token: str


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.scalars(select(User).where(User.email == email.lower())).first()


def get_user(db: Session, user_id: UUID) -> User | None:
    return db.get(User, user_id)


def _stage_session(db: Session, user: User, *, now: dt.datetime) -> tuple[str, str]:
    return stage_refresh_token(db, user.id, now=now), stage_csrf_token(db, user.id, now=now)


def _session_for(user: User, refresh_token: str, csrf_token: str) -> AuthSession:
    return AuthSession(
        user=user,
        access_token=create_access_token(user.id, user.role),
        refresh_token=refresh_token,
        csrf_token=csrf_token,
    )


def issue_session(db: Session, user: User) -> AuthSession:
    """Mint access, refresh and CSRF tokens for ``user`` in one commit."""
    refresh_token, csrf_token = _stage_session(db, user, now=_utcnow())
    db.commit()
    return _session_for(user, refresh_token, csrf_token)


def register_user(db: Session, *, email: str, password: str, name: str | None = None) -> AuthSession:
    """Create the account, its verification token and its first session atomically.

    The email check up front gives the common case a clean answer; the unique
    index settles concurrent registrations of the same address.
    """
    if find_user_by_email(db, email):
        raise ConflictError("Email already in use")

    now = _utcnow()
    user = User(
        id=uuid4(),
        email=email.lower(),
        name=name,
        password_hash=hash_password(password),
        role=UserRole.user,
        email_verified=False,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(user)
        db.flush()
        verification_token = stage_verification_token(db, user, now=now)
        refresh_token, csrf_token = _stage_session(db, user, now=now)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Registration conflict for %s", email.lower())
        raise ConflictError("Email already in use") from exc

    logger.info("User created: %s", user.email)
    send_email(build_verification_email(user.email, verification_token))
    return _session_for(user, refresh_token, csrf_token)


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Return the user owning ``email``/``password`` or raise.

    The hash comparison always runs, against a placeholder hash when the
    email is unknown, so latency does not reveal whether an account exists.
    """
    user = find_user_by_email(db, email)
    password_ok = verify_password(password, user.password_hash if user else DUMMY_PASSWORD_HASH)
    if user is None or not password_ok:
        logger.warning("Login failed for %s", email.lower())
        raise InvalidCredentialsError()
    logger.info("User authenticated: %s", user.email)
    return user


def login(db: Session, *, email: str, password: str) -> AuthSession:
    user = authenticate_user(db, email, password)
    return issue_session(db, user)


def refresh_session(db: Session, refresh_token: str) -> AuthSession:
    user, new_refresh_token = rotate_refresh_token(db, refresh_token)
    csrf_token = stage_csrf_token(db, user.id)
    db.commit()
    return _session_for(user, new_refresh_token, csrf_token)


def logout(db: Session, *, refresh_token: str | None, user_id: UUID | None) -> None:
    if refresh_token:
        revoke_refresh_token(db, refresh_token)
    if user_id is not None:
        revoke_csrf_tokens(db, user_id)
    logger.info("Logout processed (user=%s)", user_id)
