"""Email verification: single-use tokens bound to a user."""

from __future__ import annotations

import datetime as dt
import logging
import secrets

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from boilerplate.core.config import settings
from boilerplate.core.exceptions import BadRequestError, ConflictError, NotFoundError
from boilerplate.db.upsert import upsert_user_token
from boilerplate.models.user import User
from boilerplate.models.verification_token import VerificationToken
from boilerplate.services.email import build_verification_email, build_welcome_email, send_email

logger = logging.getLogger(__name__)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def stage_verification_token(db: Session, user: User, *, now: dt.datetime | None = None) -> str:
    """Replace the user's verification token inside the caller's transaction."""
    now = now or _utcnow()
    token = secrets.token_hex(32)
    upsert_user_token(
        db,
        VerificationToken,
        user_id=user.id,
        token=token,
        expires_at=now + dt.timedelta(hours=settings.EMAIL_TOKEN_EXPIRE_HOURS),
        created_at=now,
    )
    return token


def create_verification_token(db: Session, user: User) -> str:
    """Issue a fresh token (superseding any previous one) and email it."""
    token = stage_verification_token(db, user)
    db.commit()
    send_email(build_verification_email(user.email, token))
    logger.info("Verification token issued: %s", user.email)
    return token


def verify_email(db: Session, token: str) -> User:
    record = db.scalars(
        select(VerificationToken).where(
            VerificationToken.token == token,
            VerificationToken.expires_at > _utcnow(),
        )
    ).first()
    if record is None:
        logger.warning("Email verification failed: invalid or expired token")
        raise BadRequestError("Invalid or expired verification token")

    user = db.get(User, record.user_id)
    if user is None:
        raise BadRequestError("Invalid or expired verification token")

    user.email_verified = True
    db.add(user)
    db.execute(delete(VerificationToken).where(VerificationToken.user_id == user.id))
    db.commit()
    db.refresh(user)
    send_email(build_welcome_email(user.email, user.name))
    logger.info("Email verified: %s", user.email)
    return user


def resend_verification(db: Session, email: str) -> str:
    user = db.scalars(select(User).where(User.email == email.lower())).first()
    if user is None:
        raise NotFoundError("User not found")
    if user.email_verified:
        raise ConflictError("Email already verified")
    return create_verification_token(db, user)
