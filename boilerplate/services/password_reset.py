"""Password reset requests and single-use reset tokens."""

from __future__ import annotations

import datetime as dt
import logging
import secrets

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from boilerplate.core.config import settings
from boilerplate.core.exceptions import BadRequestError
from boilerplate.core.security import hash_password
from boilerplate.db.upsert import upsert_user_token
from boilerplate.models.password_reset_token import PasswordResetToken
from boilerplate.models.user import User
from boilerplate.services.email import build_password_reset_email, send_email
from boilerplate.services.refresh_tokens import revoke_all_refresh_tokens

logger = logging.getLogger(__name__)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def request_password_reset(db: Session, email: str) -> None:
    """Email a reset link when the account exists; silent otherwise."""
    user = db.scalars(select(User).where(User.email == email.lower())).first()
    if user is None:
        logger.info("Password reset requested for unknown email")
        return

    now = _utcnow()
    token = secrets.token_hex(32)
    upsert_user_token(
        db,
        PasswordResetToken,
        user_id=user.id,
        token=token,
        expires_at=now + dt.timedelta(hours=settings.PASSWORD_RESET_TOKEN_EXPIRE_HOURS),
        created_at=now,
    )
    db.commit()
    send_email(build_password_reset_email(user.email, token))
    logger.info("Password reset token issued: %s", user.email)


def reset_password(db: Session, token: str, new_password: str) -> User:
    """Set a new password, consume the token and end every session of the user."""
    record = db.scalars(
        select(PasswordResetToken).where(
            PasswordResetToken.token == token,
            PasswordResetToken.expires_at > _utcnow(),
        )
    ).first()
    if record is None:
        logger.warning("Password reset failed: invalid or expired token")
        raise BadRequestError("Invalid or expired reset token")

    user = db.get(User, record.user_id)
    if user is None:
        raise BadRequestError("Invalid or expired reset token")

    user.password_hash = hash_password(new_password)
    db.add(user)
    db.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user.id))
    revoke_all_refresh_tokens(db, user.id, commit=False)
    db.commit()
    db.refresh(user)
    logger.info("Password reset success: %s", user.email)
    return user
