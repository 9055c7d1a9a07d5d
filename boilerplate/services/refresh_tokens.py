"""Refresh token store: persistence, single-use rotation and revocation."""

from __future__ import annotations

import datetime as dt
import logging
from uuid import UUID, uuid4

from sqlalchemy import update
from sqlalchemy.orm import Session

from boilerplate.core.config import settings
from boilerplate.core.exceptions import InvalidRefreshTokenError
from boilerplate.core.security import create_refresh_token, decode_refresh_token
from boilerplate.models.refresh_token import RefreshToken
from boilerplate.models.user import User

logger = logging.getLogger(__name__)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def stage_refresh_token(db: Session, user_id: UUID, *, now: dt.datetime | None = None) -> str:
    """Add a new refresh row to the session and return its signed JWT.

    The caller owns the transaction and must commit.
    """
    now = now or _utcnow()
    jti = str(uuid4())
    db.add(
        RefreshToken(
            token=jti,
            user_id=user_id,
            expires_at=now + dt.timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            revoked=False,
            created_at=now,
        )
    )
    return create_refresh_token(user_id, jti)


def rotate_refresh_token(db: Session, refresh_token: str) -> tuple[User, str]:
    """Redeem ``refresh_token`` once and return its owner plus a replacement.

    The old row is revoked with a conditional UPDATE that only matches an
    active row, so of several concurrent redemptions at most one sees a row
    count of 1. Unknown, revoked, expired and lost-race tokens all raise the
    same ``InvalidRefreshTokenError``.
    """
    claims = decode_refresh_token(refresh_token)
    now = _utcnow()

    result = db.execute(
        update(RefreshToken)
        .where(
            RefreshToken.token == claims.jti,
            RefreshToken.user_id == claims.user_id,
            RefreshToken.revoked.is_(False),
            RefreshToken.expires_at > now,
        )
        .values(revoked=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        logger.warning("Refresh rejected: token not active (user=%s)", claims.user_id)
        raise InvalidRefreshTokenError()

    user = db.get(User, claims.user_id)
    if user is None:
        db.rollback()
        logger.warning("Refresh rejected: user no longer exists (user=%s)", claims.user_id)
        raise InvalidRefreshTokenError()

    new_token = stage_refresh_token(db, user.id, now=now)
    db.commit()
    logger.info("Refresh token rotated: %s", user.email)
    return user, new_token


def revoke_refresh_token(db: Session, refresh_token: str) -> bool:
    try:
        claims = decode_refresh_token(refresh_token)
    except InvalidRefreshTokenError:
        return False

    result = db.execute(
        update(RefreshToken)
        .where(
            RefreshToken.token == claims.jti,
            RefreshToken.user_id == claims.user_id,
            RefreshToken.revoked.is_(False),
        )
        .values(revoked=True)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount > 0


def revoke_all_refresh_tokens(db: Session, user_id: UUID, *, commit: bool = True) -> int:
    result = db.execute(
        update(RefreshToken)
        .where(RefreshToken.user_id == user_id, RefreshToken.revoked.is_(False))
        .values(revoked=True)
        .execution_options(synchronize_session=False)
    )
    if commit:
        db.commit()
    logger.info("Revoked %s refresh token(s) for user %s", result.rowcount, user_id)
    return result.rowcount
