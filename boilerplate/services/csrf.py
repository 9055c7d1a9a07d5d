"""CSRF token issuance and verification for the double-submit cookie check."""

from __future__ import annotations

import datetime as dt
import logging
import secrets
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from boilerplate.core.config import settings
from boilerplate.db.upsert import upsert_user_token
from boilerplate.models.csrf_token import CsrfToken

logger = logging.getLogger(__name__)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def stage_csrf_token(db: Session, user_id: UUID, *, now: dt.datetime | None = None) -> str:
    """Replace the user's CSRF token inside the caller's transaction."""
    now = now or _utcnow()
    token = secrets.token_hex(32)
    upsert_user_token(
        db,
        CsrfToken,
        user_id=user_id,
        token=token,
        expires_at=now + dt.timedelta(minutes=settings.CSRF_TOKEN_EXPIRE_MINUTES),
        created_at=now,
    )
    return token


def generate_csrf_token(db: Session, user_id: UUID) -> str:
    token = stage_csrf_token(db, user_id)
    db.commit()
    return token


def verify_csrf_token(db: Session, token: str, user_id: UUID) -> bool:
    """True only for a live token owned by ``user_id``."""
    record = db.scalars(
        select(CsrfToken).where(CsrfToken.token == token, CsrfToken.user_id == user_id)
    ).first()
    if record is None:
        return False

    now = _utcnow()
    still_live = db.scalars(
        select(CsrfToken.token).where(CsrfToken.token == token, CsrfToken.expires_at > now)
    ).first()
    if still_live is None:
        db.execute(
            delete(CsrfToken)
            .where(CsrfToken.token == token, CsrfToken.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        logger.info("Expired CSRF token removed for user %s", user_id)
        return False
    return True


def revoke_csrf_tokens(db: Session, user_id: UUID) -> None:
    db.execute(delete(CsrfToken).where(CsrfToken.user_id == user_id))
    db.commit()
