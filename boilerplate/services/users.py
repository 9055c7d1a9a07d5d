"""Service helpers for admin user management."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from boilerplate.models.enums import UserRole
from boilerplate.models.user import User
from boilerplate.services.refresh_tokens import revoke_all_refresh_tokens

logger = logging.getLogger(__name__)


def list_users(db: Session, *, page: int, limit: int) -> tuple[list[User], int]:
    total = db.scalar(select(func.count()).select_from(User)) or 0
    users = db.scalars(
        select(User).order_by(User.created_at.desc()).offset((page - 1) * limit).limit(limit)
    ).all()
    return list(users), total


def update_role(db: Session, user_id: UUID, role: UserRole, *, force_reauth: bool = False) -> User | None:
    """Change a user's role.

    Live access tokens keep the old role until they expire. With
    ``force_reauth`` every refresh token of the user is revoked so the new
    role applies as soon as the current access token lapses.
    """
    user = db.get(User, user_id)
    if not user:
        logger.warning("User role update failed (not found): %s", user_id)
        return None
    user.role = role
    db.add(user)
    if force_reauth:
        revoke_all_refresh_tokens(db, user.id, commit=False)
    db.commit()
    db.refresh(user)
    logger.info("User role updated: %s -> %s (force_reauth=%s)", user.email, role.value, force_reauth)
    return user


def delete_user(db: Session, user_id: UUID) -> bool:
    user = db.get(User, user_id)
    if not user:
        logger.warning("User delete failed (not found): %s", user_id)
        return False
    db.delete(user)
    db.commit()
    logger.info("User deleted: %s", user.email)
    return True


def user_stats(db: Session) -> dict[str, object]:
    total = db.scalar(select(func.count()).select_from(User)) or 0
    verified = db.scalar(select(func.count()).select_from(User).where(User.email_verified.is_(True))) or 0
    rows = db.execute(select(User.role, func.count()).group_by(User.role)).all()
    return {
        "total_users": total,
        "verified_users": verified,
        "unverified_users": total - verified,
        "by_role": [{"role": role.value, "count": count} for role, count in rows],
    }
