"""Common FastAPI dependencies for authentication and authorization."""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from boilerplate.core.exceptions import InvalidTokenError, NotAuthenticatedError
from boilerplate.core.rbac import check_role
from boilerplate.core.security import AccessTokenPayload, decode_access_token
from boilerplate.db.session import get_db
from boilerplate.models.enums import UserRole
from boilerplate.models.user import User


def _extract_bearer_token(request: Request) -> str | None:
    authorization = request.headers.get("Authorization", "")
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer":
        return None
    cleaned = token.strip()
    return cleaned or None


def get_token_payload(request: Request) -> AccessTokenPayload:
    token = _extract_bearer_token(request)
    if not token:
        raise NotAuthenticatedError()
    return decode_access_token(token)


def get_optional_token_payload(request: Request) -> AccessTokenPayload | None:
    token = _extract_bearer_token(request)
    if not token:
        return None
    try:
        return decode_access_token(token)
    except InvalidTokenError:
        return None


def get_current_user(
    payload: AccessTokenPayload = Depends(get_token_payload),
    db: Session = Depends(get_db),
) -> User:
    user = db.get(User, payload.user_id)
    if not user:
        raise NotAuthenticatedError()
    return user


def require_roles(*allowed: UserRole):
    def _checker(payload: AccessTokenPayload = Depends(get_token_payload)) -> AccessTokenPayload:
        return check_role(payload, allowed)

    return _checker


require_admin = require_roles(UserRole.admin)
require_staff = require_roles(UserRole.admin, UserRole.moderator)
