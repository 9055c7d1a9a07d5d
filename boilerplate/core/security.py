"""Security helpers for hashing passwords and issuing JWTs."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any
from uuid import UUID, uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from boilerplate.core.config import settings
from boilerplate.core.exceptions import InvalidRefreshTokenError, InvalidTokenError
from boilerplate.models.enums import UserRole

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Same scheme and cost as real hashes, so a lookup miss costs a full verify.
DUMMY_PASSWORD_HASH = pwd_context.hash("dummy-password-for-timing-equalization")


@dataclass(frozen=True)
class AccessTokenPayload:
    user_id: UUID
    role: UserRole


@dataclass(frozen=True)
class RefreshTokenClaims:
    user_id: UUID
    jti: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        return False


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _encode(claims: dict[str, Any], *, secret: str, expires_delta: dt.timedelta, token_type: str) -> str:
    now = _utcnow()
    to_encode = {
        **claims,
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(to_encode, secret, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: UUID, role: UserRole, *, expires_delta: dt.timedelta | None = None) -> str:
    """Mint a short-lived access token carrying the user's role.

    The role is embedded so authorization needs no lookup; a role change only
    reaches a session once its access token expires or the session is revoked.
    """
    return _encode(
        {"sub": str(user_id), "role": role.value, "jti": str(uuid4())},
        secret=settings.JWT_SECRET,
        expires_delta=expires_delta or dt.timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        token_type=ACCESS_TOKEN_TYPE,
    )


def create_refresh_token(user_id: UUID, jti: str, *, expires_delta: dt.timedelta | None = None) -> str:
    return _encode(
        {"sub": str(user_id), "jti": jti},
        secret=settings.JWT_REFRESH_SECRET,
        expires_delta=expires_delta or dt.timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        token_type=REFRESH_TOKEN_TYPE,
    )


def _decode(token: str, secret: str) -> dict[str, Any]:
    return jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])


def decode_access_token(token: str) -> AccessTokenPayload:
    try:
        payload = _decode(token, settings.JWT_SECRET)
    except JWTError as exc:
        raise InvalidTokenError() from exc

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise InvalidTokenError()
    try:
        user_id = UUID(str(payload.get("sub")))
        role = UserRole(payload.get("role"))
    except ValueError as exc:
        raise InvalidTokenError() from exc
    return AccessTokenPayload(user_id=user_id, role=role)


def decode_refresh_token(token: str) -> RefreshTokenClaims:
    try:
        payload = _decode(token, settings.JWT_REFRESH_SECRET)
    except JWTError as exc:
        raise InvalidRefreshTokenError() from exc

    jti = payload.get("jti")
    if payload.get("type") != REFRESH_TOKEN_TYPE or not jti:
        raise InvalidRefreshTokenError()
    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError as exc:
        raise InvalidRefreshTokenError() from exc
    return RefreshTokenClaims(user_id=user_id, jti=str(jti))
