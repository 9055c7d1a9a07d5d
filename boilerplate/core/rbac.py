"""Role gate: authorization from the role embedded in the access token."""

from __future__ import annotations

from collections.abc import Iterable

from boilerplate.core.exceptions import InsufficientPermissionsError
from boilerplate.core.security import AccessTokenPayload
from boilerplate.models.enums import UserRole


def is_allowed(payload: AccessTokenPayload, allowed: Iterable[UserRole]) -> bool:
    return payload.role in set(allowed)


def check_role(payload: AccessTokenPayload, allowed: Iterable[UserRole]) -> AccessTokenPayload:
    """Pure comparison against an already verified payload; never touches the store."""
    allowed_roles = list(allowed)
    if payload.role not in allowed_roles:
        raise InsufficientPermissionsError(
            required=[role.value for role in allowed_roles],
            current=payload.role.value,
        )
    return payload
