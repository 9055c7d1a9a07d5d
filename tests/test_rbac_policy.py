from __future__ import annotations

from uuid import uuid4

import pytest

from boilerplate.core.exceptions import InsufficientPermissionsError
from boilerplate.core.rbac import check_role, is_allowed
from boilerplate.core.security import AccessTokenPayload
from boilerplate.models.enums import UserRole


def _payload(role: UserRole) -> AccessTokenPayload:
    return AccessTokenPayload(user_id=uuid4(), role=role)


def test_role_gate_allows_listed_roles_only() -> None:
    staff = (UserRole.admin, UserRole.moderator)

    assert is_allowed(_payload(UserRole.admin), staff)
    assert is_allowed(_payload(UserRole.moderator), staff)
    assert not is_allowed(_payload(UserRole.user), staff)


def test_check_role_returns_payload_when_allowed() -> None:
    payload = _payload(UserRole.admin)

    assert check_role(payload, [UserRole.admin]) is payload


def test_check_role_reports_required_and_current_roles() -> None:
    with pytest.raises(InsufficientPermissionsError) as exc_info:
        check_role(_payload(UserRole.user), [UserRole.admin, UserRole.moderator])

    error = exc_info.value
    assert error.status_code == 403
    assert error.details == {"required": ["admin", "moderator"], "current": "user"}
