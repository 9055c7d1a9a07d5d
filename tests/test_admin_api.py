from __future__ import annotations

from uuid import uuid4

from boilerplate.core.config import settings
from boilerplate.models.enums import UserRole

PASSWORD = "Str0ng!Passw0rd"


def _login(client, email: str) -> dict[str, str]:  # noqa: ANN001
    response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200
    return {
        "Authorization": f"Bearer {response.json()['access_token']}",
        settings.CSRF_HEADER_NAME: client.cookies.get(settings.CSRF_COOKIE_NAME),
    }


def test_admin_lists_users_with_pagination(client, make_user) -> None:  # noqa: ANN001
    make_user("admin@test.com", role=UserRole.admin)
    for index in range(3):
        make_user(f"member{index}@test.com")
    headers = _login(client, "admin@test.com")

    response = client.get("/api/admin/users", params={"page": 1, "limit": 2}, headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert len(body["users"]) == 2
    assert body["pagination"]["total_count"] == 4
    assert body["pagination"]["total_pages"] == 2
    assert body["pagination"]["has_next_page"] is True


def test_role_change_applies_on_next_login(client, make_user) -> None:  # noqa: ANN001
    make_user("admin@test.com", role=UserRole.admin)
    member = make_user("member@test.com")
    admin_headers = _login(client, "admin@test.com")

    response = client.patch(
        f"/api/admin/users/{member.id}/role",
        json={"role": "moderator", "force_reauth": True},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["role"] == "moderator"

    member_headers = _login(client, "member@test.com")
    stats = client.get("/api/admin/stats", headers=member_headers)
    assert stats.status_code == 200
    assert stats.json()["total_users"] == 2


def test_role_change_requires_csrf_header(client, make_user) -> None:  # noqa: ANN001
    make_user("admin@test.com", role=UserRole.admin)
    member = make_user("member@test.com")
    headers = _login(client, "admin@test.com")
    headers.pop(settings.CSRF_HEADER_NAME)

    response = client.patch(f"/api/admin/users/{member.id}/role", json={"role": "admin"}, headers=headers)

    assert response.status_code == 403
    assert response.json()["error_code"] == "CSRF_TOKEN_MISSING"


def test_admin_cannot_delete_self_and_unknown_user_is_404(client, make_user) -> None:  # noqa: ANN001
    admin = make_user("admin@test.com", role=UserRole.admin)
    headers = _login(client, "admin@test.com")

    own = client.delete(f"/api/admin/users/{admin.id}", headers=headers)
    missing = client.delete(f"/api/admin/users/{uuid4()}", headers=headers)

    assert own.status_code == 400
    assert missing.status_code == 404


def test_admin_deletes_user(client, make_user) -> None:  # noqa: ANN001
    make_user("admin@test.com", role=UserRole.admin)
    member = make_user("member@test.com")
    headers = _login(client, "admin@test.com")

    response = client.delete(f"/api/admin/users/{member.id}", headers=headers)

    assert response.status_code == 204
    login = client.post("/api/auth/login", json={"email": "member@test.com", "password": PASSWORD})
    assert login.status_code == 401


def test_manual_token_cleanup_reports_per_table(client, make_user) -> None:  # noqa: ANN001
    make_user("admin@test.com", role=UserRole.admin)
    headers = _login(client, "admin@test.com")

    response = client.post("/api/admin/cleanup-tokens", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert set(body["deleted"]) == {"refresh_tokens", "verification_tokens", "password_reset_tokens", "csrf_tokens"}
    assert body["errors"] == {}
