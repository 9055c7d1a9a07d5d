from __future__ import annotations

import pytest
from pydantic import ValidationError

from boilerplate.core.config import Settings

ACCESS_SECRET = "a" * 32
REFRESH_SECRET = "b" * 32


def test_settings_require_distinct_secrets() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, JWT_SECRET=ACCESS_SECRET, JWT_REFRESH_SECRET=ACCESS_SECRET)


def test_settings_reject_short_secrets() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, JWT_SECRET="short", JWT_REFRESH_SECRET=REFRESH_SECRET)


def test_settings_defaults_and_cors_parsing() -> None:
    settings = Settings(
        _env_file=None,
        JWT_SECRET=ACCESS_SECRET,
        JWT_REFRESH_SECRET=REFRESH_SECRET,
        ENV="production",
        CORS_ORIGINS="https://app.test.com, https://admin.test.com,",
    )

    assert settings.is_production
    assert not settings.is_development
    assert settings.cors_origins == ["https://app.test.com", "https://admin.test.com"]
    assert settings.ACCESS_TOKEN_EXPIRE_MINUTES == 15
    assert settings.REFRESH_TOKEN_EXPIRE_DAYS == 7
    assert settings.CSRF_TOKEN_EXPIRE_MINUTES == 60
