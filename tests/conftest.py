from __future__ import annotations

import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-access-secret-0123456789abcdef-0123")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-fedcba9876543210-4567")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("TOKEN_CLEANUP_ENABLED", "false")
os.environ.setdefault("BACKUP_ENABLED", "false")

from collections.abc import Iterator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

import boilerplate.models  # noqa: F401
from boilerplate.core.security import hash_password
from boilerplate.db.base import Base
from boilerplate.db.session import Database
from boilerplate.main import create_app
from boilerplate.models.enums import UserRole
from boilerplate.models.user import User

STRONG_PASSWORD = "Str0ng!Passw0rd"


@pytest.fixture()
def database() -> Iterator[Database]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    handle = Database("sqlite://", engine=engine)
    try:
        yield handle
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def db(database: Database) -> Iterator[Session]:
    with database.session() as session:
        yield session


@pytest.fixture()
def client(database: Database) -> Iterator[TestClient]:
    app = create_app(database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_user(db: Session):
    def _make_user(
        email: str | None = None,
        *,
        role: UserRole = UserRole.user,
        password: str = STRONG_PASSWORD,
        email_verified: bool = False,
    ) -> User:
        user = User(
            id=uuid4(),
            email=email or f"user-{uuid4().hex[:8]}@test.com",
            name="Test User",
            password_hash=hash_password(password),
            role=role,
            email_verified=email_verified,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user
