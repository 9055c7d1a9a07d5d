"""Database handle and session lifecycle helpers."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine and session factory for one process.

    Built once at startup, handed to whatever needs the store, and disposed
    on shutdown so pooled connections are drained.
    """

    def __init__(self, url: str, *, engine: Engine | None = None, **engine_kwargs: Any) -> None:
        self.engine = engine or create_engine(url, pool_pre_ping=True, **engine_kwargs)
        self._session_factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def new_session(self) -> Session:
        return self._session_factory()

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.new_session()
        try:
            yield db
        finally:
            db.close()

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connections disposed")


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_db(request: Request) -> Iterator[Session]:
    db = get_database(request).new_session()
    try:
        yield db
    finally:
        db.close()
