"""Replace-by-owner writes for the single-active-token tables."""

from __future__ import annotations

import datetime as dt
from typing import Any
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert_user_token(
    db: Session,
    model: Any,
    *,
    user_id: UUID,
    token: str,
    expires_at: dt.datetime,
    created_at: dt.datetime,
) -> None:
    """Make ``token`` the only row of ``model`` owned by ``user_id``.

    ``model.user_id`` carries a unique constraint, so racing issuers collapse
    onto one row instead of leaving two live tokens. Does not commit.
    """
    values = {"token": token, "user_id": user_id, "expires_at": expires_at, "created_at": created_at}
    insert = _INSERTS.get(db.get_bind().dialect.name)
    if insert is None:
        db.execute(delete(model).where(model.user_id == user_id))
        db.add(model(**values))
        db.flush()
        return

    stmt = insert(model).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[model.user_id],
        set_={
            "token": stmt.excluded.token,
            "expires_at": stmt.excluded.expires_at,
            "created_at": stmt.excluded.created_at,
        },
    )
    db.execute(stmt)
