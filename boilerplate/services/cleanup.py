"""Expiry sweeper: purge expired rows from every token table."""

from __future__ import annotations

import datetime as dt
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, select

from boilerplate.core.config import settings
from boilerplate.db.session import Database
from boilerplate.models.csrf_token import CsrfToken
from boilerplate.models.password_reset_token import PasswordResetToken
from boilerplate.models.refresh_token import RefreshToken
from boilerplate.models.verification_token import VerificationToken

logger = logging.getLogger(__name__)

TOKEN_TABLES: tuple[tuple[str, Any], ...] = (
    ("refresh_tokens", RefreshToken),
    ("verification_tokens", VerificationToken),
    ("password_reset_tokens", PasswordResetToken),
    ("csrf_tokens", CsrfToken),
)


@dataclass
class CleanupReport:
    started_at: dt.datetime
    deleted: dict[str, int] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def total_deleted(self) -> int:
        return sum(self.deleted.values())

    @property
    def ok(self) -> bool:
        return not self.errors


def _purge_table(database: Database, model: Any, *, now: dt.datetime, batch_size: int, pause_seconds: float) -> int:
    """Delete expired rows of one table in short batches, one commit each."""
    total = 0
    while True:
        with database.session() as db:
            keys = db.scalars(select(model.token).where(model.expires_at < now).limit(batch_size)).all()
            if not keys:
                break
            result = db.execute(
                delete(model)
                .where(model.token.in_(keys), model.expires_at < now)
                .execution_options(synchronize_session=False)
            )
            db.commit()
            total += result.rowcount
        if len(keys) < batch_size:
            break
        if pause_seconds > 0:
            time.sleep(pause_seconds)
    return total


def cleanup_expired_tokens(
    database: Database,
    *,
    now: dt.datetime | None = None,
    batch_size: int | None = None,
    pause_seconds: float | None = None,
) -> CleanupReport:
    """Best-effort sweep; a failing table is logged and skipped."""
    now = now or dt.datetime.now(dt.timezone.utc)
    batch_size = batch_size or settings.TOKEN_CLEANUP_BATCH_SIZE
    if pause_seconds is None:
        pause_seconds = settings.TOKEN_CLEANUP_BATCH_PAUSE_SECONDS

    report = CleanupReport(started_at=now)
    for table_name, model in TOKEN_TABLES:
        try:
            report.deleted[table_name] = _purge_table(
                database,
                model,
                now=now,
                batch_size=batch_size,
                pause_seconds=pause_seconds,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Token cleanup failed for %s", table_name)
            report.errors[table_name] = exc.__class__.__name__

    logger.info(
        "Token cleanup completed: refresh=%s verification=%s reset=%s csrf=%s errors=%s",
        report.deleted.get("refresh_tokens", 0),
        report.deleted.get("verification_tokens", 0),
        report.deleted.get("password_reset_tokens", 0),
        report.deleted.get("csrf_tokens", 0),
        len(report.errors),
    )
    return report
