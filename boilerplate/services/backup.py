"""Database backups with pg_dump, gzip compression and retention."""

from __future__ import annotations

import datetime as dt
import gzip
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy.engine import make_url

from boilerplate.core.config import settings
from boilerplate.core.exceptions import BackupFailedError

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "backup_"
BACKUP_SUFFIX = ".sql.gz"


@dataclass(frozen=True)
class BackupInfo:
    filename: str
    path: str
    size: int
    created_at: dt.datetime

    @property
    def size_formatted(self) -> str:
        return f"{self.size / (1024 * 1024):.2f} MB"


def _backup_dir() -> Path:
    path = Path(settings.BACKUP_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _pg_dump_command(database_url: str) -> tuple[list[str], dict[str, str]]:
    url = make_url(database_url)
    if not url.drivername.startswith("postgresql") or not url.database:
        raise BackupFailedError("DATABASE_URL is not a PostgreSQL URL")

    command = [
        "pg_dump",
        "-h", url.host or "localhost",
        "-p", str(url.port or 5432),
        "-d", url.database,
        "--format=plain",
        "--no-owner",
        "--no-acl",
        "--clean",
        "--if-exists",
    ]
    if url.username:
        command += ["-U", url.username]
    env = dict(os.environ)
    if url.password:
        env["PGPASSWORD"] = url.password
    return command, env


def create_backup() -> str:
    """Dump the database into a gzip file and prune old backups; returns its path."""
    timestamp = dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    sql_path = _backup_dir() / f"{BACKUP_PREFIX}{timestamp}.sql"
    gz_path = sql_path.with_name(sql_path.name + ".gz")
    command, env = _pg_dump_command(settings.DATABASE_URL)

    try:
        with sql_path.open("wb") as out:
            subprocess.run(command, stdout=out, stderr=subprocess.PIPE, env=env, check=True)
        with sql_path.open("rb") as src, gzip.open(gz_path, "wb") as dst:
            shutil.copyfileobj(src, dst)
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.exception("Backup failed")
        gz_path.unlink(missing_ok=True)
        raise BackupFailedError() from exc
    finally:
        sql_path.unlink(missing_ok=True)

    info = _describe(gz_path)
    logger.info("Backup created: %s (%s)", info.path, info.size_formatted)
    cleanup_old_backups()
    return str(gz_path)


def _describe(path: Path) -> BackupInfo:
    stat = path.stat()
    return BackupInfo(
        filename=path.name,
        path=str(path),
        size=stat.st_size,
        created_at=dt.datetime.fromtimestamp(stat.st_mtime, tz=dt.timezone.utc),
    )


def list_backups() -> list[BackupInfo]:
    """Backups newest first."""
    backups = [
        _describe(path)
        for path in _backup_dir().iterdir()
        if path.is_file() and path.name.startswith(BACKUP_PREFIX) and path.name.endswith(BACKUP_SUFFIX)
    ]
    return sorted(backups, key=lambda info: info.created_at, reverse=True)


def cleanup_old_backups(now: dt.datetime | None = None) -> int:
    now = now or dt.datetime.now(dt.timezone.utc)
    cutoff = now - dt.timedelta(days=settings.BACKUP_RETENTION_DAYS)
    deleted = 0
    for backup in list_backups():
        if backup.created_at >= cutoff:
            continue
        try:
            Path(backup.path).unlink()
        except OSError:
            logger.warning("Could not delete old backup %s", backup.filename)
            continue
        logger.info("Deleted old backup: %s", backup.filename)
        deleted += 1
    return deleted


def backup_stats() -> dict[str, Any]:
    backups = list_backups()
    total_size = sum(b.size for b in backups)
    return {
        "total_backups": len(backups),
        "total_size": total_size,
        "total_size_formatted": f"{total_size / (1024 * 1024):.2f} MB",
        "newest_backup": backups[0].created_at if backups else None,
        "oldest_backup": backups[-1].created_at if backups else None,
        "retention_days": settings.BACKUP_RETENTION_DAYS,
        "hour": settings.BACKUP_HOUR,
    }
