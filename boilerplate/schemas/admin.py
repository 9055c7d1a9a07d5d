"""Schemas for the operational admin endpoints."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel


class CleanupResponse(BaseModel):
    message: str
    deleted: dict[str, int]
    total_deleted: int
    errors: dict[str, str]


class BackupOut(BaseModel):
    filename: str
    path: str
    size: int
    size_formatted: str
    created_at: dt.datetime


class BackupCreated(BaseModel):
    message: str
    backup_path: str


class BackupStats(BaseModel):
    total_backups: int
    total_size: int
    total_size_formatted: str
    newest_backup: dt.datetime | None
    oldest_backup: dt.datetime | None
    retention_days: int
    hour: int


class BackupListing(BaseModel):
    backups: list[BackupOut]
    stats: BackupStats
