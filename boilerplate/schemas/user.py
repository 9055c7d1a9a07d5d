"""Pydantic schemas for user payloads and responses."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from boilerplate.models.enums import UserRole


class UserOut(BaseModel):
    """Public view of a user; the password hash is never part of it."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str | None
    role: UserRole
    email_verified: bool
    created_at: dt.datetime
    updated_at: dt.datetime


class UserRoleUpdate(BaseModel):
    role: UserRole
    force_reauth: bool = False


class Pagination(BaseModel):
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class UserPage(BaseModel):
    users: list[UserOut]
    pagination: Pagination


class RoleCount(BaseModel):
    role: UserRole
    count: int


class UserStats(BaseModel):
    total_users: int
    verified_users: int
    unverified_users: int
    by_role: list[RoleCount]
