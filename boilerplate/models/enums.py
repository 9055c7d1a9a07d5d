"""Shared enum values used by the database models and schemas."""

from __future__ import annotations

import enum


class UserRole(str, enum.Enum):
    user = "user"
    moderator = "moderator"
    admin = "admin"
