"""Convenience imports for Alembic metadata discovery."""

from boilerplate.models.user import User
from boilerplate.models.refresh_token import RefreshToken
from boilerplate.models.csrf_token import CsrfToken
from boilerplate.models.verification_token import VerificationToken
from boilerplate.models.password_reset_token import PasswordResetToken

__all__ = ["User", "RefreshToken", "CsrfToken", "VerificationToken", "PasswordResetToken"]
