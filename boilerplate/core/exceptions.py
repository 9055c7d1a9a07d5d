"""Custom exceptions for application-specific error handling."""

from __future__ import annotations

from typing import Optional, Dict, Any, Sequence


class AppException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class NotFoundError(AppException):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str = "Resource not found", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="NOT_FOUND", details=details, status_code=404)


class ConflictError(AppException):
    """Raised when a request conflicts with current state."""

    def __init__(self, message: str = "Conflict", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="CONFLICT", details=details, status_code=409)


class BadRequestError(AppException):
    """Raised when request is invalid."""

    def __init__(self, message: str = "Bad request", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="BAD_REQUEST", details=details, status_code=400)


class RateLimitExceeded(AppException):
    """Raised when a client exceeds rate limits."""

    def __init__(self, *, retry_after: int, limit: int, window_seconds: int):
        headers = {
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Window": str(window_seconds),
        }
        super().__init__(
            "Too many requests, please try again later",
            error_code="RATE_LIMIT",
            details={"retry_after": retry_after, "limit": limit, "window_seconds": window_seconds},
            status_code=429,
            headers=headers,
        )


# ===== DATABASE EXCEPTIONS =====


class DatabaseUnavailableError(AppException):
    """Raised when the backing store cannot serve the request."""

    def __init__(self, message: str = "Service unavailable"):
        super().__init__(message, error_code="SERVICE_UNAVAILABLE", status_code=503)


# ===== AUTHENTICATION/AUTHORIZATION EXCEPTIONS =====


class AuthenticationException(AppException):
    """Base exception for authentication errors.

    Messages are deliberately generic: callers must not learn which check
    (unknown account, wrong password, bad signature, expiry, revocation) failed.
    """

    def __init__(self, message: str, *, error_code: str, status_code: int = 401):
        super().__init__(message, error_code=error_code, status_code=status_code)


class NotAuthenticatedError(AuthenticationException):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, error_code="NOT_AUTHENTICATED")


class InvalidCredentialsError(AuthenticationException):
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, error_code="INVALID_CREDENTIALS")


class InvalidTokenError(AuthenticationException):
    """Raised for any access-token failure, expired or forged alike."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, error_code="INVALID_TOKEN")


class InvalidRefreshTokenError(AuthenticationException):
    """Raised when a refresh token is unknown, revoked, expired or forged."""

    def __init__(self, message: str = "Invalid or expired refresh token"):
        super().__init__(message, error_code="INVALID_REFRESH_TOKEN")


class InsufficientPermissionsError(AppException):
    """Raised when the caller's role is not allowed for an operation."""

    def __init__(self, required: Sequence[str], current: str | None):
        super().__init__(
            "Insufficient permissions",
            error_code="INSUFFICIENT_PERMISSIONS",
            details={"required": list(required), "current": current},
            status_code=403,
        )


# ===== CSRF EXCEPTIONS =====


class CsrfException(AppException):
    """Base exception for double-submit CSRF failures."""

    def __init__(self, message: str, *, error_code: str):
        super().__init__(message, error_code=error_code, status_code=403)


class CsrfTokenMissingError(CsrfException):
    def __init__(self):
        super().__init__("CSRF token missing", error_code="CSRF_TOKEN_MISSING")


class CsrfTokenMismatchError(CsrfException):
    def __init__(self):
        super().__init__("CSRF token mismatch", error_code="CSRF_TOKEN_MISMATCH")


class InvalidCsrfTokenError(CsrfException):
    def __init__(self):
        super().__init__("Invalid CSRF token", error_code="CSRF_TOKEN_INVALID")


# ===== OPERATIONS EXCEPTIONS =====


class BackupFailedError(AppException):
    """Raised when a database backup cannot be produced."""

    def __init__(self, message: str = "Backup failed"):
        super().__init__(message, error_code="BACKUP_FAILED", status_code=500)
