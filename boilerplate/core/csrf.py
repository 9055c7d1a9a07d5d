"""Double-submit CSRF check applied to state-changing requests."""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from boilerplate.core.config import settings
from boilerplate.core.deps import get_optional_token_payload
from boilerplate.core.exceptions import CsrfTokenMismatchError, CsrfTokenMissingError, InvalidCsrfTokenError
from boilerplate.db.session import get_db
from boilerplate.services.csrf import verify_csrf_token

logger = logging.getLogger(__name__)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
# Session bootstrap endpoints cannot carry a token yet.
CSRF_EXEMPT_PATHS = frozenset({"/api/auth/login", "/api/auth/register", "/api/auth/refresh"})


def is_csrf_exempt(method: str, path: str) -> bool:
    return method.upper() in SAFE_METHODS or path.rstrip("/") in CSRF_EXEMPT_PATHS


def csrf_protect(request: Request, db: Session = Depends(get_db)) -> None:
    if is_csrf_exempt(request.method, request.url.path):
        return

    # Unauthenticated callers are rejected by the route's own auth dependency.
    payload = get_optional_token_payload(request)
    if payload is None:
        return

    cookie_token = request.cookies.get(settings.CSRF_COOKIE_NAME)
    header_token = request.headers.get(settings.CSRF_HEADER_NAME)
    if not cookie_token or not header_token:
        logger.warning("CSRF rejected (missing): %s %s", request.method, request.url.path)
        raise CsrfTokenMissingError()

    if not secrets.compare_digest(cookie_token.encode(), header_token.encode()):
        logger.warning("CSRF rejected (mismatch): %s %s", request.method, request.url.path)
        raise CsrfTokenMismatchError()

    if not verify_csrf_token(db, cookie_token, payload.user_id):
        logger.warning("CSRF rejected (invalid) for user %s", payload.user_id)
        raise InvalidCsrfTokenError()
