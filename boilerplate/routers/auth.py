"""Authentication endpoints (register, login, refresh, logout, recovery)."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from boilerplate.core.config import settings
from boilerplate.core.deps import get_current_user, get_optional_token_payload
from boilerplate.core.rate_limit import rate_limit
from boilerplate.db.session import get_db
from boilerplate.models.user import User
from boilerplate.schemas.auth import (
    CsrfTokenResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    SessionResponse,
    TokenPairResponse,
)
from boilerplate.schemas.user import UserOut
from boilerplate.services import auth as auth_service
from boilerplate.services.csrf import generate_csrf_token
from boilerplate.services.password_reset import request_password_reset, reset_password
from boilerplate.services.verification import resend_verification, verify_email

router = APIRouter(dependencies=[Depends(rate_limit("auth"))])
logger = logging.getLogger(__name__)


def _set_csrf_cookie(response: Response, csrf_token: str) -> None:
    # Readable by client script on purpose: it is echoed back in the header.
    response.set_cookie(
        settings.CSRF_COOKIE_NAME,
        csrf_token,
        httponly=False,
        samesite="strict",
        secure=settings.is_production,
        path="/",
        max_age=settings.CSRF_TOKEN_EXPIRE_MINUTES * 60,
    )


def _clear_csrf_cookie(response: Response) -> None:
    response.delete_cookie(settings.CSRF_COOKIE_NAME, path="/")


def _session_response(response: Response, session: auth_service.AuthSession) -> SessionResponse:
    _set_csrf_cookie(response, session.csrf_token)
    return SessionResponse(
        user=UserOut.model_validate(session.user),
        access_token=session.access_token,
        refresh_token=session.refresh_token,
    )


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, response: Response, db: Session = Depends(get_db)) -> SessionResponse:
    session = auth_service.register_user(db, email=payload.email, password=payload.password, name=payload.name)
    return _session_response(response, session)


@router.post("/login", response_model=SessionResponse)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)) -> SessionResponse:
    session = auth_service.login(db, email=payload.email, password=payload.password)
    return _session_response(response, session)


@router.post("/refresh", response_model=TokenPairResponse)
def refresh(payload: RefreshRequest, response: Response, db: Session = Depends(get_db)) -> TokenPairResponse:
    session = auth_service.refresh_session(db, payload.refresh_token)
    _set_csrf_cookie(response, session.csrf_token)
    return TokenPairResponse(access_token=session.access_token, refresh_token=session.refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    payload: LogoutRequest | None = None,
    db: Session = Depends(get_db),
) -> MessageResponse:
    token_payload = get_optional_token_payload(request)
    auth_service.logout(
        db,
        refresh_token=payload.refresh_token if payload else None,
        user_id=token_payload.user_id if token_payload else None,
    )
    _clear_csrf_cookie(response)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)) -> UserOut:
    return UserOut.model_validate(current_user)


@router.get("/csrf-token", response_model=CsrfTokenResponse)
def csrf_token(
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CsrfTokenResponse:
    token = generate_csrf_token(db, current_user.id)
    _set_csrf_cookie(response, token)
    return CsrfTokenResponse(csrf_token=token)


@router.get("/verify-email", response_model=UserOut)
def verify_email_address(token: str, db: Session = Depends(get_db)) -> UserOut:
    return UserOut.model_validate(verify_email(db, token))


@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification_email(payload: ResendVerificationRequest, db: Session = Depends(get_db)) -> MessageResponse:
    resend_verification(db, payload.email)
    return MessageResponse(message="Verification email sent")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)) -> MessageResponse:
    request_password_reset(db, payload.email)
    return MessageResponse(message="If this email exists, a reset link has been sent")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password_with_token(payload: ResetPasswordRequest, db: Session = Depends(get_db)) -> MessageResponse:
    reset_password(db, payload.token, payload.password)
    return MessageResponse(message="Password reset successfully")
