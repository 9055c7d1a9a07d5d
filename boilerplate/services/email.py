"""Compose system emails and deliver them to the console log."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from boilerplate.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    body: str


def build_verification_email(to: str, token: str) -> EmailMessage:
    link = f"{settings.FRONTEND_BASE_URL}/verify-email?token={token}"
    body = (
        "Hello,\n\n"
        "Please confirm your email address to activate your account.\n\n"
        f"Verification link: {link}\n\n"
        f"This link expires in {settings.EMAIL_TOKEN_EXPIRE_HOURS} hours.\n\n"
        "If you did not create an account, you can ignore this email."
    )
    return EmailMessage(to=to, subject="Verify your email address", body=body)


def build_password_reset_email(to: str, token: str) -> EmailMessage:
    link = f"{settings.FRONTEND_BASE_URL}/reset-password?token={token}"
    body = (
        "Hello,\n\n"
        "We received a request to reset your password.\n\n"
        f"Reset link: {link}\n\n"
        f"This link expires in {settings.PASSWORD_RESET_TOKEN_EXPIRE_HOURS} hour(s).\n\n"
        "If you did not request a reset, you can ignore this email."
    )
    return EmailMessage(to=to, subject="Reset your password", body=body)


def build_welcome_email(to: str, name: str | None) -> EmailMessage:
    body = (
        f"Hello {name or to},\n\n"
        "Your email address is verified and your account is active.\n\n"
        f"Sign in: {settings.FRONTEND_BASE_URL}/login"
    )
    return EmailMessage(to=to, subject="Welcome aboard", body=body)


def send_email(message: EmailMessage) -> None:
    # Delivery is stubbed: messages go to the log instead of an SMTP relay.
    logger.info("Email to=%s subject=%r\n%s", message.to, message.subject, message.body)
