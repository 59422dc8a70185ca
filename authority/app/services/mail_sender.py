"""
Mail Sender

Outbound email capability. Delivery is best effort: callers log failures
and never roll back the mutation that preceded the send.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    delivered: bool
    message_id: Optional[str] = None
    detail: Optional[str] = None


def redact_email(email: str) -> str:
    """Redact an email address for logging."""
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class MailSender(ABC):
    @abstractmethod
    async def send(
        self, to: str, subject: str, html_body: str, text_body: str
    ) -> DeliveryResult:
        pass


class LoggingMailSender(MailSender):
    """Development sender: logs the message instead of delivering it."""

    async def send(
        self, to: str, subject: str, html_body: str, text_body: str
    ) -> DeliveryResult:
        logger.info(f"Email (dev mode) to {redact_email(to)}: {subject}")
        logger.debug(text_body)
        return DeliveryResult(delivered=True, message_id="dev-mode", detail="logged")


async def deliver(mail_sender: MailSender, to: str, message: "EmailMessage") -> DeliveryResult:
    """Send without letting a transport failure escape to the caller."""
    try:
        result = await mail_sender.send(to, message.subject, message.html_body, message.text_body)
    except Exception as exc:
        logger.warning(f"Email delivery to {redact_email(to)} failed: {type(exc).__name__}")
        return DeliveryResult(delivered=False, detail=type(exc).__name__)
    if not result.delivered:
        logger.warning(f"Email delivery to {redact_email(to)} was not accepted")
    return result


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    html_body: str
    text_body: str


def verification_email(base_url: str, token: str) -> EmailMessage:
    link = f"{base_url}/auth/verify-email?token={token}"
    return EmailMessage(
        subject="Verify Your Email",
        html_body=(
            "<h1>Welcome!</h1>"
            "<p>Please verify your email by clicking the link below:</p>"
            f'<a href="{link}">Verify Email</a>'
            "<p>Or copy and paste this link into your browser:</p>"
            f"<p>{link}</p>"
            "<p>This link will expire in 24 hours.</p>"
        ),
        text_body=(
            "Please verify your email by opening the link below:\n\n"
            f"{link}\n\n"
            "This link will expire in 24 hours.\n"
        ),
    )


def password_reset_email(base_url: str, token: str) -> EmailMessage:
    link = f"{base_url}/auth/reset-password?token={token}"
    return EmailMessage(
        subject="Password Reset Request",
        html_body=(
            "<h1>Password Reset</h1>"
            "<p>You requested a password reset. Click the link below to reset your password:</p>"
            f'<a href="{link}">Reset Password</a>'
            "<p>Or copy and paste this link into your browser:</p>"
            f"<p>{link}</p>"
            "<p>This link will expire in 10 minutes.</p>"
            "<p>If you didn't request this, please ignore this email.</p>"
        ),
        text_body=(
            "You requested a password reset. Open the link below to choose a new password:\n\n"
            f"{link}\n\n"
            "This link will expire in 10 minutes. "
            "If you didn't request this, please ignore this email.\n"
        ),
    )
