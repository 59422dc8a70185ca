"""
Request Password Reset Use Case

Issues a password reset token and emails it.
"""

import logging

from authority.app.serializers import StatusResponse
from authority.app.services.mail_sender import MailSender, deliver, password_reset_email
from authority.app.services.secret_token_codec import SecretTokenCodec
from authority.app.services.unit_of_work import UnitOfWork
from authority.domain.entities import AuditEvent, TokenPurpose
from authority.domain.password_policy import normalize_email
from authority.libs.result import Result, Return

logger = logging.getLogger(__name__)

RESET_REQUESTED = StatusResponse(
    status="success",
    message="If an account exists with this email, a password reset link has been sent",
)


class RequestPasswordResetUseCase:
    """
    Use case for requesting a password reset.

    Business Rules:
    - Same response whether or not the email belongs to an account
    - Token is valid for 10 minutes; a new request replaces the previous token
    - Only the SHA-256 digest is stored; the plaintext goes into the email link
    - Deactivated accounts receive nothing
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_codec: SecretTokenCodec,
        mail_sender: MailSender,
        base_url: str,
    ):
        self.uow = uow
        self.token_codec = token_codec
        self.mail_sender = mail_sender
        self.base_url = base_url

    async def execute(self, email: str) -> Result[StatusResponse]:
        async with self.uow:
            account = await self.uow.accounts.get_by_email(normalize_email(email))
            if account is None or not account.is_active:
                return Return.ok(RESET_REQUESTED)

            issued = self.token_codec.issue_for(account, TokenPurpose.password_reset)
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(account_id=account.id, action="password_reset_requested")
            )
            await self.uow.commit()

        await deliver(
            self.mail_sender, account.email, password_reset_email(self.base_url, issued.plaintext)
        )
        return Return.ok(RESET_REQUESTED)
