"""
Resend Verification Use Case

Issues a fresh email verification token for an unverified account.
"""

from authority.app.serializers import StatusResponse
from authority.app.services.mail_sender import MailSender, deliver, verification_email
from authority.app.services.secret_token_codec import SecretTokenCodec
from authority.app.services.unit_of_work import UnitOfWork
from authority.domain.entities import AuditEvent, TokenPurpose
from authority.domain.password_policy import normalize_email
from authority.libs.result import Result, Return

VERIFICATION_REQUESTED = StatusResponse(
    status="success",
    message="If an unverified account exists with this email, a verification link has been sent",
)


class ResendVerificationUseCase:
    """
    Use case for resending the verification email.

    Business Rules:
    - Same response for unknown, verified, deactivated and unverified accounts
    - A new token replaces the previous one and is valid for 24 hours
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
            if account is None or not account.is_active or account.is_email_verified:
                return Return.ok(VERIFICATION_REQUESTED)

            issued = self.token_codec.issue_for(account, TokenPurpose.email_verification)
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(account_id=account.id, action="verification_email_requested")
            )
            await self.uow.commit()

        await deliver(
            self.mail_sender, account.email, verification_email(self.base_url, issued.plaintext)
        )
        return Return.ok(VERIFICATION_REQUESTED)
