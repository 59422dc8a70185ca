"""
Verify Email Use Case

Marks an account's email as verified from an emailed token.
"""

from authority.app.errors import ErrorCode
from authority.app.serializers import StatusResponse
from authority.app.services.secret_token_codec import SecretTokenCodec
from authority.app.services.unit_of_work import UnitOfWork
from authority.domain.entities import AuditEvent, TokenPurpose
from authority.libs.result import Error, Result, Return


class VerifyEmailUseCase:
    """
    Use case for email verification.

    Business Rules:
    - Token must match the stored digest and be within its 24 hour window
    - Token is cleared on use
    """

    def __init__(self, uow: UnitOfWork, token_codec: SecretTokenCodec):
        self.uow = uow
        self.token_codec = token_codec

    async def execute(self, token: str) -> Result[StatusResponse]:
        async with self.uow:
            account = await self.token_codec.consume(
                self.uow.accounts, token, TokenPurpose.email_verification
            )
            if account is None:
                return Return.err(
                    Error(
                        ErrorCode.INVALID_OR_EXPIRED_TOKEN,
                        "Invalid or expired verification token",
                    )
                )

            account.is_email_verified = True
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(account_id=account.id, action="email_verified")
            )
            await self.uow.commit()

        return Return.ok(StatusResponse(status="success", message="Email verified successfully"))
