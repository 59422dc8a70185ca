"""
Confirm Password Reset Use Case

Sets a new password from an emailed reset token.
"""

import logging

from authority.app.errors import ErrorCode
from authority.app.serializers import StatusResponse
from authority.app.services.clock import Clock
from authority.app.services.password_authenticator import PasswordAuthenticator
from authority.app.services.secret_token_codec import SecretTokenCodec
from authority.app.services.unit_of_work import UnitOfWork
from authority.domain.entities import AuditEvent, TokenPurpose
from authority.domain.password_policy import password_problem
from authority.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

INVALID_RESET_TOKEN = Error(
    ErrorCode.INVALID_OR_EXPIRED_TOKEN, "Invalid or expired password reset token"
)


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming a password reset.

    Business Rules:
    - Token is looked up by SHA-256 digest and must not be expired
    - Token is cleared on use (single use)
    - New password must satisfy the strength policy; re-hashed with bcrypt
    - Lockout state is cleared
    - All sessions of the account are revoked
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        authenticator: PasswordAuthenticator,
        token_codec: SecretTokenCodec,
    ):
        self.uow = uow
        self.clock = clock
        self.authenticator = authenticator
        self.token_codec = token_codec

    async def execute(self, token: str, new_password: str) -> Result[StatusResponse]:
        """
        Errors:
            - INVALID_INPUT: Password does not meet the policy
            - INVALID_OR_EXPIRED_TOKEN: Token unknown, used, replaced or expired
        """
        problem = password_problem(new_password)
        if problem is not None:
            return Return.err(Error(ErrorCode.INVALID_INPUT, problem))

        async with self.uow:
            account = await self.token_codec.consume(
                self.uow.accounts, token, TokenPurpose.password_reset
            )
            if account is None:
                return Return.err(INVALID_RESET_TOKEN)

            await self.authenticator.set_password(account, new_password)
            await self.uow.accounts.update(account)
            await self.uow.accounts.reset_failed_logins(account.id)

            revoked_count = await self.uow.sessions.revoke_all_by_account_id(
                account.id, self.clock.now()
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    action="password_reset_completed",
                    event_metadata={"sessions_revoked": revoked_count},
                )
            )
            await self.uow.commit()

        logger.info(f"Password reset for account {account.id}, {revoked_count} sessions revoked")
        return Return.ok(
            StatusResponse(status="success", message="Password has been reset successfully")
        )
