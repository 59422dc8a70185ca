"""
Disable Two-Factor Use Case
"""

from typing import Optional
from uuid import UUID

from authority.app.errors import ErrorCode
from authority.app.serializers import StatusResponse
from authority.app.services.clock import Clock
from authority.app.services.password_authenticator import ACCOUNT_LOCKED, PasswordAuthenticator
from authority.app.services.second_factor import SecondFactorVerifier
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.guards import load_active_account
from authority.domain.entities import AuditEvent
from authority.libs.result import Error, Result, Return


class DisableTwoFactorUseCase:
    """
    Business Rules:
    - Requires a current TOTP code or an unused backup code
    - Wrong codes count toward the login lockout; a locked account cannot disable
    - Secret, enabled flag and backup codes are cleared together
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        authenticator: PasswordAuthenticator,
        verifier: SecondFactorVerifier,
    ):
        self.uow = uow
        self.clock = clock
        self.authenticator = authenticator
        self.verifier = verifier

    async def execute(
        self, account_id: UUID, code: str, ip_address: Optional[str] = None
    ) -> Result[StatusResponse]:
        """
        Errors:
            - TWO_FACTOR_NOT_ENABLED
            - ACCOUNT_LOCKED
            - INVALID_TWO_FACTOR_CODE
        """
        async with self.uow:
            result = await load_active_account(self.uow, account_id)
            if result.is_err():
                return Return.err(result.error)
            account = result.value

            if not account.two_factor_enabled:
                return Return.err(
                    Error(ErrorCode.TWO_FACTOR_NOT_ENABLED, "Two-factor authentication is not enabled")
                )

            if account.is_locked_at(self.clock.now()):
                return Return.err(ACCOUNT_LOCKED)

            accepted, _ = self.verifier.verify(account, code)
            if not accepted:
                await self.authenticator.register_failure(self.uow, account, ip_address)
                return Return.err(
                    Error(ErrorCode.INVALID_TWO_FACTOR_CODE, "Invalid two-factor code")
                )

            account.clear_two_factor()
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(account_id=account.id, action="two_factor_disabled", ip_address=ip_address)
            )
            await self.uow.commit()

        return Return.ok(
            StatusResponse(status="success", message="Two-factor authentication disabled")
        )
