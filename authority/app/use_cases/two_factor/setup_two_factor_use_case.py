"""
Setup Two-Factor Use Case

Generates a TOTP secret and backup codes without enabling 2FA.
"""

from uuid import UUID

from authority.app.errors import ErrorCode
from authority.app.services.second_factor import SecondFactorVerifier
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.guards import load_active_account
from authority.domain.entities import AuditEvent
from authority.libs.result import Error, Result, Return
from .dtos import TwoFactorSetupResponse

ALREADY_ENABLED = Error(
    ErrorCode.TWO_FACTOR_ALREADY_ENABLED, "Two-factor authentication is already enabled"
)


class SetupTwoFactorUseCase:
    """
    Business Rules:
    - Rejected while 2FA is enabled
    - Repeating setup before enabling replaces the pending secret and codes
    - 2FA is only switched on by a confirmed code (EnableTwoFactorUseCase)
    """

    def __init__(self, uow: UnitOfWork, verifier: SecondFactorVerifier):
        self.uow = uow
        self.verifier = verifier

    async def execute(self, account_id: UUID) -> Result[TwoFactorSetupResponse]:
        async with self.uow:
            result = await load_active_account(self.uow, account_id)
            if result.is_err():
                return Return.err(result.error)
            account = result.value

            if account.two_factor_enabled:
                return Return.err(ALREADY_ENABLED)

            enrollment = self.verifier.enroll(account)
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(account_id=account.id, action="two_factor_setup")
            )
            await self.uow.commit()

            return Return.ok(
                TwoFactorSetupResponse(
                    secret=enrollment.secret,
                    provisioning_uri=enrollment.provisioning_uri,
                    backup_codes=enrollment.backup_codes,
                )
            )
