"""
Enable Two-Factor Use Case

Switches 2FA on once the user proves their authenticator produces valid codes.
"""

from uuid import UUID

from authority.app.errors import ErrorCode
from authority.app.serializers import StatusResponse
from authority.app.services.second_factor import SecondFactorVerifier
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.guards import load_active_account
from authority.domain.entities import AuditEvent
from authority.libs.result import Error, Result, Return
from .setup_two_factor_use_case import ALREADY_ENABLED


class EnableTwoFactorUseCase:
    """
    Business Rules:
    - Setup must have run first (a secret is stored)
    - Only a TOTP code is accepted here, never a backup code
    """

    def __init__(self, uow: UnitOfWork, verifier: SecondFactorVerifier):
        self.uow = uow
        self.verifier = verifier

    async def execute(self, account_id: UUID, code: str) -> Result[StatusResponse]:
        """
        Errors:
            - TWO_FACTOR_ALREADY_ENABLED
            - TWO_FACTOR_NOT_INITIATED: No pending secret
            - INVALID_TWO_FACTOR_CODE: Code does not match the secret
        """
        async with self.uow:
            result = await load_active_account(self.uow, account_id)
            if result.is_err():
                return Return.err(result.error)
            account = result.value

            if account.two_factor_enabled:
                return Return.err(ALREADY_ENABLED)
            if not account.two_factor_secret:
                return Return.err(
                    Error(
                        ErrorCode.TWO_FACTOR_NOT_INITIATED,
                        "Two-factor setup has not been started",
                    )
                )
            if not self.verifier.verify_totp(account.two_factor_secret, code):
                return Return.err(
                    Error(ErrorCode.INVALID_TWO_FACTOR_CODE, "Invalid two-factor code")
                )

            account.two_factor_enabled = True
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(account_id=account.id, action="two_factor_enabled")
            )
            await self.uow.commit()

        return Return.ok(
            StatusResponse(status="success", message="Two-factor authentication enabled")
        )
