"""
Deactivate Account Use Case

Self-service account removal. Accounts are never hard-deleted.
"""

import logging
from typing import Optional
from uuid import UUID

from authority.app.errors import ErrorCode
from authority.app.serializers import StatusResponse
from authority.app.services.clock import Clock
from authority.app.services.password_authenticator import ACCOUNT_LOCKED, PasswordAuthenticator
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.guards import load_active_account
from authority.domain.entities import AuditEvent
from authority.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class DeactivateAccountUseCase:
    """
    Business Rules:
    - Password confirmation required; wrong passwords count toward the
      login lockout
    - Sets is_active = False and deactivated_at; the row is kept
    - Every session of the account is revoked
    """

    def __init__(self, uow: UnitOfWork, clock: Clock, authenticator: PasswordAuthenticator):
        self.uow = uow
        self.clock = clock
        self.authenticator = authenticator

    async def execute(
        self, account_id: UUID, password: str, ip_address: Optional[str] = None
    ) -> Result[StatusResponse]:
        async with self.uow:
            result = await load_active_account(self.uow, account_id)
            if result.is_err():
                return Return.err(result.error)
            account = result.value

            if account.is_locked_at(self.clock.now()):
                return Return.err(ACCOUNT_LOCKED)

            if not await self.authenticator.verify_password(password, account.password_hash):
                await self.authenticator.register_failure(self.uow, account, ip_address)
                return Return.err(Error(ErrorCode.INCORRECT_PASSWORD, "Password is incorrect"))

            now = self.clock.now()
            account.is_active = False
            account.deactivated_at = now
            await self.uow.accounts.update(account)

            revoked_count = await self.uow.sessions.revoke_all_by_account_id(account.id, now)

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    action="account_deactivated",
                    event_metadata={"sessions_revoked": revoked_count},
                    ip_address=ip_address,
                )
            )
            await self.uow.commit()

        logger.info(f"Account {account.id} deactivated")
        return Return.ok(StatusResponse(status="success", message="Account deleted successfully"))
