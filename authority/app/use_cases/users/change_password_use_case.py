"""
Change Password Use Case
"""

import logging
from typing import Optional
from uuid import UUID

from authority.app.errors import ErrorCode
from authority.app.serializers import StatusResponse
from authority.app.services.clock import Clock
from authority.app.services.password_authenticator import ACCOUNT_LOCKED, PasswordAuthenticator
from authority.app.services.token_issuer import TokenIssuer
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.guards import load_active_account
from authority.domain.entities import AuditEvent
from authority.domain.password_policy import password_problem
from authority.libs.result import Error, Result, Return
from .dtos import ChangePasswordCommand

logger = logging.getLogger(__name__)


class ChangePasswordUseCase:
    """
    Use case for an authenticated password change.

    Business Rules:
    - Current password must be correct; a wrong one counts toward the
      login lockout, and a locked account cannot change its password
    - New password must satisfy the policy and differ from the current one
    - Every other session is revoked; the session of the given refresh
      token (if any) stays signed in
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        authenticator: PasswordAuthenticator,
        token_issuer: TokenIssuer,
    ):
        self.uow = uow
        self.clock = clock
        self.authenticator = authenticator
        self.token_issuer = token_issuer

    async def execute(
        self,
        account_id: UUID,
        command: ChangePasswordCommand,
        ip_address: Optional[str] = None,
    ) -> Result[StatusResponse]:
        """
        Errors:
            - INVALID_INPUT: Weak password, or same as the current one
            - INCORRECT_PASSWORD: Current password wrong
            - ACCOUNT_LOCKED: Too many failed attempts
        """
        problem = password_problem(command.new_password)
        if problem is None and command.new_password == command.current_password:
            problem = "New password must be different from the current password"
        if problem is not None:
            return Return.err(Error(ErrorCode.INVALID_INPUT, problem))

        async with self.uow:
            result = await load_active_account(self.uow, account_id)
            if result.is_err():
                return Return.err(result.error)
            account = result.value

            if account.is_locked_at(self.clock.now()):
                return Return.err(ACCOUNT_LOCKED)

            if not await self.authenticator.verify_password(
                command.current_password, account.password_hash
            ):
                await self.authenticator.register_failure(self.uow, account, ip_address)
                return Return.err(
                    Error(ErrorCode.INCORRECT_PASSWORD, "Current password is incorrect")
                )

            await self.authenticator.set_password(account, command.new_password)
            await self.uow.accounts.update(account)
            if account.failed_login_attempts or account.locked_until:
                await self.uow.accounts.reset_failed_logins(account.id)

            keep_hash = (
                self.token_issuer.hash_token(command.refresh_token)
                if command.refresh_token
                else None
            )
            revoked_count = await self.uow.sessions.revoke_all_except(
                account.id, keep_hash, self.clock.now()
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    action="password_changed",
                    event_metadata={"sessions_revoked": revoked_count},
                    ip_address=ip_address,
                )
            )
            await self.uow.commit()

        logger.info(f"Password changed for account {account.id}")
        return Return.ok(
            StatusResponse(status="success", message="Password updated successfully")
        )
