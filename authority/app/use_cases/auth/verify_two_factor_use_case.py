"""
Verify Two-Factor Use Case

Completes a login that was interrupted by a two-factor challenge.
"""

from typing import Optional

from authority.app.errors import ErrorCode
from authority.app.serializers import serialize_account
from authority.app.services.clock import Clock
from authority.app.services.password_authenticator import (
    ACCOUNT_LOCKED,
    PasswordAuthenticator,
)
from authority.app.services.second_factor import SecondFactorVerifier
from authority.app.services.token_issuer import ClientInfo, TokenIssuer
from authority.app.services.unit_of_work import UnitOfWork
from authority.app.use_cases.guards import load_active_account
from authority.domain.entities import AuditEvent
from authority.libs.result import Error, Result, Return
from .dtos import LoginResponse

INVALID_CHALLENGE = Error(ErrorCode.INVALID_TOKEN, "Invalid or expired two-factor token")
INVALID_CODE = Error(ErrorCode.INVALID_TWO_FACTOR_CODE, "Invalid two-factor code")


class VerifyTwoFactorUseCase:
    """
    Use case for two-factor login completion.

    Business Rules:
    - Only a token of type "2fa" is accepted, and only within its 5 minutes
    - A TOTP code or an unused backup code completes the login
    - A backup code is consumed in the same transaction as the new session
    - Wrong codes count toward the password lockout; a locked account
      cannot complete the challenge
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        authenticator: PasswordAuthenticator,
        verifier: SecondFactorVerifier,
        token_issuer: TokenIssuer,
    ):
        self.uow = uow
        self.clock = clock
        self.authenticator = authenticator
        self.verifier = verifier
        self.token_issuer = token_issuer

    async def execute(
        self, two_factor_token: str, code: str, client: Optional[ClientInfo] = None
    ) -> Result[LoginResponse]:
        """
        Execute two-factor verification.

        Errors:
            - INVALID_TOKEN: Challenge token missing, expired or of another type
            - ACCOUNT_LOCKED: Account locked meanwhile
            - ACCOUNT_DISABLED: Account deactivated
            - TWO_FACTOR_NOT_ENABLED: 2FA was disabled after the challenge
            - INVALID_TWO_FACTOR_CODE: Neither TOTP nor a backup code matched
        """
        payload = self.token_issuer.decode_two_factor_token(two_factor_token)
        if payload is None:
            return Return.err(INVALID_CHALLENGE)

        client = client or ClientInfo()

        async with self.uow:
            result = await load_active_account(self.uow, payload.get("sub"))
            if result.is_err():
                return Return.err(result.error)
            account = result.value

            if account.is_locked_at(self.clock.now()):
                return Return.err(ACCOUNT_LOCKED)

            if not account.two_factor_enabled:
                return Return.err(
                    Error(ErrorCode.TWO_FACTOR_NOT_ENABLED, "Two-factor authentication is not enabled")
                )

            accepted, used_backup_code = self.verifier.verify(account, code)
            if not accepted:
                await self.authenticator.register_failure(self.uow, account, client.ip_address)
                return Return.err(INVALID_CODE)

            pair = await self.token_issuer.issue_token_pair(self.uow.sessions, account, client)

            account.last_login_at = self.clock.now()
            await self.uow.accounts.update(account)
            if account.failed_login_attempts or account.is_locked or account.locked_until:
                await self.uow.accounts.reset_failed_logins(account.id)

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    action="login",
                    event_metadata={
                        "session_id": str(pair.session.id),
                        "two_factor": True,
                        "backup_code_used": used_backup_code,
                    },
                    ip_address=client.ip_address,
                )
            )
            await self.uow.commit()

            return Return.ok(
                LoginResponse(
                    access_token=pair.access_token,
                    refresh_token=pair.refresh_token,
                    session_id=str(pair.session.id),
                    account=serialize_account(account),
                    backup_code_used=used_backup_code,
                )
            )
