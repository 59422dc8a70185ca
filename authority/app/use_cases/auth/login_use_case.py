"""
Login Use Case

Password authentication, followed either by token issuance or by a
short-lived two-factor challenge.
"""

from typing import Optional

from authority.app.serializers import serialize_account
from authority.app.services.clock import Clock
from authority.app.services.password_authenticator import PasswordAuthenticator
from authority.app.services.token_issuer import ClientInfo, TokenIssuer
from authority.app.services.unit_of_work import UnitOfWork
from authority.domain.entities import AuditEvent
from authority.domain.password_policy import normalize_email
from authority.libs.result import Result, Return
from .dtos import LoginResponse


class LoginUseCase:
    """
    Use case for password login.

    Business Rules:
    - Lockout and failure counting are applied by the PasswordAuthenticator
    - A correct password clears the failure counter
    - Accounts with 2FA enabled get a 5 minute two-factor token instead of
      a session; tokens are only issued after the code is verified
    - Otherwise a session is created and last_login_at updated
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
        self, email: str, password: str, client: Optional[ClientInfo] = None
    ) -> Result[LoginResponse]:
        """
        Execute login use case.

        Returns:
            Result with LoginResponse (tokens, or a two-factor challenge), or Error

        Errors:
            - INVALID_CREDENTIALS: Unknown email or wrong password
            - ACCOUNT_LOCKED: Too many failed attempts
            - ACCOUNT_DISABLED: Account deactivated
        """
        client = client or ClientInfo()

        async with self.uow:
            result = await self.authenticator.authenticate(
                self.uow, normalize_email(email), password, client.ip_address
            )
            if result.is_err():
                return Return.err(result.error)

            account = result.value

            if account.two_factor_enabled:
                await self.uow.commit()
                return Return.ok(
                    LoginResponse(
                        requires_two_factor=True,
                        two_factor_token=self.token_issuer.issue_two_factor_token(account),
                    )
                )

            pair = await self.token_issuer.issue_token_pair(self.uow.sessions, account, client)

            account.last_login_at = self.clock.now()
            await self.uow.accounts.update(account)

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account.id,
                    action="login",
                    event_metadata={"session_id": str(pair.session.id)},
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
                )
            )
