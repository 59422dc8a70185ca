"""
Refresh Token Use Case

Exchanges a refresh token for a new access token.
"""

from authority.app.errors import ErrorCode
from authority.app.services.clock import Clock
from authority.app.services.password_authenticator import ACCOUNT_DISABLED
from authority.app.services.token_issuer import TokenIssuer
from authority.app.services.unit_of_work import UnitOfWork
from authority.libs.result import Error, Result, Return
from .dtos import RefreshTokenResponse

INVALID_REFRESH_TOKEN = Error(ErrorCode.INVALID_REFRESH_TOKEN, "Invalid or expired refresh token")


class RefreshTokenUseCase:
    """
    Use case for access token refresh.

    Business Rules:
    - Signature, type and expiry of the refresh token are checked first
    - The exact token must belong to a session that is neither revoked nor expired
    - The owning account must still be active
    - Refresh tokens are not rotated; the session is left untouched
    """

    def __init__(self, uow: UnitOfWork, clock: Clock, token_issuer: TokenIssuer):
        self.uow = uow
        self.clock = clock
        self.token_issuer = token_issuer

    async def execute(self, refresh_token: str) -> Result[RefreshTokenResponse]:
        """
        Errors:
            - INVALID_REFRESH_TOKEN: Bad token, or no live session for it
            - ACCOUNT_DISABLED: Owner deactivated
        """
        payload = self.token_issuer.decode_refresh_token(refresh_token)
        if payload is None:
            return Return.err(INVALID_REFRESH_TOKEN)

        async with self.uow:
            session = await self.uow.sessions.get_by_token_hash(
                self.token_issuer.hash_token(refresh_token)
            )
            if session is None or not session.is_valid(self.clock.now()):
                return Return.err(INVALID_REFRESH_TOKEN)
            if str(session.account_id) != payload.get("sub"):
                return Return.err(INVALID_REFRESH_TOKEN)

            account = await self.uow.accounts.get_by_id(session.account_id)
            if account is None:
                return Return.err(INVALID_REFRESH_TOKEN)
            if not account.is_active:
                return Return.err(ACCOUNT_DISABLED)

            return Return.ok(
                RefreshTokenResponse(access_token=self.token_issuer.issue_access_token(account))
            )
