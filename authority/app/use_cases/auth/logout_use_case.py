"""
Logout Use Case

Revokes the session behind the caller's refresh token.
"""

from typing import Optional
from uuid import UUID

from authority.app.serializers import StatusResponse
from authority.app.services.clock import Clock
from authority.app.services.token_issuer import TokenIssuer
from authority.app.services.unit_of_work import UnitOfWork
from authority.domain.entities import AuditEvent
from authority.libs.result import Result, Return

LOGGED_OUT = StatusResponse(status="success", message="Logged out successfully")


class LogoutUseCase:
    """
    Use case for logout.

    Business Rules:
    - Only a session owned by the caller can be revoked this way
    - Idempotent: an unknown or already revoked token still succeeds
    """

    def __init__(self, uow: UnitOfWork, clock: Clock, token_issuer: TokenIssuer):
        self.uow = uow
        self.clock = clock
        self.token_issuer = token_issuer

    async def execute(
        self, account_id: UUID, refresh_token: str, ip_address: Optional[str] = None
    ) -> Result[StatusResponse]:
        async with self.uow:
            revoked = await self.uow.sessions.revoke_by_token_hash(
                account_id, self.token_issuer.hash_token(refresh_token), self.clock.now()
            )
            if revoked:
                await self.uow.audit_events.create(
                    AuditEvent(account_id=account_id, action="logout", ip_address=ip_address)
                )
            await self.uow.commit()

        return Return.ok(LOGGED_OUT)
