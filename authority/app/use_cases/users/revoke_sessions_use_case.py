"""
Revoke Sessions Use Case

Session revocation for the signed-in account.
"""

from typing import Optional
from uuid import UUID

from authority.app.errors import ErrorCode
from authority.app.services.clock import Clock
from authority.app.services.token_issuer import TokenIssuer
from authority.app.services.unit_of_work import UnitOfWork
from authority.domain.entities import AuditEvent
from authority.libs.result import Error, Result, Return
from .dtos import RevokeSessionsResponse


class RevokeSessionsUseCase:
    """
    Use case for revoking the caller's own sessions.

    Business Rules:
    - A session of another account is reported as not found
    - Revoked or expired sessions are reported as not found
    - Revocation is audit-logged
    """

    def __init__(self, uow: UnitOfWork, clock: Clock):
        self.uow = uow
        self.clock = clock

    async def revoke_one(
        self, account_id: UUID, session_id: UUID
    ) -> Result[RevokeSessionsResponse]:
        """
        Errors:
            - SESSION_NOT_FOUND
        """
        async with self.uow:
            now = self.clock.now()
            session = await self.uow.sessions.get_by_id(session_id)
            if session is None or session.account_id != account_id or not session.is_valid(now):
                return Return.err(Error(ErrorCode.SESSION_NOT_FOUND, "Session not found"))

            await self.uow.sessions.revoke_by_id(session_id, now)

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account_id,
                    action="revoke_session",
                    event_metadata={"session_id": str(session_id)},
                )
            )
            await self.uow.commit()

        return Return.ok(
            RevokeSessionsResponse(
                status="success", message="Session revoked successfully", revoked_count=1
            )
        )

    async def revoke_all_except(
        self, account_id: UUID, keep_refresh_token: Optional[str] = None
    ) -> Result[RevokeSessionsResponse]:
        """
        Revoke every session of the account except the one holding
        keep_refresh_token (all of them when it is None).
        """
        keep_hash = TokenIssuer.hash_token(keep_refresh_token) if keep_refresh_token else None

        async with self.uow:
            count = await self.uow.sessions.revoke_all_except(
                account_id, keep_hash, self.clock.now()
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    account_id=account_id,
                    action="revoke_other_sessions",
                    event_metadata={"revoked_count": count},
                )
            )
            await self.uow.commit()

        return Return.ok(
            RevokeSessionsResponse(
                status="success",
                message="All other sessions revoked successfully",
                revoked_count=count,
            )
        )
