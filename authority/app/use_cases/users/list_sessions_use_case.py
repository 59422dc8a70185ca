from typing import Optional
from uuid import UUID

from authority.app.serializers import serialize_session
from authority.app.services.clock import Clock
from authority.app.services.token_issuer import TokenIssuer
from authority.app.services.unit_of_work import UnitOfWork
from authority.libs.result import Result, Return
from .dtos import SessionListResponse


class ListSessionsUseCase:
    """
    Lists the caller's live sessions, newest first.

    When the caller names their own refresh token, that session is flagged
    as current.
    """

    def __init__(self, uow: UnitOfWork, clock: Clock):
        self.uow = uow
        self.clock = clock

    async def execute(
        self, account_id: UUID, current_refresh_token: Optional[str] = None
    ) -> Result[SessionListResponse]:
        current_hash = (
            TokenIssuer.hash_token(current_refresh_token) if current_refresh_token else None
        )
        async with self.uow:
            sessions = await self.uow.sessions.list_active_by_account_id(
                account_id, self.clock.now()
            )
            return Return.ok(
                SessionListResponse(
                    sessions=[serialize_session(s, current_hash) for s in sessions]
                )
            )
