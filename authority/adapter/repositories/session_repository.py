from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from authority.app.repositories.session_repository import ISessionRepository
from authority.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_token_hash(self, token_hash: str) -> Optional[Session]:
        """Get session by refresh token digest"""
        stmt = select(Session).where(Session.token_hash == token_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active_by_account_id(
        self, account_id: UUID, now: datetime
    ) -> List[Session]:
        """Get live sessions for an account, newest first"""
        stmt = (
            select(Session)
            .where(
                Session.account_id == account_id,
                Session.revoked == False,
                Session.expires_at > now,
            )
            .order_by(Session.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def revoke_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked == False)
            .values(revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_by_token_hash(
        self, account_id: UUID, token_hash: str, now: datetime
    ) -> bool:
        """Revoke the account's session for a refresh token digest"""
        stmt = (
            update(Session)
            .where(
                Session.account_id == account_id,
                Session.token_hash == token_hash,
                Session.revoked == False,
            )
            .values(revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_by_account_id(self, account_id: UUID, now: datetime) -> int:
        """Revoke all active sessions for an account"""
        stmt = (
            update(Session)
            .where(Session.account_id == account_id, Session.revoked == False)
            .values(revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def revoke_all_except(
        self, account_id: UUID, keep_token_hash: Optional[str], now: datetime
    ) -> int:
        """Revoke all sessions for an account except the one being kept"""
        conditions = [Session.account_id == account_id, Session.revoked == False]
        if keep_token_hash is not None:
            conditions.append(Session.token_hash != keep_token_hash)
        stmt = (
            update(Session)
            .where(*conditions)
            .values(revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
