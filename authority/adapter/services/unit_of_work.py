from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession

from authority.adapter.repositories.account_repository import AccountRepository
from authority.adapter.repositories.audit_event_repository import AuditEventRepository
from authority.adapter.repositories.session_repository import SessionRepository
from authority.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.accounts = AccountRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()

    async def ping(self):
        await self.session.execute(text("SELECT 1"))
