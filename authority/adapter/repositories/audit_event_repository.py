from sqlmodel.ext.asyncio.session import AsyncSession

from authority.app.repositories.audit_event_repository import IAuditEventRepository
from authority.domain.entities import AuditEvent


class AuditEventRepository(IAuditEventRepository):
    """AuditEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, event: AuditEvent) -> AuditEvent:
        """Append an audit event"""
        self.session.add(event)
        await self.session.flush()
        return event
