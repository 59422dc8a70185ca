from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from authority.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[Session]:
        """Get session by the SHA-256 digest of its refresh token"""
        pass

    @abstractmethod
    async def list_active_by_account_id(
        self, account_id: UUID, now: datetime
    ) -> List[Session]:
        """Non-revoked sessions expiring after now, newest first"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def revoke_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Revoke a specific session. Returns True if a live row was revoked."""
        pass

    @abstractmethod
    async def revoke_by_token_hash(
        self, account_id: UUID, token_hash: str, now: datetime
    ) -> bool:
        """Revoke the account's session matching token_hash. Returns True if revoked."""
        pass

    @abstractmethod
    async def revoke_all_by_account_id(self, account_id: UUID, now: datetime) -> int:
        """Revoke all sessions for an account. Returns count of revoked sessions."""
        pass

    @abstractmethod
    async def revoke_all_except(
        self, account_id: UUID, keep_token_hash: Optional[str], now: datetime
    ) -> int:
        """Revoke all sessions for an account except the one matching keep_token_hash."""
        pass
