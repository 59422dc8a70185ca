from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from authority.domain.entities import Account, TokenPurpose


class IAccountRepository(ABC):
    """Account repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by (normalized) email address"""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[Account]:
        """Get account by username, case-insensitive"""
        pass

    @abstractmethod
    async def get_by_token_hash(
        self, purpose: TokenPurpose, token_hash: str, now: datetime
    ) -> Optional[Account]:
        """Get account whose token for purpose matches and expires strictly after now"""
        pass

    @abstractmethod
    async def create(self, account: Account) -> Account:
        """Create a new account. Raises DuplicateRecordError on unique violation."""
        pass

    @abstractmethod
    async def update(self, account: Account) -> Account:
        """Update existing account. Raises DuplicateRecordError on unique violation."""
        pass

    @abstractmethod
    async def register_failed_login(
        self, account_id: UUID, now: datetime, max_attempts: int, lock_until: datetime
    ) -> int:
        """
        Atomically record a failed authentication attempt.

        Increments failed_login_attempts (restarting at 1 when a previous lock
        has expired) and locks the account until lock_until once max_attempts
        is reached. Never touches the password hash.

        Returns the new failed attempt count.
        """
        pass

    @abstractmethod
    async def reset_failed_logins(self, account_id: UUID) -> None:
        """Atomically clear the failed attempt counter and lock state"""
        pass
