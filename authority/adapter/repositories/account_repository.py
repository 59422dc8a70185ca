from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, case, func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from authority.app.errors import DuplicateRecordError
from authority.app.repositories.account_repository import IAccountRepository
from authority.domain.entities import Account, TokenPurpose


class AccountRepository(IAccountRepository):
    """Account repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, account_id: UUID) -> Optional[Account]:
        """Get account by ID"""
        stmt = select(Account).where(Account.id == account_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_email(self, email: str) -> Optional[Account]:
        """Get account by (normalized) email address"""
        stmt = select(Account).where(Account.email == email)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_username(self, username: str) -> Optional[Account]:
        """Get account by username, case-insensitive"""
        stmt = select(Account).where(func.lower(Account.username) == username.lower())
        result = await self.session.exec(stmt)
        return result.first()

    async def get_by_token_hash(
        self, purpose: TokenPurpose, token_hash: str, now: datetime
    ) -> Optional[Account]:
        """Get account whose token for purpose matches and has not expired"""
        if purpose == TokenPurpose.password_reset:
            stmt = select(Account).where(
                Account.password_reset_token == token_hash,
                Account.password_reset_expires_at > now,
            )
        else:
            stmt = select(Account).where(
                Account.email_verification_token == token_hash,
                Account.email_verification_expires_at > now,
            )
        result = await self.session.exec(stmt)
        return result.first()

    async def create(self, account: Account) -> Account:
        """Create a new account"""
        self.session.add(account)
        await self._flush()
        await self.session.refresh(account)
        return account

    async def update(self, account: Account) -> Account:
        """Update existing account"""
        self.session.add(account)
        await self._flush()
        await self.session.refresh(account)
        return account

    async def register_failed_login(
        self, account_id: UUID, now: datetime, max_attempts: int, lock_until: datetime
    ) -> int:
        """
        Record a failed attempt in a single UPDATE statement.

        The new count and lock state are computed by the database from the
        current row, so concurrent failures cannot lose increments.
        """
        lock_expired = and_(Account.locked_until.is_not(None), Account.locked_until <= now)
        attempts = case(
            (lock_expired, 1), else_=Account.failed_login_attempts + 1
        )
        reached = attempts >= max_attempts

        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(
                failed_login_attempts=attempts,
                is_locked=case((reached, True), else_=False),
                locked_until=case(
                    (reached, lock_until),
                    (lock_expired, None),
                    else_=Account.locked_until,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()

        count_stmt = select(Account.failed_login_attempts).where(Account.id == account_id)
        result = await self.session.execute(count_stmt)
        return result.scalar_one()

    async def reset_failed_logins(self, account_id: UUID) -> None:
        """Clear the failed attempt counter and lock state"""
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(failed_login_attempts=0, is_locked=False, locked_until=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            message = str(exc.orig).lower()
            field = "username" if "username" in message else "email"
            raise DuplicateRecordError(field) from exc
