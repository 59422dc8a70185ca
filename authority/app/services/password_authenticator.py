"""
Password Authenticator

Verifies passwords, applies the lockout policy and owns every write of the
password hash.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Optional

import bcrypt

from authority.app.errors import ErrorCode, ServiceUnavailableError
from authority.app.services.clock import Clock
from authority.app.services.unit_of_work import UnitOfWork
from authority.domain.entities import Account, AuditEvent
from authority.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = Error(ErrorCode.INVALID_CREDENTIALS, "Invalid credentials")
ACCOUNT_LOCKED = Error(
    ErrorCode.ACCOUNT_LOCKED,
    "Account is locked due to multiple failed login attempts. Please try again later.",
)
ACCOUNT_DISABLED = Error(
    ErrorCode.ACCOUNT_DISABLED, "Account is deactivated. Please contact support."
)


class PasswordAuthenticator:
    """
    Business Rules:
    - bcrypt with cost factor 12, run off the event loop
    - Lock check precedes password verification
    - 5 consecutive failures lock the account for 30 minutes
    - Unknown emails cost the same bcrypt work as known ones
    - A hash that does not finish in time is Unavailable, never a mismatch
    - With 2FA enabled the counters survive a correct password; only a
      completed second step clears them
    """

    def __init__(
        self,
        clock: Clock,
        rounds: int = 12,
        hash_timeout_seconds: float = 5.0,
        max_failed_attempts: int = 5,
        lockout_duration: timedelta = timedelta(minutes=30),
    ):
        self.clock = clock
        self.rounds = rounds
        self.hash_timeout_seconds = hash_timeout_seconds
        self.max_failed_attempts = max_failed_attempts
        self.lockout_duration = lockout_duration
        self._dummy_hash: Optional[bytes] = None

    async def _run(self, func, *args):
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args), timeout=self.hash_timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            logger.error("Password hashing timed out")
            raise ServiceUnavailableError("Password hashing timed out") from exc

    async def hash_password(self, password: str) -> str:
        hashed = await self._run(
            bcrypt.hashpw, password.encode("utf-8"), bcrypt.gensalt(self.rounds)
        )
        return hashed.decode("utf-8")

    async def verify_password(self, password: str, password_hash: Optional[str]) -> bool:
        if not password_hash:
            await self._burn_time(password)
            return False
        try:
            return await self._run(
                bcrypt.checkpw, password.encode("utf-8"), password_hash.encode("utf-8")
            )
        except ValueError:
            # Malformed stored hash
            logger.warning("Stored password hash could not be parsed")
            return False

    async def _burn_time(self, password: str) -> None:
        """Spend one bcrypt comparison so missing accounts are not distinguishable by timing."""
        if self._dummy_hash is None:
            self._dummy_hash = await self._run(
                bcrypt.hashpw, b"dummy_password", bcrypt.gensalt(self.rounds)
            )
        await self._run(bcrypt.checkpw, password.encode("utf-8"), self._dummy_hash)

    async def set_password(self, account: Account, password: str) -> None:
        """The only operation that writes password_hash; always re-hashes."""
        account.password_hash = await self.hash_password(password)
        account.password_changed_at = self.clock.now()

    async def register_failure(
        self, uow: UnitOfWork, account: Account, ip_address: Optional[str] = None
    ) -> bool:
        """
        Record a failed attempt and commit it.

        Returns:
            True if this failure locked the account
        """
        now = self.clock.now()
        attempts = await uow.accounts.register_failed_login(
            account.id,
            now,
            self.max_failed_attempts,
            now + self.lockout_duration,
        )
        locked = attempts >= self.max_failed_attempts

        await uow.audit_events.create(
            AuditEvent(
                account_id=account.id,
                action="account_locked" if locked else "login_failed",
                event_metadata={"failed_attempts": attempts},
                ip_address=ip_address,
            )
        )
        await uow.commit()

        if locked:
            logger.warning(f"Account {account.id} locked after {attempts} failed attempts")
        return locked

    async def authenticate(
        self,
        uow: UnitOfWork,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
    ) -> Result[Account]:
        """
        Check an email/password pair against the store.

        Args:
            uow: Open unit of work; failure counters are committed through it
            email: Normalized email
            password: Plain text password

        Returns:
            Result with the authenticated account, or Error. Counters are
            reset here unless the account still owes a second factor

        Errors:
            - INVALID_CREDENTIALS: Unknown email or wrong password
            - ACCOUNT_LOCKED: locked_until is in the future
            - ACCOUNT_DISABLED: Account deactivated
        """
        account = await uow.accounts.get_by_email(email)

        if account is None:
            await self._burn_time(password)
            return Return.err(INVALID_CREDENTIALS)

        if account.is_locked_at(self.clock.now()):
            return Return.err(ACCOUNT_LOCKED)

        if not await self.verify_password(password, account.password_hash):
            if account.password_hash:
                await self.register_failure(uow, account, ip_address)
            return Return.err(INVALID_CREDENTIALS)

        if not account.is_active:
            return Return.err(ACCOUNT_DISABLED)

        if account.two_factor_enabled:
            return Return.ok(account)

        if account.failed_login_attempts or account.is_locked or account.locked_until:
            await uow.accounts.reset_failed_logins(account.id)
            account.failed_login_attempts = 0
            account.is_locked = False
            account.locked_until = None

        return Return.ok(account)
