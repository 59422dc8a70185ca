"""
Secret Token Codec

Generates, hashes and consumes the single-use tokens delivered by email
(password reset, email verification).
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

from authority.app.repositories.account_repository import IAccountRepository
from authority.app.services.clock import Clock
from authority.domain.entities import Account, TokenPurpose

DEFAULT_LIFETIMES: Dict[TokenPurpose, timedelta] = {
    TokenPurpose.email_verification: timedelta(hours=24),
    TokenPurpose.password_reset: timedelta(minutes=10),
}


@dataclass(frozen=True)
class IssuedToken:
    purpose: TokenPurpose
    plaintext: str  # returned once, embedded in the emailed link
    token_hash: str
    expires_at: datetime


class SecretTokenCodec:
    """
    Business Rules:
    - Plaintext is 32 random bytes (token_urlsafe), never persisted
    - Only the SHA-256 hex digest is stored on the account
    - A token is accepted only while its expiry is strictly after now
    - Consuming a token clears it (single use)
    - Issuing a token overwrites any previous token of the same purpose
    """

    def __init__(self, clock: Clock, lifetimes: Optional[Dict[TokenPurpose, timedelta]] = None):
        self.clock = clock
        self.lifetimes = dict(DEFAULT_LIFETIMES)
        if lifetimes:
            self.lifetimes.update(lifetimes)

    @staticmethod
    def hash(plaintext: str) -> str:
        return hashlib.sha256(plaintext.encode()).hexdigest()

    def issue(self, purpose: TokenPurpose) -> IssuedToken:
        plaintext = secrets.token_urlsafe(32)
        return IssuedToken(
            purpose=purpose,
            plaintext=plaintext,
            token_hash=self.hash(plaintext),
            expires_at=self.clock.now() + self.lifetimes[purpose],
        )

    def issue_for(self, account: Account, purpose: TokenPurpose) -> IssuedToken:
        """Issue a token and store its digest on the account (caller persists)."""
        issued = self.issue(purpose)
        account.set_token(purpose, issued.token_hash, issued.expires_at)
        return issued

    async def consume(
        self, accounts: IAccountRepository, plaintext: str, purpose: TokenPurpose
    ) -> Optional[Account]:
        """
        Look up the account holding this token and clear it.

        Returns:
            The matched account with the token fields cleared (caller persists),
            or None if no unexpired token of this purpose matches
        """
        if not plaintext:
            return None

        now = self.clock.now()
        account = await accounts.get_by_token_hash(purpose, self.hash(plaintext), now)
        if account is None:
            return None

        # Repeat the expiry check in process; the store predicate is authoritative
        # but a row read across a slow transaction must still be rejected.
        expires_at = (
            account.password_reset_expires_at
            if purpose == TokenPurpose.password_reset
            else account.email_verification_expires_at
        )
        if expires_at is None or not expires_at > now:
            return None

        account.clear_token(purpose)
        return account
