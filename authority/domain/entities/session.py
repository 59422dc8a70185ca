"""
Session Entity

Stores issued refresh tokens for authentication.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel


class Session(SQLModel, table=True):
    """
    Session entity - one row per issued refresh token.

    Business Rules:
    - Only the SHA-256 digest of the signed refresh token is stored
    - Valid iff not revoked and expires_at is in the future
    - Mutated only to set revoked; never rotated
    - Expires after 7 days (same expiry as the token itself)
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    account_id: UUID = Field(foreign_key="accounts.id", nullable=False, index=True)

    token_hash: str = Field(unique=True, max_length=64)  # SHA-256 output
    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Creation metadata
    user_agent: Optional[str] = Field(default=None, max_length=512)
    ip_address: Optional[str] = Field(default=None, max_length=64)

    # Timestamps
    created_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_account_revoked", "account_id", "revoked"),
    )

    def is_valid(self, now: datetime) -> bool:
        return not self.revoked and now < self.expires_at
