"""
Account Entity

Represents a person who can authenticate against the authority.
"""

from datetime import UTC, datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from .enums import AccountRole, TokenPurpose


class Account(SQLModel, table=True):
    """
    Account entity - credential, lockout, verification and second-factor state.

    Business Rules:
    - Email is unique and stored lower-cased
    - Password stored as bcrypt hash (cost factor 12); nullable for
      external-identity accounts
    - Locked after 5 consecutive failed attempts for 30 minutes
    - One-time tokens are stored as SHA-256 digests, never in plaintext
    - Backup codes are stored as SHA-256 digests and removed on use
    - Never hard-deleted: deactivation clears is_active
    """

    __tablename__ = "accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    username: Optional[str] = Field(default=None, unique=True, index=True, max_length=30)
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    profile_picture: Optional[str] = Field(default=None, max_length=500)  # Image URL

    role: AccountRole = Field(default=AccountRole.user)
    is_active: bool = Field(default=True)

    # Credential
    password_hash: Optional[str] = Field(default=None, max_length=60)  # Bcrypt output
    password_changed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Lockout
    failed_login_attempts: int = Field(default=0)
    is_locked: bool = Field(default=False)
    locked_until: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Email verification
    is_email_verified: bool = Field(default=False)
    email_verification_token: Optional[str] = Field(
        default=None, index=True, max_length=64
    )
    email_verification_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Password reset
    password_reset_token: Optional[str] = Field(default=None, index=True, max_length=64)
    password_reset_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Second factor
    two_factor_secret: Optional[str] = Field(default=None, max_length=64)
    two_factor_enabled: bool = Field(default=False)
    two_factor_backup_codes: List[str] = Field(
        default_factory=list, sa_column=Column(JSON)
    )

    # Timestamps
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC).replace(tzinfo=None),
        sa_column=Column(DateTime),
    )
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    deactivated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_account_locked_until", "locked_until"),
        Index("idx_account_reset_expires_at", "password_reset_expires_at"),
    )

    def is_locked_at(self, now: datetime) -> bool:
        """A lock only holds while locked_until is in the future."""
        return self.locked_until is not None and self.locked_until > now

    def set_token(self, purpose: TokenPurpose, token_hash: str, expires_at: datetime) -> None:
        # Overwrites any previous token of the same purpose
        if purpose == TokenPurpose.password_reset:
            self.password_reset_token = token_hash
            self.password_reset_expires_at = expires_at
        else:
            self.email_verification_token = token_hash
            self.email_verification_expires_at = expires_at

    def clear_token(self, purpose: TokenPurpose) -> None:
        if purpose == TokenPurpose.password_reset:
            self.password_reset_token = None
            self.password_reset_expires_at = None
        else:
            self.email_verification_token = None
            self.email_verification_expires_at = None

    def clear_two_factor(self) -> None:
        """Secret, flag and backup codes are only ever cleared together."""
        self.two_factor_secret = None
        self.two_factor_enabled = False
        self.two_factor_backup_codes = []
