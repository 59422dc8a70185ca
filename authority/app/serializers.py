"""
Output projections

Every account or session leaving the application layer goes through one of
these models. Credential material (password hash, token digests, TOTP secret,
backup codes) has no field here and therefore can never be serialized.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from authority.domain.entities import Account, Session


class AccountView(BaseModel):
    """Public account projection"""

    id: str
    email: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_picture: Optional[str] = None
    role: str
    is_active: bool
    is_email_verified: bool
    two_factor_enabled: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None


class SessionView(BaseModel):
    """Public session projection"""

    id: str
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime
    expires_at: datetime
    current: bool = False


class StatusResponse(BaseModel):
    """Fixed acknowledgement body"""

    status: str
    message: str


def serialize_account(account: Account) -> AccountView:
    return AccountView(
        id=str(account.id),
        email=account.email,
        username=account.username,
        first_name=account.first_name,
        last_name=account.last_name,
        profile_picture=account.profile_picture,
        role=account.role.value,
        is_active=account.is_active,
        is_email_verified=account.is_email_verified,
        two_factor_enabled=account.two_factor_enabled,
        created_at=account.created_at,
        last_login_at=account.last_login_at,
    )


def serialize_session(session: Session, current_token_hash: Optional[str] = None) -> SessionView:
    return SessionView(
        id=str(session.id),
        user_agent=session.user_agent,
        ip_address=session.ip_address,
        created_at=session.created_at,
        expires_at=session.expires_at,
        current=current_token_hash is not None and session.token_hash == current_token_hash,
    )
