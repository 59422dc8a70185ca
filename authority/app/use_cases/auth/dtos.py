"""
Authentication Use Case DTOs (Data Transfer Objects)

Command and Response classes for the auth domain.
"""

from typing import Optional

from pydantic import BaseModel

from authority.app.serializers import AccountView


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    """Validated registration intent"""

    email: str
    password: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class RegisterResponse(BaseModel):
    """Response for registration use case"""

    account: AccountView
    access_token: str
    refresh_token: str
    session_id: str


class LoginResponse(BaseModel):
    """
    Response for login and two-factor completion.

    Either requires_two_factor is set and only two_factor_token is present,
    or the full token set is returned.
    """

    requires_two_factor: bool = False
    two_factor_token: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    session_id: Optional[str] = None
    account: Optional[AccountView] = None
    backup_code_used: Optional[bool] = None


class RefreshTokenResponse(BaseModel):
    """Response for refresh token use case"""

    access_token: str
