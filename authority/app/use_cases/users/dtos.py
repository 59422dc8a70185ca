"""
User Use Case DTOs

Self-service account and session management.
"""

from typing import List, Optional

from pydantic import BaseModel

from authority.app.serializers import SessionView


class ChangePasswordCommand(BaseModel):
    current_password: str
    new_password: str
    # Session to keep signed in; every other session is revoked
    refresh_token: Optional[str] = None


class UpdateProfileCommand(BaseModel):
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class SessionListResponse(BaseModel):
    sessions: List[SessionView]


class RevokeSessionsResponse(BaseModel):
    status: str
    message: str
    revoked_count: int
