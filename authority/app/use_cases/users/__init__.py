"""
User Use Cases

Self-service account, profile and session management.
"""

from .get_current_account_use_case import GetCurrentAccountUseCase
from .change_password_use_case import ChangePasswordUseCase
from .update_profile_use_case import UpdateProfileUseCase
from .update_profile_picture_use_case import UpdateProfilePictureUseCase
from .deactivate_account_use_case import DeactivateAccountUseCase
from .list_sessions_use_case import ListSessionsUseCase
from .revoke_sessions_use_case import RevokeSessionsUseCase
from .dtos import (
    ChangePasswordCommand,
    UpdateProfileCommand,
    SessionListResponse,
    RevokeSessionsResponse,
)

__all__ = [
    # Use Cases
    "GetCurrentAccountUseCase",
    "ChangePasswordUseCase",
    "UpdateProfileUseCase",
    "UpdateProfilePictureUseCase",
    "DeactivateAccountUseCase",
    "ListSessionsUseCase",
    "RevokeSessionsUseCase",
    # DTOs
    "ChangePasswordCommand",
    "UpdateProfileCommand",
    "SessionListResponse",
    "RevokeSessionsResponse",
]
