"""
Authentication Use Cases

Registration, login, token refresh and the emailed-token flows.
"""

from .register_use_case import RegisterUseCase
from .login_use_case import LoginUseCase
from .verify_two_factor_use_case import VerifyTwoFactorUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .resend_verification_use_case import ResendVerificationUseCase
from .verify_email_use_case import VerifyEmailUseCase
from .dtos import (
    RegisterCommand,
    RegisterResponse,
    LoginResponse,
    RefreshTokenResponse,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "LoginUseCase",
    "VerifyTwoFactorUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    "ResendVerificationUseCase",
    "VerifyEmailUseCase",
    # DTOs - Commands
    "RegisterCommand",
    # DTOs - Responses
    "RegisterResponse",
    "LoginResponse",
    "RefreshTokenResponse",
]
