"""
Two-Factor Use Cases

TOTP enrollment and removal.
"""

from .setup_two_factor_use_case import SetupTwoFactorUseCase
from .enable_two_factor_use_case import EnableTwoFactorUseCase
from .disable_two_factor_use_case import DisableTwoFactorUseCase
from .dtos import TwoFactorSetupResponse

__all__ = [
    "SetupTwoFactorUseCase",
    "EnableTwoFactorUseCase",
    "DisableTwoFactorUseCase",
    "TwoFactorSetupResponse",
]
