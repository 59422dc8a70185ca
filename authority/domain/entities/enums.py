"""
Identity Authority Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class AccountRole(str, Enum):
    """Account role"""

    user = "user"
    admin = "admin"


class TokenPurpose(str, Enum):
    """Purpose of a single-use secret token delivered by email"""

    password_reset = "password_reset"
    email_verification = "email_verification"


class TokenType(str, Enum):
    """Value of the `type` claim carried by every signed token"""

    access = "access"
    refresh = "refresh"
    two_factor = "2fa"
