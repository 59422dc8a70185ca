"""
Identity Authority Domain Entities

All domain entities organized by model.
"""

from .enums import AccountRole, TokenPurpose, TokenType
from .account import Account
from .session import Session
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "AccountRole",
    "TokenPurpose",
    "TokenType",
    # Entities
    "Account",
    "Session",
    "AuditEvent",
]
