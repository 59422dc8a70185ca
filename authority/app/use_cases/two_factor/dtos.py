"""
Two-Factor Use Case DTOs
"""

from typing import List

from pydantic import BaseModel


class TwoFactorSetupResponse(BaseModel):
    """
    Enrollment material, shown exactly once.

    The provisioning URI is what an authenticator app scans; rendering it as
    a QR code is left to the client.
    """

    secret: str
    provisioning_uri: str
    backup_codes: List[str]
