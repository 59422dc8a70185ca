"""
Second-Factor Verifier

TOTP validation and single-use backup codes.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import UTC
from typing import List

import pyotp

from authority.app.services.clock import Clock
from authority.domain.entities import Account


@dataclass(frozen=True)
class TwoFactorEnrollment:
    secret: str
    provisioning_uri: str
    backup_codes: List[str]  # plaintext, shown once


class SecondFactorVerifier:
    """
    Business Rules:
    - Base32 TOTP secret, 30 second steps, 6 digits
    - Codes accepted within +/- 2 time steps to tolerate clock drift
    - 10 backup codes (8 hex chars), stored only as SHA-256 digests
    - A backup code is removed the moment it is accepted
    """

    def __init__(
        self,
        clock: Clock,
        issuer_name: str = "Identity Authority",
        valid_window: int = 2,
        backup_code_count: int = 10,
    ):
        self.clock = clock
        self.issuer_name = issuer_name
        self.valid_window = valid_window
        self.backup_code_count = backup_code_count

    @staticmethod
    def hash_backup_code(code: str) -> str:
        return hashlib.sha256(code.strip().lower().encode()).hexdigest()

    def generate_backup_codes(self) -> List[str]:
        return [secrets.token_hex(4) for _ in range(self.backup_code_count)]

    def enroll(self, account: Account) -> TwoFactorEnrollment:
        """Store a fresh secret and backup codes on the account without enabling 2FA."""
        secret = pyotp.random_base32()
        backup_codes = self.generate_backup_codes()

        account.two_factor_secret = secret
        account.two_factor_backup_codes = [self.hash_backup_code(c) for c in backup_codes]

        uri = pyotp.TOTP(secret).provisioning_uri(
            name=account.email, issuer_name=self.issuer_name
        )
        return TwoFactorEnrollment(secret=secret, provisioning_uri=uri, backup_codes=backup_codes)

    def verify_totp(self, secret: str, code: str) -> bool:
        code = code.strip()
        if not code.isdigit():
            return False
        return pyotp.TOTP(secret).verify(
            code,
            for_time=self.clock.now().replace(tzinfo=UTC),
            valid_window=self.valid_window,
        )

    def consume_backup_code(self, account: Account, code: str) -> bool:
        """Remove a matching backup code from the account. Returns True if one matched."""
        candidate = self.hash_backup_code(code)
        remaining = []
        matched = False
        for stored in account.two_factor_backup_codes or []:
            if not matched and hmac.compare_digest(stored, candidate):
                matched = True
                continue
            remaining.append(stored)
        if matched:
            # Reassign so the JSON column is flagged as changed
            account.two_factor_backup_codes = remaining
        return matched

    def verify(self, account: Account, code: str) -> tuple[bool, bool]:
        """
        Check a TOTP code, then fall back to the backup codes.

        Returns:
            (accepted, used_backup_code)
        """
        if not account.two_factor_secret or not code:
            return False, False
        if self.verify_totp(account.two_factor_secret, code):
            return True, False
        if self.consume_backup_code(account, code):
            return True, True
        return False, False
