from datetime import UTC
from urllib.parse import parse_qs, urlparse

import pyotp

from tests.utils.factories import make_account


def current_code(secret, clock, steps=0):
    return pyotp.TOTP(secret).at(clock.now().replace(tzinfo=UTC), steps)


def test_enroll_stores_secret_and_hashed_codes(verifier):
    account = make_account(password=None)

    enrollment = verifier.enroll(account)

    assert account.two_factor_secret == enrollment.secret
    assert account.two_factor_enabled is False
    assert len(enrollment.backup_codes) == 10
    assert all(len(code) == 8 for code in enrollment.backup_codes)
    assert account.two_factor_backup_codes == [
        verifier.hash_backup_code(code) for code in enrollment.backup_codes
    ]
    assert not set(enrollment.backup_codes) & set(account.two_factor_backup_codes)


def test_provisioning_uri(verifier):
    account = make_account(password=None, email="alice@example.com")

    enrollment = verifier.enroll(account)

    uri = urlparse(enrollment.provisioning_uri)
    assert uri.scheme == "otpauth"
    assert uri.netloc == "totp"
    query = parse_qs(uri.query)
    assert query["secret"] == [enrollment.secret]
    assert query["issuer"] == ["Identity Authority"]
    assert "alice%40example.com" in uri.path or "alice@example.com" in uri.path


def test_totp_accepts_drift_within_window(verifier, clock):
    secret = pyotp.random_base32()

    assert verifier.verify_totp(secret, current_code(secret, clock))
    assert verifier.verify_totp(secret, current_code(secret, clock, -2))
    assert verifier.verify_totp(secret, current_code(secret, clock, 2))
    assert not verifier.verify_totp(secret, current_code(secret, clock, 4))


def test_totp_rejects_non_digits(verifier):
    secret = pyotp.random_base32()
    assert not verifier.verify_totp(secret, "abcdef")
    assert not verifier.verify_totp(secret, "")


def test_backup_code_works_once(verifier):
    account = make_account(password=None)
    enrollment = verifier.enroll(account)
    account.two_factor_enabled = True
    code = enrollment.backup_codes[3]

    assert verifier.verify(account, code) == (True, True)
    assert len(account.two_factor_backup_codes) == 9
    assert verifier.verify(account, code) == (False, False)


def test_backup_code_is_case_insensitive(verifier):
    account = make_account(password=None)
    enrollment = verifier.enroll(account)

    assert verifier.consume_backup_code(account, f" {enrollment.backup_codes[0].upper()} ")


def test_verify_prefers_totp(verifier, clock):
    account = make_account(password=None)
    verifier.enroll(account)

    accepted, used_backup = verifier.verify(account, current_code(account.two_factor_secret, clock))

    assert accepted and not used_backup
    assert len(account.two_factor_backup_codes) == 10


def test_verify_without_secret(verifier):
    account = make_account(password=None)
    assert verifier.verify(account, "123456") == (False, False)
