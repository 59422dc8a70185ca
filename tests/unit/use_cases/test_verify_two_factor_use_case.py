"""
Unit tests for VerifyTwoFactorUseCase
"""
from datetime import UTC, timedelta

import pyotp
import pytest

from authority.app.errors import ErrorCode
from authority.app.use_cases.auth import VerifyTwoFactorUseCase
from tests.utils.factories import make_account


@pytest.fixture
def use_case(mock_uow, clock, authenticator, verifier, token_issuer):
    return VerifyTwoFactorUseCase(mock_uow, clock, authenticator, verifier, token_issuer)


@pytest.fixture
def enrolled(mock_uow, verifier):
    account = make_account()
    enrollment = verifier.enroll(account)
    account.two_factor_enabled = True
    mock_uow.accounts.get_by_id.return_value = account
    return account, enrollment


@pytest.mark.asyncio
async def test_totp_completes_login(use_case, mock_uow, clock, token_issuer, enrolled):
    account, _ = enrolled
    challenge = token_issuer.issue_two_factor_token(account)
    code = pyotp.TOTP(account.two_factor_secret).at(clock.now().replace(tzinfo=UTC))

    result = await use_case.execute(challenge, code)

    assert result.is_ok()
    assert result.value.backup_code_used is False
    assert token_issuer.decode_access_token(result.value.access_token) is not None
    mock_uow.sessions.create.assert_awaited_once()
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_backup_code_completes_login_once(use_case, mock_uow, token_issuer, enrolled):
    account, enrollment = enrolled
    challenge = token_issuer.issue_two_factor_token(account)

    first = await use_case.execute(challenge, enrollment.backup_codes[0])
    second = await use_case.execute(challenge, enrollment.backup_codes[0])

    assert first.value.backup_code_used is True
    assert len(account.two_factor_backup_codes) == 9
    assert second.error.code == ErrorCode.INVALID_TWO_FACTOR_CODE


@pytest.mark.asyncio
async def test_wrong_code_counts_as_failure(use_case, mock_uow, token_issuer, enrolled):
    account, _ = enrolled

    result = await use_case.execute(token_issuer.issue_two_factor_token(account), "000000x")

    assert result.error.code == ErrorCode.INVALID_TWO_FACTOR_CODE
    mock_uow.accounts.register_failed_login.assert_awaited_once()
    mock_uow.sessions.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_access_token_is_not_a_challenge(use_case, token_issuer, enrolled):
    account, _ = enrolled

    result = await use_case.execute(token_issuer.issue_access_token(account), "123456")

    assert result.error.code == ErrorCode.INVALID_TOKEN


@pytest.mark.asyncio
async def test_expired_challenge(use_case, clock, token_issuer, enrolled):
    account, _ = enrolled
    challenge = token_issuer.issue_two_factor_token(account)
    clock.advance(minutes=5)

    result = await use_case.execute(challenge, "123456")

    assert result.error.code == ErrorCode.INVALID_TOKEN


@pytest.mark.asyncio
async def test_locked_account_cannot_complete(use_case, clock, token_issuer, enrolled):
    account, enrollment = enrolled
    account.locked_until = clock.now() + timedelta(minutes=10)

    result = await use_case.execute(
        token_issuer.issue_two_factor_token(account), enrollment.backup_codes[0]
    )

    assert result.error.code == ErrorCode.ACCOUNT_LOCKED
    assert len(account.two_factor_backup_codes) == 10


@pytest.mark.asyncio
async def test_success_clears_failures_left_by_earlier_codes(use_case, mock_uow, clock, token_issuer, enrolled):
    account, _ = enrolled
    account.failed_login_attempts = 3
    code = pyotp.TOTP(account.two_factor_secret).at(clock.now().replace(tzinfo=UTC))

    result = await use_case.execute(token_issuer.issue_two_factor_token(account), code)

    assert result.is_ok()
    mock_uow.accounts.reset_failed_logins.assert_awaited_once_with(account.id)
