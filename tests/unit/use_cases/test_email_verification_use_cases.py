"""
Unit tests for VerifyEmailUseCase and ResendVerificationUseCase
"""
import pytest

from authority.app.errors import ErrorCode
from authority.app.use_cases.auth import ResendVerificationUseCase, VerifyEmailUseCase
from authority.domain.entities import TokenPurpose
from tests.utils.factories import make_account


@pytest.mark.asyncio
async def test_verify_email(mock_uow, token_codec):
    account = make_account(password=None)
    issued = token_codec.issue_for(account, TokenPurpose.email_verification)
    mock_uow.accounts.get_by_token_hash.return_value = account

    result = await VerifyEmailUseCase(mock_uow, token_codec).execute(issued.plaintext)

    assert result.is_ok()
    assert account.is_email_verified is True
    assert account.email_verification_token is None
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_verify_email_with_bad_token(mock_uow, token_codec):
    result = await VerifyEmailUseCase(mock_uow, token_codec).execute("bogus")

    assert result.error.code == ErrorCode.INVALID_OR_EXPIRED_TOKEN
    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_verification_token_expires_after_a_day(mock_uow, token_codec, clock):
    account = make_account(password=None)
    issued = token_codec.issue_for(account, TokenPurpose.email_verification)
    mock_uow.accounts.get_by_token_hash.return_value = account
    clock.advance(hours=24)

    result = await VerifyEmailUseCase(mock_uow, token_codec).execute(issued.plaintext)

    assert result.error.code == ErrorCode.INVALID_OR_EXPIRED_TOKEN
    assert account.is_email_verified is False


@pytest.mark.asyncio
async def test_resend_replaces_token(mock_uow, token_codec, mail_sender):
    account = make_account(password=None)
    first = token_codec.issue_for(account, TokenPurpose.email_verification)
    mock_uow.accounts.get_by_email.return_value = account
    use_case = ResendVerificationUseCase(mock_uow, token_codec, mail_sender, "https://app.test")

    result = await use_case.execute(account.email)

    assert result.is_ok()
    assert account.email_verification_token not in (None, first.token_hash)
    mail_sender.send.assert_awaited_once()


@pytest.mark.asyncio
async def test_resend_for_verified_account_is_silent(mock_uow, token_codec, mail_sender):
    mock_uow.accounts.get_by_email.return_value = make_account(password=None, is_email_verified=True)
    use_case = ResendVerificationUseCase(mock_uow, token_codec, mail_sender, "https://app.test")

    verified = await use_case.execute("user@example.com")
    mock_uow.accounts.get_by_email.return_value = None
    unknown = await use_case.execute("nobody@example.com")

    assert verified.value == unknown.value
    mail_sender.send.assert_not_awaited()
