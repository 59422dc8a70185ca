import pytest
from unittest.mock import AsyncMock, MagicMock

from authority.app.services.password_authenticator import PasswordAuthenticator
from authority.app.services.second_factor import SecondFactorVerifier
from authority.app.services.secret_token_codec import SecretTokenCodec
from authority.app.services.token_issuer import TokenIssuer
from tests.utils.fixed_clock import FixedClock


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.accounts = MagicMock()
    uow.accounts.get_by_id = AsyncMock(return_value=None)
    uow.accounts.get_by_email = AsyncMock(return_value=None)
    uow.accounts.get_by_username = AsyncMock(return_value=None)
    uow.accounts.get_by_token_hash = AsyncMock(return_value=None)
    uow.accounts.create = AsyncMock(side_effect=lambda account: account)
    uow.accounts.update = AsyncMock(side_effect=lambda account: account)
    uow.accounts.register_failed_login = AsyncMock(return_value=1)
    uow.accounts.reset_failed_logins = AsyncMock()

    uow.sessions = MagicMock()
    uow.sessions.get_by_id = AsyncMock(return_value=None)
    uow.sessions.get_by_token_hash = AsyncMock(return_value=None)
    uow.sessions.list_active_by_account_id = AsyncMock(return_value=[])
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.revoke_by_id = AsyncMock(return_value=True)
    uow.sessions.revoke_by_token_hash = AsyncMock(return_value=True)
    uow.sessions.revoke_all_by_account_id = AsyncMock(return_value=0)
    uow.sessions.revoke_all_except = AsyncMock(return_value=0)

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()
    return uow


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def authenticator(clock):
    # Minimum bcrypt cost keeps the suite fast
    return PasswordAuthenticator(clock, rounds=4)


@pytest.fixture
def token_issuer(clock):
    return TokenIssuer(clock, access_secret="test-access-secret", refresh_secret="test-refresh-secret")


@pytest.fixture
def verifier(clock):
    return SecondFactorVerifier(clock)


@pytest.fixture
def token_codec(clock):
    return SecretTokenCodec(clock)


@pytest.fixture
def mail_sender():
    sender = MagicMock()
    sender.send = AsyncMock()
    return sender
