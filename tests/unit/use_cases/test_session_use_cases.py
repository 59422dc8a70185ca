"""
Unit tests for ListSessionsUseCase and RevokeSessionsUseCase
"""
from datetime import timedelta
from uuid import uuid4

import pytest

from authority.app.errors import ErrorCode
from authority.app.services.token_issuer import TokenIssuer
from authority.app.use_cases.users import ListSessionsUseCase, RevokeSessionsUseCase
from authority.domain.entities import Session


def make_session(account_id, clock, token="refresh.token", **fields):
    return Session(
        account_id=account_id,
        token_hash=TokenIssuer.hash_token(token),
        created_at=clock.now(),
        expires_at=clock.now() + timedelta(days=7),
        **fields,
    )


@pytest.mark.asyncio
async def test_list_marks_current_session(mock_uow, clock):
    account_id = uuid4()
    current = make_session(account_id, clock, token="mine")
    other = make_session(account_id, clock, token="theirs", user_agent="phone")
    mock_uow.sessions.list_active_by_account_id.return_value = [current, other]

    result = await ListSessionsUseCase(mock_uow, clock).execute(account_id, "mine")

    sessions = result.value.sessions
    assert [s.current for s in sessions] == [True, False]
    assert sessions[1].user_agent == "phone"
    assert "token_hash" not in sessions[0].model_dump()
    mock_uow.sessions.list_active_by_account_id.assert_awaited_once_with(account_id, clock.now())


@pytest.mark.asyncio
async def test_revoke_one(mock_uow, clock):
    account_id = uuid4()
    session = make_session(account_id, clock)
    mock_uow.sessions.get_by_id.return_value = session

    result = await RevokeSessionsUseCase(mock_uow, clock).revoke_one(account_id, session.id)

    assert result.value.revoked_count == 1
    mock_uow.sessions.revoke_by_id.assert_awaited_once_with(session.id, clock.now())
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_revoke_one_of_another_account(mock_uow, clock):
    session = make_session(uuid4(), clock)
    mock_uow.sessions.get_by_id.return_value = session

    result = await RevokeSessionsUseCase(mock_uow, clock).revoke_one(uuid4(), session.id)

    assert result.error.code == ErrorCode.SESSION_NOT_FOUND
    mock_uow.sessions.revoke_by_id.assert_not_awaited()


@pytest.mark.asyncio
async def test_revoke_one_missing(mock_uow, clock):
    result = await RevokeSessionsUseCase(mock_uow, clock).revoke_one(uuid4(), uuid4())
    assert result.error.code == ErrorCode.SESSION_NOT_FOUND


@pytest.mark.asyncio
async def test_revoke_one_already_revoked(mock_uow, clock):
    account_id = uuid4()
    mock_uow.sessions.get_by_id.return_value = make_session(account_id, clock, revoked=True)

    result = await RevokeSessionsUseCase(mock_uow, clock).revoke_one(account_id, uuid4())

    assert result.error.code == ErrorCode.SESSION_NOT_FOUND


@pytest.mark.asyncio
async def test_revoke_all_except(mock_uow, clock):
    account_id = uuid4()
    mock_uow.sessions.revoke_all_except.return_value = 4

    result = await RevokeSessionsUseCase(mock_uow, clock).revoke_all_except(account_id, "keep")

    assert result.value.revoked_count == 4
    mock_uow.sessions.revoke_all_except.assert_awaited_once_with(
        account_id, TokenIssuer.hash_token("keep"), clock.now()
    )
