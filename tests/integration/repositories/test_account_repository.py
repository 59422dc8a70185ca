import asyncio
from datetime import timedelta

import pytest

from authority.adapter.repositories.account_repository import AccountRepository
from authority.domain.entities import Account
from tests.utils.factories import make_account


async def _store(session_factory, account: Account) -> Account:
    async with session_factory() as session:
        session.add(account)
        await session.commit()
    return account


async def _reload(session_factory, account_id) -> Account:
    async with session_factory() as session:
        return await AccountRepository(session).get_by_id(account_id)


@pytest.mark.asyncio
async def test_concurrent_failures_are_all_counted(session_factory, clock):
    """
    Given an account with no failed attempts
    When five failures are recorded at once, each through its own session
    Then the counter reaches exactly five and the account is locked
    """
    account = await _store(session_factory, make_account())
    now = clock.now()
    lock_until = now + timedelta(minutes=30)

    async def fail_once() -> int:
        async with session_factory() as session:
            attempts = await AccountRepository(session).register_failed_login(
                account.id, now, 5, lock_until
            )
            await session.commit()
            return attempts

    counts = await asyncio.gather(*(fail_once() for _ in range(5)))

    assert sorted(counts) == [1, 2, 3, 4, 5]
    stored = await _reload(session_factory, account.id)
    assert stored.failed_login_attempts == 5
    assert stored.is_locked is True
    assert stored.locked_until == lock_until


@pytest.mark.asyncio
async def test_failure_after_expired_lock_starts_a_new_count(session_factory, clock):
    now = clock.now()
    account = await _store(
        session_factory,
        make_account(
            failed_login_attempts=5,
            is_locked=True,
            locked_until=now - timedelta(minutes=1),
        ),
    )

    async with session_factory() as session:
        attempts = await AccountRepository(session).register_failed_login(
            account.id, now, 5, now + timedelta(minutes=30)
        )
        await session.commit()

    assert attempts == 1
    stored = await _reload(session_factory, account.id)
    assert stored.is_locked is False


@pytest.mark.asyncio
async def test_reset_clears_counter_and_lock(session_factory, clock):
    now = clock.now()
    account = await _store(
        session_factory,
        make_account(failed_login_attempts=5, is_locked=True, locked_until=now + timedelta(minutes=30)),
    )

    async with session_factory() as session:
        await AccountRepository(session).reset_failed_logins(account.id)
        await session.commit()

    stored = await _reload(session_factory, account.id)
    assert stored.failed_login_attempts == 0
    assert stored.is_locked is False
    assert stored.locked_until is None
