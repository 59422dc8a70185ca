import pytest
from httpx import AsyncClient
from sqlmodel import select

from authority.domain.entities import Account, AuditEvent, Session
from tests.utils.api import bearer, register
from tests.utils.factories import DEFAULT_PASSWORD


@pytest.mark.asyncio
async def test_register_creates_signed_in_unverified_account(client: AsyncClient, db_session, outbox):
    """
    Given a new email
    When I register
    Then I receive 201 with an unverified account and a token pair
    And a session row and a register audit event exist
    And a verification email is sent with a token that is stored only hashed
    """
    response = await client.post(
        "/auth/register",
        json={"email": "New@Example.com", "password": DEFAULT_PASSWORD, "username": "newbie"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["account"]["email"] == "new@example.com"
    assert data["account"]["username"] == "newbie"
    assert data["account"]["is_email_verified"] is False
    assert data["account"]["two_factor_enabled"] is False
    assert "password_hash" not in data["account"]
    assert data["access_token"] and data["refresh_token"] and data["session_id"]

    account = (await db_session.exec(select(Account))).one()
    assert account.password_hash.startswith("$2b$")
    token = outbox.last_token("new@example.com")
    assert account.email_verification_token != token

    sessions = (await db_session.exec(select(Session))).all()
    assert [str(s.id) for s in sessions] == [data["session_id"]]

    events = (await db_session.exec(select(AuditEvent))).all()
    assert [e.action for e in events] == ["register"]


@pytest.mark.asyncio
async def test_register_access_token_reaches_me(client: AsyncClient):
    registered = await register(client)

    response = await client.get("/auth/me", headers=bearer(registered["access_token"]))

    assert response.status_code == 200
    assert response.json()["email"] == "user@example.com"


@pytest.mark.asyncio
async def test_register_duplicate_email_ignores_case(client: AsyncClient):
    await register(client, "user@example.com")

    response = await client.post(
        "/auth/register", json={"email": "USER@Example.com", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_register_duplicate_username(client: AsyncClient):
    await register(client, "one@example.com", username="Shared")

    response = await client.post(
        "/auth/register",
        json={"email": "two@example.com", "password": DEFAULT_PASSWORD, "username": "shared"},
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "USERNAME_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient, db_session):
    response = await client.post(
        "/auth/register", json={"email": "a@example.com", "password": "password"}
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"
    assert (await db_session.exec(select(Account))).first() is None


@pytest.mark.asyncio
async def test_register_invalid_email_shape(client: AsyncClient):
    """Schema failures share the INVALID_INPUT envelope"""
    response = await client.post(
        "/auth/register", json={"email": "not-an-email", "password": DEFAULT_PASSWORD}
    )

    assert response.status_code == 400
    data = response.json()
    assert data["error"]["code"] == "INVALID_INPUT"
    assert "message" in data["error"]
