import pytest
from httpx import AsyncClient

from config import ApplicationConfig
from tests.utils.api import bearer, login, register
from tests.utils.factories import DEFAULT_PASSWORD

NEW_PASSWORD = "BrandNewPass456!"


@pytest.mark.asyncio
async def test_update_profile(client: AsyncClient):
    registered = await register(client)

    response = await client.patch(
        "/users/profile",
        json={"username": "Alice_1", "first_name": "Alice"},
        headers=bearer(registered["access_token"]),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["username"] == "Alice_1"
    assert data["first_name"] == "Alice"
    assert data["last_name"] is None


@pytest.mark.asyncio
async def test_update_profile_username_taken(client: AsyncClient):
    await register(client, "one@example.com", username="taken")
    other = await register(client, "two@example.com")

    response = await client.patch(
        "/users/profile", json={"username": "taken"}, headers=bearer(other["access_token"])
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "USERNAME_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_update_profile_picture(client: AsyncClient):
    registered = await register(client)
    url = "https://cdn.example.com/avatars/alice.png"

    response = await client.patch(
        "/users/profile-picture",
        json={"profile_picture": url},
        headers=bearer(registered["access_token"]),
    )

    assert response.status_code == 200
    assert response.json()["profile_picture"] == url
    me = await client.get("/auth/me", headers=bearer(registered["access_token"]))
    assert me.json()["profile_picture"] == url


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"profile_picture": "not a url"}])
async def test_update_profile_picture_requires_url(client: AsyncClient, body):
    registered = await register(client)

    response = await client.patch(
        "/users/profile-picture", json=body, headers=bearer(registered["access_token"])
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_change_password_keeps_current_session_only(client: AsyncClient):
    """
    Given two sessions
    When I change my password naming my current refresh token
    Then only the other session is revoked
    And the new password is required from then on
    """
    current = await register(client)
    other = (await login(client)).json()

    response = await client.patch(
        "/users/password",
        json={
            "current_password": DEFAULT_PASSWORD,
            "new_password": NEW_PASSWORD,
            "refresh_token": current["refresh_token"],
        },
        headers=bearer(current["access_token"]),
    )

    assert response.status_code == 200
    kept = await client.post("/auth/refresh-token", json={"refresh_token": current["refresh_token"]})
    dropped = await client.post("/auth/refresh-token", json={"refresh_token": other["refresh_token"]})
    assert kept.status_code == 200
    assert dropped.status_code == 401
    assert (await login(client)).status_code == 401
    assert (await login(client, password=NEW_PASSWORD)).status_code == 200


@pytest.mark.asyncio
async def test_change_password_wrong_current(client: AsyncClient):
    registered = await register(client)

    response = await client.patch(
        "/users/password",
        json={"current_password": "WrongPass123!", "new_password": NEW_PASSWORD},
        headers=bearer(registered["access_token"]),
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INCORRECT_PASSWORD"


@pytest.mark.asyncio
async def test_change_password_must_differ(client: AsyncClient):
    registered = await register(client)

    response = await client.patch(
        "/users/password",
        json={"current_password": DEFAULT_PASSWORD, "new_password": DEFAULT_PASSWORD},
        headers=bearer(registered["access_token"]),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_deactivate_account(client: AsyncClient):
    registered = await register(client)
    headers = bearer(registered["access_token"])

    response = await client.request(
        "DELETE", "/users/account", json={"password": DEFAULT_PASSWORD}, headers=headers
    )

    assert response.status_code == 200
    me = await client.get("/auth/me", headers=headers)
    assert me.status_code == 403
    refreshed = await client.post(
        "/auth/refresh-token", json={"refresh_token": registered["refresh_token"]}
    )
    assert refreshed.status_code == 401


@pytest.mark.asyncio
async def test_deactivate_account_wrong_password(client: AsyncClient):
    registered = await register(client)

    response = await client.request(
        "DELETE",
        "/users/account",
        json={"password": "WrongPass123!"},
        headers=bearer(registered["access_token"]),
    )

    assert response.status_code == 401
    assert (await login(client)).status_code == 200


@pytest.mark.asyncio
async def test_wrong_current_passwords_lock_the_account(client: AsyncClient):
    """
    Given a signed-in user
    When the current password is guessed wrong five times
    Then the sixth attempt is locked even with the right password
    And password login is locked too
    """
    registered = await register(client)
    headers = bearer(registered["access_token"])

    statuses = []
    for i in range(5):
        response = await client.patch(
            "/users/password",
            json={"current_password": f"WrongPass{i}!", "new_password": NEW_PASSWORD},
            headers=headers,
        )
        statuses.append(response.status_code)
    locked = await client.patch(
        "/users/password",
        json={"current_password": DEFAULT_PASSWORD, "new_password": NEW_PASSWORD},
        headers=headers,
    )

    assert statuses == [401] * 5
    assert locked.status_code == 423
    assert locked.json()["error"]["code"] == "ACCOUNT_LOCKED"
    assert (await login(client)).status_code == 423


@pytest.mark.asyncio
async def test_wrong_passwords_on_deactivate_lock_the_account(client: AsyncClient):
    registered = await register(client)
    headers = bearer(registered["access_token"])

    for _ in range(5):
        await client.request("DELETE", "/users/account", json={"password": "WrongPass123!"}, headers=headers)
    response = await client.request(
        "DELETE", "/users/account", json={"password": DEFAULT_PASSWORD}, headers=headers
    )

    assert response.status_code == 423
    assert (await client.get("/auth/me", headers=headers)).status_code == 200


@pytest.mark.asyncio
async def test_password_change_is_rate_limited_per_account(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(ApplicationConfig, "ACCOUNT_RATE_LIMIT", 2)
    alice = await register(client, "alice@example.com")
    bob = await register(client, "bob@example.com")
    body = {"current_password": "WrongPass123!", "new_password": NEW_PASSWORD}

    first = await client.patch("/users/password", json=body, headers=bearer(alice["access_token"]))
    second = await client.patch("/users/password", json=body, headers=bearer(alice["access_token"]))
    third = await client.patch("/users/password", json=body, headers=bearer(alice["access_token"]))
    other = await client.patch("/users/password", json=body, headers=bearer(bob["access_token"]))

    assert [first.status_code, second.status_code] == [401, 401]
    assert third.status_code == 429
    assert third.json()["error"]["code"] == "RATE_LIMITED"
    assert "Retry-After" in third.headers
    assert other.status_code == 401
