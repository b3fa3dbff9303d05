import pytest
from httpx import AsyncClient

from tests.fixtures.factories import auth_headers, create_session, create_user


@pytest.mark.asyncio
async def test_enable_then_disable_two_factor(client: AsyncClient, db_session, notifier, test_data):
    creds = test_data.get_copy("users")["verified"]
    user = await create_user(db_session, creds["email"], creds["password"])
    session, refresh_token = await create_session(db_session, user)
    headers = auth_headers(user, session)

    enabled = await client.post("/users/me/2fa/enable", headers=headers)
    assert enabled.status_code == 200
    assert enabled.json() == {"status": "enabled", "two_factor_enabled": True}

    again = await client.post("/users/me/2fa/enable", headers=headers)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "TWO_FACTOR_ALREADY_ENABLED"

    # Enabling leaves the current session alone
    assert (await client.get("/users/me", headers=headers)).json()["two_factor_enabled"] is True

    disabled = await client.post(
        "/users/me/2fa/disable", json={"current_password": creds["password"]}, headers=headers
    )
    assert disabled.status_code == 200
    assert disabled.json()["force_logout"] is True
    assert disabled.json()["message_key"] == "account.loginSecurity.twoFactor.disabled"
    assert notifier.events[-1][1].reason == "2fa_disabled"

    refreshed = await client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert refreshed.status_code == 401


@pytest.mark.asyncio
async def test_disable_two_factor_wrong_password_keeps_it_enabled(
    client: AsyncClient, db_session, notifier, test_data
):
    creds = test_data.get_copy("users")["verified"]
    user = await create_user(
        db_session, creds["email"], creds["password"], two_factor_enabled=True
    )
    session, _ = await create_session(db_session, user)
    headers = auth_headers(user, session)

    response = await client.post(
        "/users/me/2fa/disable", json={"current_password": "WrongPass123!"}, headers=headers
    )

    assert response.status_code == 401
    assert notifier.events == []
    me = await client.get("/users/me", headers=headers)
    assert me.json()["two_factor_enabled"] is True


@pytest.mark.asyncio
async def test_disable_two_factor_when_not_enabled(client: AsyncClient, db_session, test_data):
    creds = test_data.get_copy("users")["verified"]
    user = await create_user(db_session, creds["email"], creds["password"])
    session, _ = await create_session(db_session, user)

    response = await client.post(
        "/users/me/2fa/disable",
        json={"current_password": creds["password"]},
        headers=auth_headers(user, session),
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "TWO_FACTOR_NOT_ENABLED"
