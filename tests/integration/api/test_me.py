import pytest
from datetime import timedelta
from httpx import AsyncClient

from src.api.utils.jwt import create_access_token
from tests.fixtures.factories import auth_headers, create_session, create_user


@pytest.mark.asyncio
async def test_me_returns_profile(client: AsyncClient, db_session):
    user = await create_user(db_session)
    session, _ = await create_session(db_session, user)

    response = await client.get("/users/me", headers=auth_headers(user, session))

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "jane.doe@example.com"
    assert data["is_verified"] is True
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_me_rejects_missing_and_garbage_tokens(client: AsyncClient):
    assert (await client.get("/users/me")).status_code == 401
    garbage = await client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert garbage.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_expired_token(client: AsyncClient, db_session):
    user = await create_user(db_session)
    session, _ = await create_session(db_session, user)
    token = create_access_token(str(user.id), str(session.id), user.roles, timedelta(seconds=-5))

    response = await client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_token_of_revoked_session(client: AsyncClient, db_session):
    user = await create_user(db_session)
    session, _ = await create_session(db_session, user, is_active=False)

    response = await client.get("/users/me", headers=auth_headers(user, session))

    assert response.status_code == 401
