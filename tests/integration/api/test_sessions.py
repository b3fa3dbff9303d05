import pytest
from uuid import uuid4
from httpx import AsyncClient

from tests.fixtures.factories import auth_headers, create_session, create_user


@pytest.mark.asyncio
async def test_list_sessions_marks_current(client: AsyncClient, db_session):
    user = await create_user(db_session)
    current, _ = await create_session(db_session, user)
    other, _ = await create_session(db_session, user)
    await create_session(db_session, user, is_active=False)
    current_id, other_id = str(current.id), str(other.id)

    response = await client.get("/sessions", headers=auth_headers(user, current))

    assert response.status_code == 200
    sessions = {s["id"]: s for s in response.json()["sessions"]}
    assert set(sessions) == {current_id, other_id}
    assert sessions[current_id]["is_current"] is True
    assert sessions[other_id]["is_current"] is False


@pytest.mark.asyncio
async def test_revoke_one_session(client: AsyncClient, db_session):
    user = await create_user(db_session)
    current, _ = await create_session(db_session, user)
    other, other_refresh = await create_session(db_session, user)
    headers = auth_headers(user, current)
    other_id = str(other.id)

    response = await client.delete(f"/sessions/{other_id}", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"revoked_count": 1}
    refreshed = await client.post("/auth/refresh", json={"refresh_token": other_refresh})
    assert refreshed.status_code == 401

    again = await client.delete(f"/sessions/{other_id}", headers=headers)
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_cannot_revoke_someone_elses_session(client: AsyncClient, db_session, test_data):
    users = test_data.get_copy("users")
    owner = await create_user(db_session, users["verified"]["email"])
    intruder = await create_user(db_session, users["other"]["email"])
    owner_session, owner_refresh = await create_session(db_session, owner)
    intruder_session, _ = await create_session(db_session, intruder)
    owner_session_id = str(owner_session.id)
    headers = auth_headers(intruder, intruder_session)

    response = await client.delete(f"/sessions/{owner_session_id}", headers=headers)

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"
    refreshed = await client.post("/auth/refresh", json={"refresh_token": owner_refresh})
    assert refreshed.status_code == 200


@pytest.mark.asyncio
async def test_revoke_unknown_session(client: AsyncClient, db_session):
    user = await create_user(db_session)
    session, _ = await create_session(db_session, user)

    response = await client.delete(f"/sessions/{uuid4()}", headers=auth_headers(user, session))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_revoke_other_sessions_keeps_current(client: AsyncClient, db_session):
    user = await create_user(db_session)
    current, _ = await create_session(db_session, user)
    _, refresh_a = await create_session(db_session, user)
    _, refresh_b = await create_session(db_session, user)
    headers = auth_headers(user, current)

    response = await client.post("/sessions/revoke-others", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"revoked_count": 2}
    assert (await client.get("/users/me", headers=headers)).status_code == 200
    for token in (refresh_a, refresh_b):
        assert (await client.post("/auth/refresh", json={"refresh_token": token})).status_code == 401
