import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.app.services.email_service import EmailTemplate
from src.domain.entities import OneTimeToken, TokenPurpose, User
from tests.fixtures.factories import create_user, fetch_all, fetch_one


@pytest.mark.asyncio
async def test_register_creates_unverified_account_and_emails_link(
    client: AsyncClient, db_session, email_service
):
    response = await client.post(
        "/auth/register",
        json={"email": "New.User@Example.com", "password": "Welcome123!"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == "new.user@example.com"
    assert data["user"]["is_verified"] is False
    assert data["user"]["roles"] == ["customer"]

    user = await fetch_one(db_session, select(User).where(User.email == "new.user@example.com"))
    assert user is not None
    assert user.password_hash != "Welcome123!"

    sent = email_service.last(EmailTemplate.EMAIL_VERIFICATION)
    assert sent.to_address == "new.user@example.com"
    tokens = await fetch_all(
        db_session,
        select(OneTimeToken).where(OneTimeToken.purpose == TokenPurpose.email_verification),
    )
    assert len(tokens) == 1
    assert tokens[0].token_hash != sent.variables["token"]


@pytest.mark.asyncio
async def test_register_duplicate_email_conflicts(client: AsyncClient, db_session):
    await create_user(db_session, email="jane.doe@example.com")

    response = await client.post(
        "/auth/register",
        json={"email": "Jane.Doe@example.com", "password": "Welcome123!"},
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_ALREADY_EXISTS"


@pytest.mark.asyncio
async def test_register_rejects_short_password(client: AsyncClient):
    response = await client.post(
        "/auth/register", json={"email": "new.user@example.com", "password": "short"}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_succeeds_when_email_provider_is_down(client: AsyncClient, email_service):
    email_service.fail = True

    response = await client.post(
        "/auth/register", json={"email": "new.user@example.com", "password": "Welcome123!"}
    )

    assert response.status_code == 201
