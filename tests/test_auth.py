"""Authentication API tests."""
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import CompanyStatus, InvitationStatus, SystemUserRole, UserStatus
from app.core.security import create_refresh_token, decode_token
from app.models.company import Company
from app.models.invitation import CompanyInvitation
from app.models.user import User

from conftest import TEST_PASSWORD, make_company


def register_body(**overrides) -> dict:
    body = {
        "email": "newcomer@example.com",
        "firstName": "New",
        "lastName": "Comer",
        "password": "Str0ng!Pass",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, test_user: User):
    """Test successful login."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "test@example.com", "password": TEST_PASSWORD}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == "test@example.com"
    assert data["user"]["companyId"] == test_user.company_id
    assert data["user"]["lastLoginAt"] is not None
    assert "hashedPassword" not in data["user"]
    assert data["tokens"]["tokenType"] == "bearer"
    assert data["tokens"]["expiresIn"] == 30 * 60

    payload = decode_token(data["tokens"]["accessToken"])
    assert payload.sub == test_user.id
    assert payload.company_id == test_user.company_id
    assert payload.system_role == "ADMIN"
    assert payload.type == "access"


@pytest.mark.asyncio
async def test_login_invalid_password(client: AsyncClient, test_user: User):
    """Test login with invalid password."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "test@example.com", "password": "wrongpassword"}
    )

    assert response.status_code == 401
    assert "Invalid email or password" in response.json()["detail"]


@pytest.mark.asyncio
async def test_login_user_not_found(client: AsyncClient):
    """Test login with non-existent user."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "nonexistent@example.com", "password": "password"}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_inactive_user(client: AsyncClient, db_session: AsyncSession, test_user: User):
    test_user.status = UserStatus.SUSPENDED
    await db_session.commit()

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "test@example.com", "password": TEST_PASSWORD}
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_login_inactive_company(
    client: AsyncClient, db_session: AsyncSession, test_company: Company, test_user: User
):
    test_company.status = CompanyStatus.SUSPENDED
    await db_session.commit()

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "test@example.com", "password": TEST_PASSWORD}
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Company is inactive"


@pytest.mark.asyncio
async def test_get_me_authenticated(client: AsyncClient, auth_headers: dict):
    """Test getting current user info when authenticated."""
    response = await client.get("/api/v1/auth/me", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "test@example.com"
    assert data["systemRole"] == "ADMIN"


@pytest.mark.asyncio
async def test_get_me_unauthenticated(client: AsyncClient):
    """Test getting current user info without authentication."""
    response = await client.get("/api/v1/auth/me")

    assert response.status_code in (401, 403)  # No auth header


@pytest.mark.asyncio
async def test_get_me_rejects_refresh_token(client: AsyncClient, test_user: User):
    token = create_refresh_token(test_user.id, test_user.company_id, "ADMIN", test_user.email)

    response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_me_garbage_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_token(client: AsyncClient, test_user: User):
    """Test token refresh."""
    # First login to get tokens
    login_response = await client.post(
        "/api/v1/auth/login",
        json={"email": "test@example.com", "password": TEST_PASSWORD}
    )
    refresh_token = login_response.json()["tokens"]["refreshToken"]

    # Refresh the token
    response = await client.post(
        "/api/v1/auth/refresh",
        json={"refreshToken": refresh_token}
    )

    assert response.status_code == 200
    data = response.json()
    assert decode_token(data["accessToken"]).type == "access"
    assert decode_token(data["refreshToken"]).type == "refresh"


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client: AsyncClient, auth_headers: dict):
    access_token = auth_headers["Authorization"].split(" ", 1)[1]

    response = await client.post("/api/v1/auth/refresh", json={"refreshToken": access_token})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_register_into_default_company(client: AsyncClient, test_company: Company):
    response = await client.post("/api/v1/auth/register", json=register_body())

    assert response.status_code == 201
    data = response.json()
    assert data["user"]["companyId"] == test_company.id
    assert data["user"]["systemRole"] == "USER"
    assert data["tokens"]["accessToken"]


@pytest.mark.asyncio
async def test_register_ignores_requested_role(client: AsyncClient, test_company: Company):
    response = await client.post("/api/v1/auth/register", json=register_body(role="ADMIN"))

    assert response.status_code == 201
    assert response.json()["user"]["systemRole"] == "USER"


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_user: User):
    response = await client.post(
        "/api/v1/auth/register", json=register_body(email="test@example.com")
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_unknown_company(client: AsyncClient, test_company: Company):
    response = await client.post(
        "/api/v1/auth/register", json=register_body(companySlug="nowhere")
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_register_weak_password(client: AsyncClient, test_company: Company):
    response = await client.post("/api/v1/auth/register", json=register_body(password="weak"))

    assert response.status_code == 400
    [error] = response.json()["detail"]["errors"]
    assert error["field"] == "password"
    assert error["code"] == "password_strength"


@pytest.mark.asyncio
async def test_register_requires_invitation_when_company_demands_it(
    client: AsyncClient, db_session: AsyncSession
):
    await make_company(db_session, "closed", settings={"requireInvitation": True})

    response = await client.post(
        "/api/v1/auth/register", json=register_body(companySlug="closed")
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_register_with_invitation(
    client: AsyncClient, db_session: AsyncSession, test_user: User
):
    invitation = CompanyInvitation(
        email="newcomer@example.com",
        code="INVTESTCODE01",
        role=SystemUserRole.MODERATOR,
        company_id=test_user.company_id,
        invited_by=test_user.id,
        expires_at=datetime.now(timezone.utc) + timedelta(days=1),
    )
    db_session.add(invitation)
    await db_session.commit()

    response = await client.post(
        "/api/v1/auth/register", json=register_body(invitationCode="INVTESTCODE01")
    )

    assert response.status_code == 201
    assert response.json()["user"]["systemRole"] == "MODERATOR"
    await db_session.refresh(invitation)
    assert invitation.status == InvitationStatus.ACCEPTED
    assert invitation.accepted_at is not None


@pytest.mark.asyncio
async def test_register_with_expired_invitation(
    client: AsyncClient, db_session: AsyncSession, test_user: User
):
    invitation = CompanyInvitation(
        email="newcomer@example.com",
        code="INVTESTCODE02",
        company_id=test_user.company_id,
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
    )
    db_session.add(invitation)
    await db_session.commit()

    response = await client.post(
        "/api/v1/auth/register", json=register_body(invitationCode="INVTESTCODE02")
    )

    assert response.status_code == 400
    await db_session.refresh(invitation)
    assert invitation.status == InvitationStatus.EXPIRED
    result = await db_session.execute(select(User).where(User.email == "newcomer@example.com"))
    assert result.scalar_one_or_none() is None


@pytest.mark.asyncio
async def test_register_with_invitation_for_other_email(
    client: AsyncClient, db_session: AsyncSession, test_user: User
):
    db_session.add(CompanyInvitation(
        email="someone.else@example.com",
        code="INVTESTCODE03",
        company_id=test_user.company_id,
        expires_at=datetime.now(timezone.utc) + timedelta(days=1),
    ))
    await db_session.commit()

    response = await client.post(
        "/api/v1/auth/register", json=register_body(invitationCode="INVTESTCODE03")
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_register_concurrent_duplicate_email(
    client: AsyncClient, db_session: AsyncSession, test_company: Company, monkeypatch
):
    from app.api.v1 import auth as auth_module

    async def membership_after_competing_signup(db, company, email, invitation_code):
        # Another request commits the same email once the duplicate check has passed
        db.add(User(
            company_id=company.id,
            email=email,
            first_name="Quick",
            last_name="Twin",
            hashed_password="x",
        ))
        await db.commit()
        return None

    monkeypatch.setattr(auth_module, "resolve_membership", membership_after_competing_signup)

    response = await client.post("/api/v1/auth/register", json=register_body())

    assert response.status_code == 409
    result = await db_session.execute(
        select(User.first_name).where(User.email == "newcomer@example.com")
    )
    assert result.scalars().all() == ["Quick"]
