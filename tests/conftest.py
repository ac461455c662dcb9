"""Test configuration and fixtures."""
import os

# Settings are read at import time; these must be in place before `app` loads
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SEED_BCRYPT_ROUNDS", "4")

import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.database import Base, get_db
from app.core.security import get_password_hash, create_access_token
from app.core.enums import CompanyStatus, SystemUserRole, UserStatus
from app.models.company import Company
from app.models.user import User


# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "TestPassword123!"


@pytest_asyncio.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """One in-memory database per test, shared by every connection."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests."""
    session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def make_company(db_session: AsyncSession, slug: str, **fields) -> Company:
    company = Company(
        name=fields.pop("name", f"{slug.title()} Company"),
        slug=slug,
        status=fields.pop("status", CompanyStatus.ACTIVE),
        **fields,
    )
    db_session.add(company)
    await db_session.commit()
    await db_session.refresh(company)
    return company


async def make_user(
    db_session: AsyncSession,
    company: Company,
    email: str,
    system_role: SystemUserRole = SystemUserRole.USER,
    **fields,
) -> User:
    user = User(
        company_id=company.id,
        email=email,
        first_name=fields.pop("first_name", "Test"),
        last_name=fields.pop("last_name", "User"),
        hashed_password=get_password_hash(fields.pop("password", TEST_PASSWORD)),
        system_role=system_role,
        status=fields.pop("status", UserStatus.ACTIVE),
        **fields,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def headers_for(user: User) -> dict:
    token = create_access_token(
        user_id=user.id,
        company_id=user.company_id,
        system_role=user.system_role.value,
        email=user.email,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_company(db_session: AsyncSession) -> Company:
    """The default company new users register into."""
    return await make_company(db_session, "default", name="Default Company", domain="example.com")


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession, test_company: Company) -> User:
    """Company admin."""
    return await make_user(
        db_session, test_company, "test@example.com", SystemUserRole.ADMIN,
        first_name="Test", last_name="Admin",
    )


@pytest_asyncio.fixture
async def regular_user(db_session: AsyncSession, test_company: Company) -> User:
    return await make_user(db_session, test_company, "regular@example.com")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    """Create authorization headers with valid token."""
    return headers_for(test_user)


@pytest_asyncio.fixture
async def user_headers(regular_user: User) -> dict:
    return headers_for(regular_user)
