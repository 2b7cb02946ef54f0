import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from tracker_suite.main import app
from tracker_suite.database import Base, get_db
from tracker_suite.api.deps import get_password_hash, create_access_token
from tracker_suite.models.user import User, UserRole, AccountStatus
from tracker_suite.models.client import Client
from tracker_suite.services.email_service import MockEmailService, get_email_service

# Test database URL (SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

TEST_PASSWORD = "testpassword123"


@pytest_asyncio.fixture
async def test_db():
    """Create test database and tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


async def make_user(
    db: AsyncSession,
    email: str,
    role: UserRole = UserRole.user,
    account_status: AccountStatus = AccountStatus.trial,
    trial_ends_at: datetime | None = None,
    first_name: str = "Test",
    last_name: str = "User",
) -> User:
    user = User(
        email=email,
        hashed_password=get_password_hash(TEST_PASSWORD),
        first_name=first_name,
        last_name=last_name,
        is_active=True,
        user_role=role,
        account_status=account_status,
        trial_ends_at=trial_ends_at or datetime.utcnow() + timedelta(days=7),
        trial_email_sent=False,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def bearer_headers(user: User) -> dict[str, str]:
    token = create_access_token(data={"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(test_db: AsyncSession):
    """Create a test user on a fresh trial."""
    return await make_user(test_db, "test@example.com")


@pytest_asyncio.fixture
async def admin_user(test_db: AsyncSession):
    return await make_user(
        test_db, "admin@example.com", role=UserRole.admin,
        account_status=AccountStatus.active, first_name="Ada", last_name="Admin",
    )


@pytest_asyncio.fixture
async def master_admin_user(test_db: AsyncSession):
    return await make_user(
        test_db, "master@example.com", role=UserRole.master_admin,
        account_status=AccountStatus.active, first_name="Max", last_name="Master",
    )


@pytest.fixture
def mock_email_service():
    """Email service that records instead of sending."""
    return MockEmailService()


@pytest_asyncio.fixture
async def client(test_db: AsyncSession, mock_email_service: MockEmailService):
    """Create test client with overridden database and email service."""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: mock_email_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def authenticated_client(client: AsyncClient, test_user: User):
    """Create authenticated test client."""
    response = await client.post(
        "/api/auth/login",
        json={"email": "test@example.com", "password": TEST_PASSWORD},
    )
    token = response.json()["access_token"]

    client.headers["Authorization"] = f"Bearer {token}"
    return client


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient, admin_user: User):
    """Client authenticated as an admin without going through login."""
    client.headers.update(bearer_headers(admin_user))
    return client


@pytest_asyncio.fixture
async def master_admin_client(client: AsyncClient, master_admin_user: User):
    client.headers.update(bearer_headers(master_admin_user))
    return client


@pytest_asyncio.fixture
async def sample_client(test_db: AsyncSession, test_user: User):
    """A client record owned by test_user."""
    record = Client(
        user_id=test_user.id,
        name="Acme Corp",
        email="contact@acme.com",
        company="Acme",
        tags=["vip"],
    )
    test_db.add(record)
    await test_db.commit()
    await test_db.refresh(record)
    return record
