"""Test configuration and fixtures."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from taskhub.main import app
from taskhub.core.database import Base, get_db
from taskhub.core.security import get_password_hash, create_access_token
from taskhub.core.enums import TenantPlan, TenantStatus, UserRole, plan_limits
from taskhub.models.tenant import Tenant
from taskhub.models.user import User


# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "password12345"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)


@event.listens_for(test_engine.sync_engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


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


@pytest_asyncio.fixture(scope="function")
async def lenient_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Like `client`, but unhandled errors come back as the 500 response instead of raising."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def auth_headers_for(user: User) -> dict:
    """Authorization headers carrying a fresh token for `user`."""
    token = create_access_token(
        user_id=user.id,
        tenant_id=user.tenant_id,
        role=user.role.value,
    )
    return {"Authorization": f"Bearer {token}"}


async def create_tenant(
    db: AsyncSession,
    name: str = "Acme",
    subdomain: str = "acme",
    plan: TenantPlan = TenantPlan.FREE,
    status: TenantStatus = TenantStatus.ACTIVE,
) -> Tenant:
    max_users, max_projects = plan_limits(plan)
    tenant = Tenant(
        name=name,
        subdomain=subdomain,
        status=status,
        subscription_plan=plan,
        max_users=max_users,
        max_projects=max_projects,
    )
    db.add(tenant)
    await db.commit()
    await db.refresh(tenant)
    return tenant


async def create_user(
    db: AsyncSession,
    tenant: Tenant | None,
    email: str,
    role: UserRole = UserRole.USER,
    full_name: str = "Test User",
    is_active: bool = True,
) -> User:
    user = User(
        tenant_id=tenant.id if tenant is not None else None,
        email=email,
        password_hash=get_password_hash(TEST_PASSWORD),
        full_name=full_name,
        role=role,
        is_active=is_active,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_tenant(db_session: AsyncSession) -> Tenant:
    """Create test tenant on the free plan (5 users, 3 projects)."""
    return await create_tenant(db_session)


@pytest_asyncio.fixture
async def other_tenant(db_session: AsyncSession) -> Tenant:
    """A second tenant for isolation checks."""
    return await create_tenant(db_session, name="Globex", subdomain="globex")


@pytest_asyncio.fixture
async def tenant_admin(db_session: AsyncSession, test_tenant: Tenant) -> User:
    return await create_user(
        db_session, test_tenant, "admin@acme.com", role=UserRole.TENANT_ADMIN, full_name="Acme Admin"
    )


@pytest_asyncio.fixture
async def member(db_session: AsyncSession, test_tenant: Tenant) -> User:
    return await create_user(db_session, test_tenant, "member@acme.com", full_name="Acme Member")


@pytest_asyncio.fixture
async def other_admin(db_session: AsyncSession, other_tenant: Tenant) -> User:
    return await create_user(
        db_session, other_tenant, "admin@globex.com", role=UserRole.TENANT_ADMIN, full_name="Globex Admin"
    )


@pytest_asyncio.fixture
async def super_admin(db_session: AsyncSession) -> User:
    return await create_user(
        db_session, None, "root@system.com", role=UserRole.SUPER_ADMIN, full_name="Super Admin"
    )


@pytest_asyncio.fixture
async def admin_headers(tenant_admin: User) -> dict:
    return auth_headers_for(tenant_admin)


@pytest_asyncio.fixture
async def member_headers(member: User) -> dict:
    return auth_headers_for(member)


@pytest_asyncio.fixture
async def other_admin_headers(other_admin: User) -> dict:
    return auth_headers_for(other_admin)


@pytest_asyncio.fixture
async def super_headers(super_admin: User) -> dict:
    return auth_headers_for(super_admin)


@pytest.fixture
def make_tenant(db_session: AsyncSession):
    """Factory for extra tenants: `await make_tenant(subdomain=...)`."""
    async def _make(**kwargs) -> Tenant:
        return await create_tenant(db_session, **kwargs)
    return _make


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory for extra users: `await make_user(tenant, email, role=...)`."""
    async def _make(tenant: Tenant | None, email: str, **kwargs) -> User:
        return await create_user(db_session, tenant, email, **kwargs)
    return _make


@pytest.fixture
def headers_for():
    return auth_headers_for
