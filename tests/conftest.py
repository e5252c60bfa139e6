"""Test configuration and fixtures"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from uuid import uuid4

from tableside.main import app
from tableside.database import Base, get_db
from tableside.models.user import StaffUser, StaffRole
from tableside.api.auth import create_access_token
from tableside.services import AreaRegistry, TableStore


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_AREAS = [
    ("indoor", "Indoor"),
    ("outdoor", "Outdoor"),
    ("vip", "VIP"),
]


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    
    async with session_factory() as session:
        yield session
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    
    await engine.dispose()


@pytest.fixture
async def test_areas(test_db):
    """Register the standard areas"""
    areas = await AreaRegistry(test_db).ensure_areas(TEST_AREAS)
    await test_db.commit()
    return areas


@pytest.fixture
async def make_table(test_db, test_areas):
    """Factory creating committed tables"""
    async def _make(number="T001", capacity=4, area="indoor", **kwargs):
        table = await TableStore(test_db).create_table(
            capacity=capacity,
            area=area,
            number=number,
            **kwargs,
        )
        await test_db.commit()
        return table
    return _make


async def _create_staff(test_db, email, role, full_name):
    user = StaffUser(
        id=uuid4(),
        email=email,
        full_name=full_name,
        role=role,
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
async def test_admin(test_db):
    """Create an admin staff user"""
    return await _create_staff(test_db, "admin@example.com", StaffRole.ADMIN, "Admin User")


@pytest.fixture
async def test_waiter(test_db):
    """Create a waiter staff user"""
    return await _create_staff(test_db, "waiter@example.com", StaffRole.WAITER, "Wendy Waiter")


@pytest.fixture
async def client(test_db):
    """Create test client with overridden database"""
    async def override_get_db():
        yield test_db
    
    app.dependency_overrides[get_db] = override_get_db
    
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(test_admin):
    return {"Authorization": f"Bearer {create_access_token(test_admin)}"}


@pytest.fixture
def waiter_headers(test_waiter):
    return {"Authorization": f"Bearer {create_access_token(test_waiter)}"}


@pytest.fixture
async def admin_client(client, admin_headers, test_areas):
    """Create admin authenticated test client"""
    client.headers.update(admin_headers)
    return client
