"""Shared pytest fixtures and configuration."""

import os
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

# Set test environment variables before any application module reads settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_rental.db")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
for key in (
    "UPSTASH_REDIS_REST_URL",
    "UPSTASH_REDIS_REST_TOKEN",
    "UPSTASH_REDIS_URL",
    "UPSTASH_REDIS_TOKEN",
    "RABBITMQ_URL",
    "EMAIL_SERVER",
    "EMAIL_USER",
):
    os.environ[key] = ""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from core.breaker import breaker, outbound_breaker  # noqa: E402
from core.get_db import Base, build_engine  # noqa: E402
from models.enums import HouseStatus, UserRole  # noqa: E402
from models.models import House, User  # noqa: E402


@pytest.fixture(autouse=True)
def reset_breakers():
    """Module-level breakers must not carry failures between tests."""
    breaker.reset()
    outbound_breaker.reset()
    yield
    breaker.reset()
    outbound_breaker.reset()


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite engine with every table created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session factory configured like the application's."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    """A single database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def events():
    """Event publisher double."""
    return AsyncMock()


@pytest.fixture
def make_user(db):
    """Factory persisting a user with the given role."""

    async def _make(role: UserRole = UserRole.TENANT, name: str | None = None) -> User:
        name = name or f"{role.value.lower()}-{uuid.uuid4().hex[:8]}"
        user = User(username=name, email=f"{name}@example.com", role=role)
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest.fixture
def make_house(db):
    """Factory persisting a house owned by the given landlord."""

    async def _make(landlord: User, tenant: User | None = None, **overrides) -> House:
        values = {
            "landlord_id": landlord.id,
            "title": "Two bedroom flat",
            "description": "Bright flat close to the market.",
            "address": "12 Kampala Road",
            "rent_amount": Decimal("450.00"),
            "bedrooms": 2,
            "bathrooms": 1,
            "status": HouseStatus.RENTED if tenant else HouseStatus.AVAILABLE,
            "tenant_id": tenant.id if tenant else None,
        }
        values.update(overrides)
        house = House(**values)
        db.add(house)
        await db.commit()
        return house

    return _make


@pytest_asyncio.fixture
async def landlord(make_user):
    return await make_user(UserRole.LANDLORD, "landlord")


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN, "admin")


@pytest_asyncio.fixture
async def tenant(make_user):
    return await make_user(UserRole.TENANT, "tenant-one")


@pytest_asyncio.fixture
async def other_tenant(make_user):
    return await make_user(UserRole.TENANT, "tenant-two")


@pytest_asyncio.fixture
async def house(make_house, landlord):
    return await make_house(landlord)
