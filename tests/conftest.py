"""Shared test infrastructure for the rigfinder test suite.

Provides:
- db_session: async SQLite in-memory session with all tables created
- make_vendor: factory for Vendor rows (optionally with a VendorBilling row)
- make_equipment: factory for Equipment + Availability
- make_user: factory for User rows
- client: httpx AsyncClient on the app with get_db bound to db_session
- auth_headers: Bearer headers for a user
- fail_inserts: make INSERTs of a model raise a database error
"""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Import Base first, then models to register all tables
from rigfinder.infra.database import Base, get_db

import rigfinder.domain.models  # noqa: F401

from rigfinder.domain.models import Availability, Equipment, User, Vendor, VendorBilling
from rigfinder.infra.clock import utcnow
from rigfinder.services.auth_service import create_access_token
from rigfinder.services.rate_limiter import FixedWindowRateLimiter


# ---------------------------------------------------------------------------
# Database session fixture
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_session():
    """Async SQLite in-memory session with all tables created.

    Creates a fresh engine + tables for each test, yields a session,
    then rolls back and tears down.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


# ---------------------------------------------------------------------------
# Vendor / equipment factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_vendor(db_session):
    """Factory that creates a Vendor row.

    Usage:
        vendor = await make_vendor(name="Acme Rentals", cpc_rate=Decimal("20.00"))
    """
    async def _factory(
        name: str = "Test Rentals",
        phone: str = "512-555-0100",
        email: str = "rentals@test.com",
        yard_address: str = "100 Test Rd, Austin, TX",
        yard_lat: float | None = 30.2672,
        yard_lng: float | None = -97.7431,
        is_sponsored: bool = False,
        is_active: bool = True,
        billing_status: str = "ACTIVE",
        cpc_rate: Decimal | None = None,
        user_id: str | None = None,
    ) -> Vendor:
        vendor = Vendor(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=name,
            phone=phone,
            email=email,
            yard_address=yard_address,
            yard_lat=yard_lat,
            yard_lng=yard_lng,
            is_sponsored=is_sponsored,
            is_active=is_active,
            billing_status=billing_status,
        )
        db_session.add(vendor)
        if cpc_rate is not None:
            db_session.add(VendorBilling(vendor_id=vendor.id, cpc_rate=cpc_rate))
        await db_session.flush()
        return vendor

    return _factory


@pytest.fixture
def make_equipment(db_session):
    """Factory that creates Equipment with an Availability row.

    Pass ``availability_status=None`` to create equipment without one.

    Usage:
        eq = await make_equipment(vendor, type="CTL", availability_status="AVAILABLE")
    """
    async def _factory(
        vendor: Vendor,
        type: str = "CTL",
        make: str | None = "Bobcat",
        model: str | None = "T770",
        rate_day_min: float | None = 300.0,
        rate_day_max: float | None = 400.0,
        availability_status: str | None = "AVAILABLE",
        last_updated: datetime | None = None,
        earliest_date: datetime | None = None,
        created_at: datetime | None = None,
    ) -> Equipment:
        equipment = Equipment(
            id=str(uuid.uuid4()),
            vendor_id=vendor.id,
            type=type,
            make=make,
            model=model,
            rate_day_min=rate_day_min,
            rate_day_max=rate_day_max,
        )
        if created_at is not None:
            equipment.created_at = created_at
            equipment.updated_at = created_at
        db_session.add(equipment)

        if availability_status is not None:
            db_session.add(
                Availability(
                    id=str(uuid.uuid4()),
                    equipment_id=equipment.id,
                    status=availability_status,
                    earliest_date=earliest_date,
                    last_updated=last_updated or utcnow() - timedelta(hours=1),
                )
            )
        await db_session.flush()
        return equipment

    return _factory


@pytest.fixture
def make_user(db_session):
    """Factory that creates a User row.

    Usage:
        admin = await make_user(role="admin")
    """
    async def _factory(
        email: str | None = None,
        name: str = "Test User",
        role: str = "vendor",
        is_active: bool = True,
    ) -> User:
        user = User(
            id=str(uuid.uuid4()),
            email=email or f"user-{uuid.uuid4().hex[:8]}@test.com",
            name=name,
            role=role,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _factory


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(db_session):
    """httpx client against the app, sharing db_session with the test."""
    from rigfinder.app.main import app

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.state.rate_limiter = FixedWindowRateLimiter(max_requests=30, window_seconds=60)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build Bearer headers for a user."""
    def _factory(user: User) -> dict:
        token = create_access_token(user.id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _factory


# ---------------------------------------------------------------------------
# Fault injection
# ---------------------------------------------------------------------------

@pytest.fixture
def fail_inserts():
    """Make every INSERT of a model raise OperationalError until teardown.

    Usage:
        fail_inserts(AuditLog)
    """
    registered = []

    def _raise(mapper, connection, target):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    def _factory(model) -> None:
        event.listen(model, "before_insert", _raise)
        registered.append(model)

    yield _factory

    for model in registered:
        event.remove(model, "before_insert", _raise)
