"""
Shared test fixtures.

Uses a throw-away SQLite file database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  SQLite has no row locks, so seat booking is
serialised by the in-process ``LocalRideLocks`` registry here.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ridesapp.domain.enums import UserRole
from ridesapp.infrastructure import models  # noqa: F401  (registers tables)
from ridesapp.infrastructure.database import Base, build_session_factory
from ridesapp.infrastructure.locks import LocalRideLocks
from ridesapp.infrastructure.models import UserModel
from ridesapp.services.booking import SeatBookingEngine
from ridesapp.services.lifecycle import RideLifecycleManager
from ridesapp.services.queries import RideQueryService
from ridesapp.services.ratings import RatingCollector


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create tables in a fresh SQLite file, yield a session factory, dispose."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rides.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield build_session_factory(engine)

    await engine.dispose()


@pytest_asyncio.fixture
async def users(session_factory) -> dict[str, UserModel]:
    """Three riders and a driver."""
    people = {
        "rider": UserModel(email="rider@example.com", first_name="Aarav",
                           last_name="Sharma", role=UserRole.RIDER),
        "passenger": UserModel(email="passenger@example.com", first_name="Priya",
                               last_name="Patel", role=UserRole.RIDER),
        "other": UserModel(email="other@example.com", first_name="Rohan",
                           last_name="Mehta", role=UserRole.RIDER),
        "driver": UserModel(email="driver@example.com", first_name="Ananya",
                            last_name="Reddy", role=UserRole.DRIVER),
    }
    async with session_factory() as session:
        session.add_all(people.values())
        await session.commit()
    return people


@pytest.fixture
def ride_locks() -> LocalRideLocks:
    return LocalRideLocks()


@pytest.fixture
def booking(session_factory, ride_locks) -> SeatBookingEngine:
    return SeatBookingEngine(session_factory, ride_locks, retry_backoff=0)


@pytest.fixture
def lifecycle(session_factory, ride_locks) -> RideLifecycleManager:
    return RideLifecycleManager(session_factory, ride_locks)


@pytest.fixture
def queries(session_factory) -> RideQueryService:
    return RideQueryService(session_factory)


@pytest.fixture
def ratings(session_factory) -> RatingCollector:
    return RatingCollector(session_factory)
