"""Shared fixtures: in-memory database, sessions, scheduling context."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from careschedule.core.context import SchedulingContext
from careschedule.db.sql import build_sessionmaker, init_db
from careschedule.modules.availability.models import AvailabilityWindow
from careschedule.modules.availability.schemas import AvailabilityCreate


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def ctx() -> SchedulingContext:
    return SchedulingContext()


@pytest.fixture
def make_request():
    """Build an AvailabilityCreate; defaults to 09:00-17:00 New York on 2024-01-15."""

    def _make(**overrides) -> AvailabilityCreate:
        data = dict(
            provider_id="provider-1",
            start_time=datetime(2024, 1, 15, 9, 0),
            end_time=datetime(2024, 1, 15, 17, 0),
            timezone="America/New_York",
            slot_duration_minutes=30,
            price=Decimal("100.00"),
            currency="USD",
            location="New York Medical Center",
            appointment_type="CONSULTATION",
        )
        data.update(overrides)
        return AvailabilityCreate(**data)

    return _make


@pytest.fixture
def make_window():
    """Transient (unsaved) AvailabilityWindow with canonical times."""

    def _make(**overrides) -> AvailabilityWindow:
        data = dict(
            provider_id="provider-1",
            start_time=datetime(2024, 1, 15, 14, 0),
            end_time=datetime(2024, 1, 15, 22, 0),
            timezone="UTC",
            recurrence_type="NONE",
            slot_duration_minutes=30,
            status="ACTIVE",
        )
        data.update(overrides)
        return AvailabilityWindow(**data)

    return _make
