"""Searching for bookable slots."""
from datetime import date, datetime
from decimal import Decimal

import pytest
import pytest_asyncio

from careschedule.core.context import SchedulingContext
from careschedule.core.errors import InvalidTimeRange, InvalidTimezone
from careschedule.modules.availability.service import create_availability_svc
from careschedule.modules.slots.models import SlotStatus
from careschedule.modules.slots.schemas import SlotSearchParams, SlotUpdate
from careschedule.modules.slots.service import search_slots_svc, update_slot_svc

NY = "America/New_York"


@pytest_asyncio.fixture
async def seeded(session, ctx, make_request):
    """provider-1: Jan 15 09-17 NY (16 slots) and Feb 14 22-23 NY (2 slots).
    provider-2: Jan 16 09-10 NY at 60.00, TELEHEALTH, Boston (1 slot)."""
    main = await create_availability_svc(session, make_request(), ctx)
    await create_availability_svc(
        session,
        make_request(
            start_time=datetime(2024, 2, 14, 22, 0),
            end_time=datetime(2024, 2, 14, 23, 0),
        ),
        ctx,
    )
    await create_availability_svc(
        session,
        make_request(
            start_time=datetime(2024, 2, 15, 9, 0),
            end_time=datetime(2024, 2, 15, 10, 0),
        ),
        ctx,
    )
    await create_availability_svc(
        session,
        make_request(
            provider_id="provider-2",
            start_time=datetime(2024, 1, 16, 9, 0),
            end_time=datetime(2024, 1, 16, 10, 0),
            slot_duration_minutes=60,
            price=Decimal("60.00"),
            location="Boston General",
            appointment_type="TELEHEALTH",
        ),
        ctx,
    )
    return main


async def test_single_day_in_new_york(session, ctx, seeded):
    results = await search_slots_svc(
        session,
        SlotSearchParams(start_date=date(2024, 1, 15), end_date=date(2024, 1, 15), timezone=NY),
        ctx,
    )

    assert len(results) == 16
    starts = [s.start_time for s in results]
    assert starts == sorted(starts)
    assert starts[0] == datetime(2024, 1, 15, 14, 0)


async def test_default_range_reaches_end_of_thirtieth_day(session, ctx, seeded):
    results = await search_slots_svc(
        session, SlotSearchParams(start_date=date(2024, 1, 15), timezone=NY), ctx
    )

    late = [s for s in results if s.start_time >= datetime(2024, 2, 15)]
    # Feb 14 22:00/22:30 NY are Feb 15 03:00/03:30 UTC
    assert [s.start_time for s in late] == [
        datetime(2024, 2, 15, 3, 0),
        datetime(2024, 2, 15, 3, 30),
    ]
    assert len(results) == 16 + 2 + 1


async def test_dates_default_to_configured_zone(session, seeded):
    utc_ctx = SchedulingContext()
    ny_ctx = SchedulingContext(default_timezone=NY)
    params = SlotSearchParams(start_date=date(2024, 1, 15))

    in_utc = await search_slots_svc(session, params, utc_ctx)
    in_ny = await search_slots_svc(session, params, ny_ctx)

    assert len(in_utc) == 17
    assert len(in_ny) == 19


async def test_location_is_case_insensitive_substring(session, ctx, seeded):
    results = await search_slots_svc(
        session,
        SlotSearchParams(start_date=date(2024, 1, 15), location="BOSTON", timezone=NY),
        ctx,
    )

    assert [s.provider_id for s in results] == ["provider-2"]


@pytest.mark.parametrize("term", ["%", "_", "New%York"])
async def test_location_wildcards_are_literal(session, ctx, seeded, term):
    results = await search_slots_svc(
        session,
        SlotSearchParams(start_date=date(2024, 1, 15), location=term, timezone=NY),
        ctx,
    )

    assert results == []


@pytest.mark.parametrize(
    "filters, expected",
    [
        (dict(appointment_type="TELEHEALTH"), 1),
        (dict(appointment_type="CONSULTATION"), 18),
        (dict(provider_id="provider-2"), 1),
        (dict(max_price=Decimal("60.00")), 1),
        (dict(max_price=Decimal("100.00")), 19),
        (dict(max_price=Decimal("59.99")), 0),
        (dict(slot_duration_minutes=60), 1),
        (dict(slot_duration_minutes=30), 18),
        (dict(slot_duration_minutes=45), 0),
    ],
)
async def test_filters(session, ctx, seeded, filters, expected):
    results = await search_slots_svc(
        session, SlotSearchParams(start_date=date(2024, 1, 15), timezone=NY, **filters), ctx
    )

    assert len(results) == expected


async def test_only_available_slots_are_returned(session, ctx, seeded):
    await update_slot_svc(
        session, seeded.appointment_slots[0].id, SlotUpdate(status=SlotStatus.BOOKED), ctx
    )
    await update_slot_svc(
        session, seeded.appointment_slots[1].id, SlotUpdate(status=SlotStatus.CANCELLED), ctx
    )

    results = await search_slots_svc(
        session,
        SlotSearchParams(start_date=date(2024, 1, 15), end_date=date(2024, 1, 15), timezone=NY),
        ctx,
    )

    assert len(results) == 14
    assert all(s.status is SlotStatus.AVAILABLE for s in results)


async def test_no_match_is_empty(session, ctx, seeded):
    results = await search_slots_svc(
        session, SlotSearchParams(start_date=date(2025, 1, 1), timezone=NY), ctx
    )

    assert results == []


async def test_invalid_timezone(session, ctx):
    with pytest.raises(InvalidTimezone):
        await search_slots_svc(
            session, SlotSearchParams(start_date=date(2024, 1, 15), timezone="Nowhere/Land"), ctx
        )


async def test_end_before_start(session, ctx):
    with pytest.raises(InvalidTimeRange):
        await search_slots_svc(
            session,
            SlotSearchParams(start_date=date(2024, 1, 15), end_date=date(2024, 1, 14)),
            ctx,
        )
