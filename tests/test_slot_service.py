"""Slot updates and provider slot listing."""
import asyncio
import uuid
from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio

from careschedule.core.errors import InvalidTimeRange, SlotImmutable, SlotNotFound
from careschedule.modules.availability.service import create_availability_svc
from careschedule.modules.slots.models import AppointmentSlot, SlotStatus
from careschedule.modules.slots.schemas import SlotUpdate
from careschedule.modules.slots.service import list_provider_slots_svc, update_slot_svc


@pytest_asyncio.fixture
async def slot_id(session, ctx, make_request):
    view = await create_availability_svc(session, make_request(), ctx)
    return view.appointment_slots[0].id


async def test_partial_update_touches_only_sent_fields(session, ctx, slot_id):
    updated = await update_slot_svc(
        session, slot_id, SlotUpdate(price=Decimal("120.00"), booking_notes="first visit"), ctx
    )

    assert updated.price == Decimal("120.00")
    assert updated.booking_notes == "first visit"
    assert updated.location == "New York Medical Center"
    assert updated.status is SlotStatus.AVAILABLE
    assert updated.start_time == datetime(2024, 1, 15, 14, 0)


async def test_update_is_committed(session_factory, session, ctx, slot_id):
    await update_slot_svc(session, slot_id, SlotUpdate(location="Annex"), ctx)

    async with session_factory() as other:
        slot = await other.get(AppointmentSlot, slot_id)
        assert slot.location == "Annex"


async def test_any_status_is_reachable_from_available(session, ctx, slot_id):
    updated = await update_slot_svc(session, slot_id, SlotUpdate(status="COMPLETED"), ctx)

    assert updated.status is SlotStatus.COMPLETED


async def test_cancelled_slot_can_be_reopened(session, ctx, slot_id):
    await update_slot_svc(session, slot_id, SlotUpdate(status=SlotStatus.CANCELLED), ctx)

    updated = await update_slot_svc(
        session, slot_id, SlotUpdate(status=SlotStatus.AVAILABLE), ctx
    )

    assert updated.status is SlotStatus.AVAILABLE


async def test_booked_slot_is_frozen(session, ctx, slot_id):
    await update_slot_svc(
        session, slot_id, SlotUpdate(status=SlotStatus.BOOKED, patient_id="patient-1"), ctx
    )

    with pytest.raises(SlotImmutable):
        await update_slot_svc(session, slot_id, SlotUpdate(status=SlotStatus.CANCELLED), ctx)

    slot = await session.get(AppointmentSlot, slot_id)
    assert slot.status == SlotStatus.BOOKED.value
    assert slot.patient_id == "patient-1"


async def test_booking_made_elsewhere_is_seen(session_factory, session, ctx, slot_id):
    async with session_factory() as other:
        await update_slot_svc(other, slot_id, SlotUpdate(status=SlotStatus.BOOKED), ctx)

    with pytest.raises(SlotImmutable):
        await update_slot_svc(session, slot_id, SlotUpdate(location="Annex"), ctx)


async def test_update_waits_for_provider_lock(session_factory, ctx, slot_id):
    async with session_factory() as other:
        async with ctx.locks.hold("provider-1"):
            task = asyncio.create_task(
                update_slot_svc(other, slot_id, SlotUpdate(status=SlotStatus.BOOKED), ctx)
            )
            await asyncio.sleep(0.05)
            assert not task.done()

        updated = await task

    assert updated.status is SlotStatus.BOOKED
    assert len(ctx.locks) == 0


async def test_unknown_slot(session, ctx):
    with pytest.raises(SlotNotFound):
        await update_slot_svc(session, uuid.uuid4(), SlotUpdate(price=Decimal("1")), ctx)


async def test_explicit_null_clears_optional_field(session, ctx, slot_id):
    await update_slot_svc(session, slot_id, SlotUpdate(booking_notes="call first"), ctx)

    updated = await update_slot_svc(session, slot_id, SlotUpdate(booking_notes=None), ctx)

    assert updated.booking_notes is None


async def test_null_status_and_times_are_ignored(session, ctx, slot_id):
    updated = await update_slot_svc(
        session,
        slot_id,
        SlotUpdate(status=None, start_time=None, location="Annex"),
        ctx,
    )

    assert updated.status is SlotStatus.AVAILABLE
    assert updated.start_time == datetime(2024, 1, 15, 14, 0)
    assert updated.location == "Annex"


async def test_retime_slot(session, ctx, slot_id):
    updated = await update_slot_svc(
        session,
        slot_id,
        SlotUpdate(
            start_time=datetime(2024, 1, 15, 14, 5), end_time=datetime(2024, 1, 15, 14, 45)
        ),
        ctx,
    )

    assert updated.start_time == datetime(2024, 1, 15, 14, 5)
    assert updated.end_time == datetime(2024, 1, 15, 14, 45)


async def test_inverted_times_rejected(session, ctx, slot_id):
    with pytest.raises(InvalidTimeRange):
        await update_slot_svc(
            session, slot_id, SlotUpdate(end_time=datetime(2024, 1, 15, 13, 0)), ctx
        )

    slot = await session.get(AppointmentSlot, slot_id)
    assert slot.end_time == datetime(2024, 1, 15, 14, 30)


async def test_list_provider_slots_with_status_filter(session, ctx, slot_id):
    await update_slot_svc(session, slot_id, SlotUpdate(status=SlotStatus.NO_SHOW), ctx)

    everything = await list_provider_slots_svc(session, "provider-1")
    no_shows = await list_provider_slots_svc(session, "provider-1", SlotStatus.NO_SHOW)

    assert len(everything) == 16
    assert [s.id for s in no_shows] == [slot_id]
    assert await list_provider_slots_svc(session, "provider-2") == []
