# careschedule/modules/availability/service.py
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import timedelta
from typing import List, Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from careschedule.core.context import SchedulingContext
from careschedule.core.errors import (
    BookedSlotsExist,
    InvalidTimeRange,
    OverlappingAvailability,
    StorageFailure,
    WindowNotFound,
)
from careschedule.core.timezones import to_canonical
from careschedule.modules.availability import repository as windows_repo
from careschedule.modules.availability.models import (
    AvailabilityWindow,
    RecurrenceType,
    Weekday,
    WindowStatus,
)
from careschedule.modules.availability.overlap import has_overlap
from careschedule.modules.availability.recurrence import expand, shortest_step
from careschedule.modules.availability.schemas import (
    AvailabilityCreate,
    AvailabilityPublic,
)
from careschedule.modules.log import write_audit_log
from careschedule.modules.slots import repository as slots_repo
from careschedule.modules.slots.generator import generate_for_occurrences
from careschedule.modules.slots.models import AppointmentSlot, SlotStatus
from careschedule.modules.slots.schemas import SlotPublic

logger = logging.getLogger(__name__)


def _to_public(window: AvailabilityWindow, slots: Sequence[AppointmentSlot]) -> AvailabilityPublic:
    """
    Window view with slot counts per status and the embedded slot list.
    """
    counts = {s: 0 for s in SlotStatus}
    for slot in slots:
        counts[SlotStatus(slot.status)] += 1

    view = AvailabilityPublic.model_validate(window)
    return view.model_copy(
        update={
            "total_slots": len(slots),
            "available_slots": counts[SlotStatus.AVAILABLE],
            "booked_slots": counts[SlotStatus.BOOKED],
            "cancelled_slots": counts[SlotStatus.CANCELLED],
            "appointment_slots": [SlotPublic.model_validate(s) for s in slots],
        }
    )


async def _window_view(session: AsyncSession, window: AvailabilityWindow) -> AvailabilityPublic:
    slots = await slots_repo.list_by_window(session, window_id=window.id)
    return _to_public(window, slots)


def _materialize(window: AvailabilityWindow, ctx: SchedulingContext) -> List[AppointmentSlot]:
    occurrences = expand(
        window,
        horizon_months=ctx.horizon_months,
        max_occurrences=ctx.max_occurrences,
    )
    return generate_for_occurrences(occurrences, window)


# CREATE
async def create_availability_svc(
    session: AsyncSession,
    payload: AvailabilityCreate,
    ctx: SchedulingContext,
) -> AvailabilityPublic:
    """
    Create a window and all of its slots in one transaction.

    Logic:
    - Normalize start/end/recurrence end to canonical UTC using payload.timezone.
    - Reject empty or inverted ranges, ranges shorter than one slot, and
      recurring ranges longer than the gap to their next occurrence.
    - Under the provider lock: reject overlaps, expand the recurrence,
      generate slots, insert window + slots, commit.
    - Nothing is written when any check fails; a storage error rolls back
      both the window and the slots.
    """
    logger.info("Creating availability for provider: %s", payload.provider_id)

    start = to_canonical(payload.start_time, payload.timezone)
    end = to_canonical(payload.end_time, payload.timezone)
    recurrence_end = (
        to_canonical(payload.recurrence_end_date, payload.timezone)
        if payload.recurrence_end_date is not None
        else None
    )

    if start >= end:
        raise InvalidTimeRange("start_time must be before end_time")
    if end - start < timedelta(minutes=payload.slot_duration_minutes):
        raise InvalidTimeRange("slot_duration_minutes does not fit in the window")
    if (
        payload.recurrence_type is not RecurrenceType.NONE
        and recurrence_end is not None
        and recurrence_end <= start
    ):
        raise InvalidTimeRange("recurrence_end_date must be after start_time")

    recurrence_days = None
    if payload.recurrence_type is RecurrenceType.WEEKLY and payload.recurrence_days:
        recurrence_days = [d.value for d in Weekday if d in payload.recurrence_days]

    window = AvailabilityWindow(
        id=uuid.uuid4(),
        provider_id=payload.provider_id,
        start_time=start,
        end_time=end,
        timezone=payload.timezone,
        recurrence_type=payload.recurrence_type.value,
        recurrence_days=recurrence_days,
        recurrence_end_date=recurrence_end,
        slot_duration_minutes=payload.slot_duration_minutes,
        price=payload.price,
        currency=payload.currency,
        location=payload.location,
        appointment_type=payload.appointment_type,
        special_requirements=payload.special_requirements,
        status=payload.status.value,
        notes=payload.notes,
    )

    step = shortest_step(window)
    if step is not None and end - start > step:
        raise InvalidTimeRange("window is longer than its recurrence interval")

    async with ctx.locks.hold(payload.provider_id, session):
        if await has_overlap(session, payload.provider_id, start, end):
            raise OverlappingAvailability("availability overlaps with existing schedule")

        # Expansion may raise RecurrenceTooLarge; nothing is in the session yet.
        slots = await asyncio.to_thread(_materialize, window, ctx)

        try:
            await windows_repo.insert_window(session, window)
            await slots_repo.bulk_insert(session, slots)
            await write_audit_log(
                session,
                actor_id=payload.provider_id,
                action="CREATE_AVAILABILITY",
                details=f"window={window.id} slots={len(slots)}",
            )
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Storing availability for provider %s failed: %s", payload.provider_id, exc)
            raise StorageFailure("storage_failure") from exc

    logger.info("Generated %d appointment slots for window %s", len(slots), window.id)
    return _to_public(window, slots)


# READ
async def get_availability_svc(
    session: AsyncSession,
    provider_id: str,
) -> AvailabilityPublic:
    """
    First ACTIVE window of the provider (earliest start) with slot counts.
    Other ACTIVE windows are not included.
    """
    logger.info("Fetching availability for provider: %s", provider_id)
    windows = await windows_repo.list_by_provider_and_status(
        session, provider_id=provider_id, status=WindowStatus.ACTIVE
    )
    if not windows:
        raise WindowNotFound(f"no availability found for provider: {provider_id}")
    return await _window_view(session, windows[0])


# DELETE
async def delete_availability_svc(
    session: AsyncSession,
    window_id: UUID,
    cascade_recurring: bool,
    ctx: SchedulingContext,
) -> None:
    """
    Delete a window.

    - Refused while any of its slots is BOOKED.
    - cascade_recurring on a recurring window: hard delete of slots + window.
    - otherwise: status -> DELETED, slots left as they are.
    """
    logger.info("Deleting availability: %s with recurring: %s", window_id, cascade_recurring)

    window = await windows_repo.get_window(session, window_id=window_id)
    if window is None:
        raise WindowNotFound(f"availability not found: {window_id}")

    async with ctx.locks.hold(window.provider_id, session):
        booked = await slots_repo.count_booked_by_window(session, window_id=window_id)
        if booked > 0:
            raise BookedSlotsExist("cannot delete availability with booked appointments")

        hard_delete = cascade_recurring and window.recurrence is not RecurrenceType.NONE
        try:
            if hard_delete:
                removed = await slots_repo.delete_unbooked_by_window(session, window_id=window_id)
                # a slot booked since the check above survives the delete
                if await slots_repo.count_booked_by_window(session, window_id=window_id) > 0:
                    await session.rollback()
                    raise BookedSlotsExist("cannot delete availability with booked appointments")
                await windows_repo.delete_window(session, window_id=window_id)
                details = f"window={window_id} mode=cascade slots_removed={removed}"
            else:
                await windows_repo.set_status(
                    session, window_id=window_id, status=WindowStatus.DELETED
                )
                details = f"window={window_id} mode=soft"
            await write_audit_log(
                session,
                actor_id=window.provider_id,
                action="DELETE_AVAILABILITY",
                details=details,
            )
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Deleting availability %s failed: %s", window_id, exc)
            raise StorageFailure("storage_failure") from exc
