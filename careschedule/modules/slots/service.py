# careschedule/modules/slots/service.py
from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from careschedule.core.context import SchedulingContext
from careschedule.core.errors import (
    InvalidTimeRange,
    SlotImmutable,
    SlotNotFound,
    StorageFailure,
)
from careschedule.core.timezones import end_of_day, start_of_day, to_canonical
from careschedule.modules.log import write_audit_log
from careschedule.modules.slots import repository as slots_repo
from careschedule.modules.slots.models import AppointmentSlot, SlotStatus
from careschedule.modules.slots.schemas import SlotPublic, SlotSearchParams, SlotUpdate

logger = logging.getLogger(__name__)

# columns that cannot be cleared with an explicit null
_REQUIRED_FIELDS = {"start_time", "end_time", "status"}


def _to_public(slot: AppointmentSlot) -> SlotPublic:
    return SlotPublic.model_validate(slot)


# UPDATE
async def update_slot_svc(
    session: AsyncSession,
    slot_id: UUID,
    patch: SlotUpdate,
    ctx: SchedulingContext,
) -> SlotPublic:
    """
    Apply a partial update to one slot.

    Logic:
    - A BOOKED slot is never modified (SlotImmutable), whatever the patch.
    - Any other slot accepts any field, including a jump to any status.
    - Only fields present in the request are touched.
    - The status check and the write run under the provider lock and commit
      there, so they cannot interleave with a window delete.
    """
    logger.info("Updating slot: %s", slot_id)

    slot = await slots_repo.get_slot(session, slot_id=slot_id)
    if slot is None:
        raise SlotNotFound(f"slot not found: {slot_id}")

    async with ctx.locks.hold(slot.provider_id, session):
        # re-read under the lock: the slot may have changed or gone meanwhile
        slot = await slots_repo.get_slot(session, slot_id=slot_id, refresh=True)
        if slot is None:
            raise SlotNotFound(f"slot not found: {slot_id}")
        return await _apply_update(session, slot, patch)


async def _apply_update(
    session: AsyncSession,
    slot: AppointmentSlot,
    patch: SlotUpdate,
) -> SlotPublic:
    slot_id = slot.id
    if not slot.status_enum.is_mutable:
        raise SlotImmutable("cannot update a booked slot")

    changes = patch.model_dump(exclude_unset=True)
    changes = {
        k: v for k, v in changes.items() if not (k in _REQUIRED_FIELDS and v is None)
    }

    for key in ("start_time", "end_time"):
        if key in changes:
            # naive values are already canonical UTC
            changes[key] = to_canonical(changes[key], "UTC")

    new_start = changes.get("start_time", slot.start_time)
    new_end = changes.get("end_time", slot.end_time)
    if new_start >= new_end:
        raise InvalidTimeRange("start_time must be before end_time")

    if "status" in changes:
        changes["status"] = SlotStatus(changes["status"]).value

    try:
        for field, value in changes.items():
            setattr(slot, field, value)
        await session.flush()
        await write_audit_log(
            session,
            actor_id=slot.provider_id,
            action="UPDATE_SLOT",
            details=f"slot={slot_id} fields={','.join(sorted(changes)) or '-'}",
        )
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Updating slot %s failed: %s", slot_id, exc)
        raise StorageFailure("storage_failure") from exc

    return _to_public(slot)


# SEARCH
async def search_slots_svc(
    session: AsyncSession,
    criteria: SlotSearchParams,
    ctx: SchedulingContext,
) -> List[SlotPublic]:
    """
    AVAILABLE slots starting between start_date 00:00 and end_date 23:59:59
    (start_date + search_default_days when end_date is missing), with the
    dates read in criteria.timezone or the configured default zone.
    """
    logger.info("Searching availability with filters: %s", criteria.model_dump(exclude_none=True))

    zone_id = criteria.timezone or ctx.default_timezone

    lower = start_of_day(criteria.start_date, zone_id)
    if criteria.end_date is not None:
        upper = end_of_day(criteria.end_date, zone_id)
    else:
        upper = end_of_day(
            criteria.start_date + timedelta(days=ctx.search_default_days), zone_id
        )
    if lower > upper:
        raise InvalidTimeRange("end_date must not be before start_date")

    rows = await slots_repo.search_available(
        session,
        start_time=lower,
        end_time=upper,
        location=criteria.location,
        appointment_type=criteria.appointment_type,
        provider_id=criteria.provider_id,
        max_price=criteria.max_price,
        slot_duration_minutes=criteria.slot_duration_minutes,
    )
    return [_to_public(s) for s in rows]


# PROVIDER SLOTS
async def list_provider_slots_svc(
    session: AsyncSession,
    provider_id: str,
    status: Optional[SlotStatus] = None,
) -> List[SlotPublic]:
    """All slots of a provider across windows, optionally narrowed to one status."""
    rows = await slots_repo.list_by_provider(session, provider_id=provider_id, status=status)
    return [_to_public(s) for s in rows]
