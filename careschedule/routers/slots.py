# careschedule/routers/slots.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from careschedule.core.context import SchedulingContext
from careschedule.core.errors import (
    InvalidTimeRange,
    InvalidTimezone,
    SlotImmutable,
    SlotNotFound,
    StorageFailure,
)
from careschedule.db.sql import get_session
from careschedule.dependencies import get_scheduling_context
from careschedule.modules.slots.models import SlotStatus
from careschedule.modules.slots.schemas import SlotPublic, SlotSearchParams, SlotUpdate
from careschedule.modules.slots.service import (
    list_provider_slots_svc,
    search_slots_svc,
    update_slot_svc,
)

router = APIRouter(tags=["appointment-slots"])


@router.put(
    "/provider/availability/{slot_id}",
    response_model=SlotPublic,
    summary="Update slot timing, status, pricing or notes",
)
async def slot_update(
    slot_id: UUID,
    payload: SlotUpdate,
    session: AsyncSession = Depends(get_session),
    ctx: SchedulingContext = Depends(get_scheduling_context),
):
    """
    Partial update of one slot.

    Notes:
    - Returns 409 if the slot is currently BOOKED (booked slots are frozen).
    - Any other status may be set directly, including COMPLETED / NO_SHOW.
    """
    try:
        return await update_slot_svc(session, slot_id, payload, ctx)
    except SlotNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.code)
    except SlotImmutable as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.code)
    except InvalidTimeRange as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.code)
    except StorageFailure as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.code)


@router.get(
    "/provider/{provider_id}/slots",
    response_model=list[SlotPublic],
    summary="All slots of a provider, optionally filtered by status",
)
async def slots_for_provider(
    provider_id: str,
    slot_status: Optional[SlotStatus] = Query(None, alias="status"),
    session: AsyncSession = Depends(get_session),
):
    return await list_provider_slots_svc(session, provider_id, slot_status)


@router.get(
    "/availability/search",
    response_model=list[SlotPublic],
    summary="Search available slots",
)
async def slots_search(
    start_date: date = Query(...),
    end_date: Optional[date] = Query(None),
    location: Optional[str] = Query(None, description="Substring match on location"),
    appointment_type: Optional[str] = Query(None),
    provider_id: Optional[str] = Query(None),
    max_price: Optional[Decimal] = Query(None, ge=0),
    timezone: Optional[str] = Query(None),
    slot_duration_minutes: Optional[int] = Query(None, ge=1),
    session: AsyncSession = Depends(get_session),
    ctx: SchedulingContext = Depends(get_scheduling_context),
):
    criteria = SlotSearchParams(
        start_date=start_date,
        end_date=end_date,
        location=location,
        appointment_type=appointment_type,
        provider_id=provider_id,
        max_price=max_price,
        timezone=timezone,
        slot_duration_minutes=slot_duration_minutes,
    )
    try:
        return await search_slots_svc(session, criteria, ctx)
    except (InvalidTimezone, InvalidTimeRange) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.code)
