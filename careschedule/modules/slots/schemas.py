# careschedule/modules/slots/schemas.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from careschedule.modules.slots.models import SlotStatus


class SlotPublic(BaseModel):
    id: UUID
    window_id: UUID
    provider_id: str
    start_time: datetime
    end_time: datetime
    timezone: str
    status: SlotStatus
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    location: Optional[str] = None
    appointment_type: Optional[str] = None
    special_requirements: Optional[str] = None
    patient_id: Optional[str] = None
    booking_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SlotUpdate(BaseModel):
    """
    Partial update. Only fields the caller actually sent are applied.
    Sending null clears an optional field; null is ignored for
    start_time / end_time / status.
    """

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, max_length=3)
    location: Optional[str] = None
    appointment_type: Optional[str] = None
    special_requirements: Optional[str] = None
    status: Optional[SlotStatus] = None
    patient_id: Optional[str] = None
    booking_notes: Optional[str] = None


class SlotSearchParams(BaseModel):
    start_date: date
    end_date: Optional[date] = None
    location: Optional[str] = Field(default=None, description="Substring match")
    appointment_type: Optional[str] = None
    provider_id: Optional[str] = None
    max_price: Optional[Decimal] = Field(default=None, ge=0)
    timezone: Optional[str] = Field(
        default=None, description="Zone of start_date/end_date; server default when absent"
    )
    slot_duration_minutes: Optional[int] = Field(default=None, ge=1)
