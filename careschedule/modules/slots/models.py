# careschedule/modules/slots/models.py
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from careschedule.db.base import Base, ReprMixin, TimestampMixin, UUIDPKMixin


class SlotStatus(str, PyEnum):
    AVAILABLE = "AVAILABLE"
    BOOKED = "BOOKED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"

    @property
    def is_mutable(self) -> bool:
        # the only lifecycle rule: a booked slot is frozen
        return self is not SlotStatus.BOOKED


class AppointmentSlot(UUIDPKMixin, TimestampMixin, ReprMixin, Base):
    """
    One bookable unit of time, owned by exactly one AvailabilityWindow.
    """

    __tablename__ = "appointment_slots"

    window_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("availability_windows.id", ondelete="CASCADE"),
        nullable=False,
    )
    # denormalized from the owning window
    provider_id: Mapped[str] = mapped_column(String(64), nullable=False)

    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False)

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=SlotStatus.AVAILABLE.value,
        server_default=SlotStatus.AVAILABLE.value,
    )

    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    currency: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    appointment_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    special_requirements: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    patient_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    booking_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_slot_time_order"),
        Index("ix_slot_window", "window_id"),
        Index("ix_slot_provider_status", "provider_id", "status"),
        Index("ix_slot_status_start", "status", "start_time"),
    )

    @property
    def status_enum(self) -> SlotStatus:
        return SlotStatus(self.status)

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)
