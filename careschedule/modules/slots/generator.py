# careschedule/modules/slots/generator.py
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List

from careschedule.modules.availability.models import AvailabilityWindow
from careschedule.modules.availability.recurrence import Occurrence
from careschedule.modules.slots.models import AppointmentSlot, SlotStatus


def generate(
    occurrence_start: datetime,
    occurrence_end: datetime,
    duration_minutes: int,
    window: AvailabilityWindow,
) -> List[AppointmentSlot]:
    """
    Cut [occurrence_start, occurrence_end) into back-to-back slots of
    ``duration_minutes``. A trailing remainder shorter than one slot is
    dropped.

    Slots copy the window's metadata as it is now; later window edits are
    not propagated.
    """
    step = timedelta(minutes=duration_minutes)
    slots: List[AppointmentSlot] = []

    current_start = occurrence_start
    while current_start + step <= occurrence_end:
        current_end = current_start + step
        slots.append(
            AppointmentSlot(
                window_id=window.id,
                provider_id=window.provider_id,
                start_time=current_start,
                end_time=current_end,
                timezone=window.timezone,
                status=SlotStatus.AVAILABLE.value,
                price=window.price,
                currency=window.currency,
                location=window.location,
                appointment_type=window.appointment_type,
                special_requirements=window.special_requirements,
                patient_id=None,
                booking_notes=None,
            )
        )
        current_start = current_end

    return slots


def generate_for_occurrences(
    occurrences: Iterable[Occurrence], window: AvailabilityWindow
) -> List[AppointmentSlot]:
    slots: List[AppointmentSlot] = []
    for occ in occurrences:
        slots.extend(generate(occ.start, occ.end, window.slot_duration_minutes, window))
    return slots
