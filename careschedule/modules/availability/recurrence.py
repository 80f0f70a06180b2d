# careschedule/modules/availability/recurrence.py
"""
Recurrence expansion.

Turns one AvailabilityWindow into the ordered occurrences it stands for.
All arithmetic happens on canonical (UTC) instants, so a daily 14:00Z window
stays at 14:00Z across a DST change in the authoring zone. WEEKLY day sets
are matched against the weekday of the occurrence in the authoring zone.

Every occurrence keeps the window's duration (end - start).
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterator, NamedTuple

from dateutil.relativedelta import relativedelta

from careschedule.core.errors import RecurrenceTooLarge
from careschedule.core.timezones import from_canonical
from careschedule.modules.availability.models import AvailabilityWindow, RecurrenceType

DEFAULT_HORIZON_MONTHS = 6
DEFAULT_MAX_OCCURRENCES = 5000


class Occurrence(NamedTuple):
    start: datetime
    end: datetime


def expansion_end(
    window: AvailabilityWindow, horizon_months: int = DEFAULT_HORIZON_MONTHS
) -> datetime:
    """Exclusive bound on occurrence starts."""
    if window.recurrence_end_date is not None:
        return window.recurrence_end_date
    return window.start_time + relativedelta(months=horizon_months)


def shortest_step(window: AvailabilityWindow) -> timedelta | None:
    """
    Smallest distance between two consecutive occurrence starts, or None for
    a single occurrence. A window longer than this overlaps its own next
    occurrence.
    """
    kind = window.recurrence
    if kind is RecurrenceType.NONE:
        return None
    if kind is RecurrenceType.DAILY:
        return timedelta(days=1)
    if kind is RecurrenceType.MONTHLY:
        # Jan 31 -> Feb 28 in a common year
        return timedelta(days=28)
    if not window.weekdays:
        return timedelta(weeks=1)

    first = from_canonical(window.start_time, window.timezone).weekday()
    gaps = []
    for day in window.weekdays | {first}:
        gaps.append(min((d - day - 1) % 7 + 1 for d in window.weekdays))
    return timedelta(days=min(gaps))


def _next_listed_day(current: datetime, weekdays: set[int], zone_id: str) -> datetime:
    # strictly forward: the current occurrence's own weekday is never re-checked
    nxt = current + timedelta(days=1)
    while from_canonical(nxt, zone_id).weekday() not in weekdays:
        nxt += timedelta(days=1)
    return nxt


def _starts(window: AvailabilityWindow) -> Iterator[datetime]:
    """Unbounded stream of occurrence starts."""
    start = window.start_time
    kind = window.recurrence

    if kind is RecurrenceType.NONE:
        yield start
        return

    if kind is RecurrenceType.WEEKLY and window.weekdays:
        weekdays = window.weekdays
        current = start
        while True:
            yield current
            current = _next_listed_day(current, weekdays, window.timezone)

    step = 0
    while True:
        if kind is RecurrenceType.DAILY:
            yield start + timedelta(days=step)
        elif kind is RecurrenceType.WEEKLY:
            yield start + timedelta(weeks=step)
        else:
            # anchored on the first start: Jan 31 -> Feb 29 -> Mar 31
            yield start + relativedelta(months=step)
        step += 1


def expand(
    window: AvailabilityWindow,
    *,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
) -> Iterator[Occurrence]:
    """
    Lazily yield the window's occurrences in chronological order.

    Each call returns a fresh iterator. Raises RecurrenceTooLarge as soon as
    more than ``max_occurrences`` occurrences would be produced.
    """
    duration = window.end_time - window.start_time

    if window.recurrence is RecurrenceType.NONE:
        yield Occurrence(window.start_time, window.end_time)
        return

    bound = expansion_end(window, horizon_months)
    produced = 0
    for start in _starts(window):
        if start >= bound:
            return
        if produced >= max_occurrences:
            raise RecurrenceTooLarge(
                f"recurrence_too_large: more than {max_occurrences} occurrences"
            )
        produced += 1
        yield Occurrence(start, start + duration)
