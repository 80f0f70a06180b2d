# careschedule/core/timezones.py
"""
Wall-clock <-> canonical instant conversion.

Canonical instants are naive ``datetime`` values expressed in UTC; that is
what every table stores and every comparison uses.

DST handling: local times are resolved with ``fold=0``, the offset in effect
before the transition. A repeated local time (clocks go back) maps to its
first occurrence; a skipped local time (clocks go forward) is shifted
forward by the size of the gap.
"""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from careschedule.core.errors import InvalidTimezone


def get_zone(zone_id: str | None) -> ZoneInfo:
    """Resolve an IANA zone id. Raises InvalidTimezone on unknown/malformed ids."""
    if not zone_id or not isinstance(zone_id, str):
        raise InvalidTimezone(f"invalid_timezone: {zone_id!r}")
    try:
        return ZoneInfo(zone_id.strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidTimezone(f"invalid_timezone: {zone_id!r}") from exc


def to_canonical(local_time: datetime, zone_id: str) -> datetime:
    """
    Interpret ``local_time`` as wall-clock time in ``zone_id`` and return the
    matching canonical (naive UTC) instant.

    Aware inputs already name their own offset and are converted as-is; the
    zone id is still validated.
    """
    zone = get_zone(zone_id)
    if local_time.tzinfo is not None:
        return local_time.astimezone(timezone.utc).replace(tzinfo=None)
    localized = local_time.replace(tzinfo=zone, fold=0)
    return localized.astimezone(timezone.utc).replace(tzinfo=None)


def from_canonical(instant: datetime, zone_id: str) -> datetime:
    """Canonical instant -> naive wall-clock time in ``zone_id`` (display only)."""
    zone = get_zone(zone_id)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(zone).replace(tzinfo=None)


def start_of_day(day: date, zone_id: str) -> datetime:
    return to_canonical(datetime.combine(day, time.min), zone_id)


def end_of_day(day: date, zone_id: str) -> datetime:
    # 23:59:59 local, seconds precision
    return to_canonical(datetime.combine(day, time(23, 59, 59)), zone_id)
