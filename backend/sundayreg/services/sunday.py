# sundayreg/services/sunday.py
"""
Which Sunday does a registration made "now" belong to?

    • Monday..Saturday  -> the coming Sunday (1-6 days ahead)
    • Sunday before the cutoff hour -> today
    • Sunday at/after the cutoff hour -> next week's Sunday (+7 days)

All arithmetic happens in one explicit timezone. A naive `now` is read as
wall-clock time in that zone.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from sundayreg.config import DEFAULT_CUTOFF_HOUR, DEFAULT_TZ
from sundayreg.schemas.registration import SundayTarget


def _to_local(now: datetime, tz: ZoneInfo) -> datetime:
    if now.tzinfo is None or now.tzinfo.utcoffset(now) is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def sunday_index(d: date) -> int:
    """Day of week with Sunday = 0 (Python's weekday() has Monday = 0)."""
    return (d.weekday() + 1) % 7


def sunday_label(d: date) -> str:
    """Long form, no zero padding: 'Sunday, March 3, 2024'."""
    return f"{d.strftime('%A')}, {d.strftime('%B')} {d.day}, {d.year}"


def resolve(
    now: datetime,
    tz: Optional[ZoneInfo] = None,
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
) -> SundayTarget:
    if not 0 <= cutoff_hour <= 24:
        raise ValueError(f"cutoff_hour must be within 0..24, got {cutoff_hour}")
    tz = tz or ZoneInfo(DEFAULT_TZ)

    local = _to_local(now, tz)
    today = local.date()
    dow = sunday_index(today)

    if dow == 0:
        if local.hour < cutoff_hour:
            target, is_today = today, True
        else:
            target, is_today = today + timedelta(days=7), False
    else:
        target, is_today = today + timedelta(days=(7 - dow) % 7), False

    return SundayTarget(date=target, is_today=is_today, label=sunday_label(target))


def upcoming_sundays(
    now: datetime,
    count: int,
    tz: Optional[ZoneInfo] = None,
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
) -> List[SundayTarget]:
    """The resolved Sunday followed by the next `count - 1` Sundays."""
    first = resolve(now, tz, cutoff_hour)
    out = [first]
    for i in range(1, max(count, 1)):
        d = first.date + timedelta(days=7 * i)
        out.append(SundayTarget(date=d, is_today=False, label=sunday_label(d)))
    return out
