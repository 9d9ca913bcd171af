# sundayreg/services/aggregates.py
"""
Dashboard views over the full set of registration records.

Every function here is a pure, total recompute: hand it all the rows and
it returns fresh numbers. Nothing is cached and nothing is updated
incrementally.
"""
from __future__ import annotations

import calendar
from collections import OrderedDict
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from sundayreg.models.registration import RegistrantType
from sundayreg.schemas.dashboard import (
    AggregateRow,
    DashboardSnapshot,
    MonthlySummary,
    SundaySummary,
    YearlySummary,
)
from sundayreg.schemas.registration import RegistrationRecord


# ---------- helpers ----------

def _norm_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _local(ts: datetime, tz: Optional[ZoneInfo]) -> datetime:
    # SQLite hands back naive datetimes; those were written in local time already.
    if tz is None or ts.tzinfo is None:
        return ts
    return ts.astimezone(tz)


def month_label(year: int, month: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def _average(total: int, count: int) -> int:
    """Whole-number mean, halves rounded up. 0 when there is nothing to average."""
    if not count:
        return 0
    return int((Decimal(total) / count).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def count_rows(label: str, records: Iterable[RegistrationRecord]) -> AggregateRow:
    total = members = guests = 0
    emails = set()
    for r in records:
        total += 1
        if r.registrant_type == RegistrantType.member:
            members += 1
        elif r.registrant_type == RegistrantType.guest:
            guests += 1
        e = _norm_email(r.email)
        if e:
            emails.add(e)
    return AggregateRow(
        label=label,
        total=total,
        members=members,
        guests=guests,
        unique_emails=len(emails),
    )


def _in_month(r: RegistrationRecord, year: int, month: int, tz: Optional[ZoneInfo]) -> bool:
    ts = _local(r.timestamp, tz)
    return ts.year == year and ts.month == month


# ---------- views ----------

def by_month(
    records: Sequence[RegistrationRecord],
    year: int,
    month: int,
    tz: Optional[ZoneInfo] = None,
) -> AggregateRow:
    """Counts for registrations *made* in (year, month), by timestamp."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}")
    return count_rows(
        month_label(year, month),
        (r for r in records if _in_month(r, year, month, tz)),
    )


def by_year(
    records: Sequence[RegistrationRecord],
    year: int,
    today: date,
    tz: Optional[ZoneInfo] = None,
) -> YearlySummary:
    """
    One row per month of `year` plus a grand total.

    The current year stops at today's month; past years get all twelve;
    a future year has no month rows.
    """
    if year < today.year:
        last_month = 12
    elif year == today.year:
        last_month = today.month
    else:
        last_month = 0

    in_year = [r for r in records if _local(r.timestamp, tz).year == year]
    months = [by_month(in_year, year, m, tz) for m in range(1, last_month + 1)]

    # Month rows always sum to the total; unique contacts are distinct over the
    # whole year (a person registering in two months counts once).
    counted = [r for r in in_year if _local(r.timestamp, tz).month <= last_month]
    total = AggregateRow(
        label=f"Total {year}",
        total=sum(m.total for m in months),
        members=sum(m.members for m in months),
        guests=sum(m.guests for m in months),
        unique_emails=len({_norm_email(r.email) for r in counted if _norm_email(r.email)}),
    )
    return YearlySummary(year=year, months=months, total=total)


def by_sunday_date(records: Sequence[RegistrationRecord]) -> SundaySummary:
    """Group on the Sunday the registration is *for*; newest Sunday first."""
    groups: Dict[date, List[RegistrationRecord]] = {}
    for r in records:
        if r.sunday_date is None:
            continue
        groups.setdefault(r.sunday_date, []).append(r)

    rows = [
        count_rows(d.isoformat(), groups[d])
        for d in sorted(groups, reverse=True)
    ]
    total = sum(row.total for row in rows)
    sunday_count = len(rows)
    return SundaySummary(
        rows=rows,
        sunday_count=sunday_count,
        total=total,
        members=sum(row.members for row in rows),
        guests=sum(row.guests for row in rows),
        average_per_sunday=_average(total, sunday_count),
    )


def build_dashboards(
    records: Sequence[RegistrationRecord],
    now: datetime,
    tz: Optional[ZoneInfo] = None,
    community: Optional[str] = None,
) -> DashboardSnapshot:
    """All three views in one pass over the same record set."""
    local_now = _local(now, tz)
    today = local_now.date()
    return DashboardSnapshot(
        community=community,
        generated_at=local_now,
        monthly=MonthlySummary(
            year=today.year,
            month=today.month,
            row=by_month(records, today.year, today.month, tz),
        ),
        yearly=by_year(records, today.year, today, tz),
        sundays=by_sunday_date(records),
    )


def group_by_email(items: Iterable, key=lambda x: x.email) -> "OrderedDict[str, list]":
    """Bucket anything with an email by normalised address, first-seen order kept."""
    out: "OrderedDict[str, list]" = OrderedDict()
    for item in items:
        e = _norm_email(key(item))
        if not e:
            continue
        out.setdefault(e, []).append(item)
    return out
