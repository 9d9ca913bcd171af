# sundayreg/api/dashboards.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from sundayreg.api.errors import to_http
from sundayreg.dependencies import get_intake
from sundayreg.exceptions import RegistrationError
from sundayreg.schemas.dashboard import DashboardSnapshot, MonthlySummary, SundaySummary, YearlySummary
from sundayreg.services import aggregates
from sundayreg.services.intake import RegistrationIntake

router = APIRouter(prefix="/dashboards", tags=["Dashboards"])


# ---------- /dashboards ----------
@router.get("", response_model=DashboardSnapshot)
def snapshot(
    community: Optional[str] = None,
    intake: RegistrationIntake = Depends(get_intake),
):
    """All three views for the current month, year and Sunday history; nothing is published."""
    try:
        return intake.dashboards(community)
    except RegistrationError as e:
        raise to_http(e) from e


# ---------- /dashboards/monthly ----------
@router.get("/monthly", response_model=MonthlySummary)
def monthly(
    community: Optional[str] = None,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    intake: RegistrationIntake = Depends(get_intake),
):
    today = intake.now().date()
    y, m = year or today.year, month or today.month
    try:
        row = aggregates.by_month(intake.records(community), y, m, intake.settings.tz)
    except RegistrationError as e:
        raise to_http(e) from e
    return MonthlySummary(year=y, month=m, row=row)


# ---------- /dashboards/yearly ----------
@router.get("/yearly", response_model=YearlySummary)
def yearly(
    community: Optional[str] = None,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    intake: RegistrationIntake = Depends(get_intake),
):
    today = intake.now().date()
    try:
        return aggregates.by_year(
            intake.records(community), year or today.year, today, intake.settings.tz
        )
    except RegistrationError as e:
        raise to_http(e) from e


# ---------- /dashboards/sundays ----------
@router.get("/sundays", response_model=SundaySummary)
def sundays(
    community: Optional[str] = None,
    intake: RegistrationIntake = Depends(get_intake),
):
    try:
        return aggregates.by_sunday_date(intake.records(community))
    except RegistrationError as e:
        raise to_http(e) from e


# ---------- /dashboards/refresh ----------
@router.post("/refresh", response_model=DashboardSnapshot)
def refresh(
    community: Optional[str] = None,
    intake: RegistrationIntake = Depends(get_intake),
):
    """Recompute and publish every view (the spreadsheet tabs, for the sheets backend)."""
    try:
        intake.router.resolve_name(community)
    except RegistrationError as e:
        raise to_http(e) from e
    result = intake.refresh_dashboards(community)
    if not result.ok:
        raise HTTPException(status_code=503, detail="Dashboards could not be refreshed.")
    return result.snapshot
