# sundayreg/api/registrations.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from sundayreg.api.errors import to_http
from sundayreg.dependencies import get_intake
from sundayreg.exceptions import RegistrationError
from sundayreg.schemas.registration import (
    RegistrationRecord,
    SubmissionIn,
    SubmissionResult,
    SundayTargetOut,
)
from sundayreg.services.intake import RegistrationIntake
from sundayreg.services.sunday import upcoming_sundays

router = APIRouter(prefix="/registrations", tags=["Registrations"])
logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# OpenAPI "examples" for request body
# ─────────────────────────────────────────────────────────────────────────────
CREATE_EXAMPLES: Dict[str, Dict[str, Any]] = {
    "household": {
        "summary": "Household",
        "description": "Two people sharing one email get one confirmation.",
        "value": {
            "sundayDate": "2024-03-03",
            "sessionInfo": "Sunday Service 10:00",
            "registrants": [
                {"firstName": "Alice", "lastName": "Doe", "email": "alice@example.org", "type": "Member"},
                {"firstName": "Bob", "lastName": "Doe", "email": "alice@example.org", "type": "Guest"},
            ],
        },
    },
}

OPENAPI_REQUEST_EXAMPLES = {
    "requestBody": {"content": {"application/json": {"examples": CREATE_EXAMPLES}}}
}


@router.get("/sunday", response_model=SundayTargetOut)
def get_sunday_target(
    weeks: int = Query(1, ge=1, le=12, description="How many Sundays to offer"),
    intake: RegistrationIntake = Depends(get_intake),
) -> SundayTargetOut:
    """The Sunday a registration made right now applies to (what the form shows)."""
    s = intake.settings
    upcoming = upcoming_sundays(intake.now(), weeks, s.tz, s.cutoff_hour)
    first = upcoming[0]
    return SundayTargetOut(
        date=first.date,
        is_today=first.is_today,
        label=first.label,
        timezone=s.timezone,
        cutoff_hour=s.cutoff_hour,
        upcoming=upcoming,
    )


@router.post(
    "",
    response_model=SubmissionResult,
    status_code=201,
    openapi_extra=OPENAPI_REQUEST_EXAMPLES,
)
def submit_registration(
    payload: SubmissionIn,
    intake: RegistrationIntake = Depends(get_intake),
) -> SubmissionResult:
    logger.info(
        "submit received: community=%s sunday=%s registrants=%s",
        payload.community, payload.sunday_date, len(payload.registrants),
    )
    try:
        return intake.submit(payload)
    except RegistrationError as e:
        raise to_http(e) from e


@router.get("", response_model=List[RegistrationRecord])
def list_registrations(
    community: Optional[str] = None,
    limit: int = Query(100, ge=1, le=5000),
    intake: RegistrationIntake = Depends(get_intake),
) -> List[RegistrationRecord]:
    """Newest first. Display order only; rows in one batch share a timestamp."""
    try:
        return intake.records(community)[:limit]
    except RegistrationError as e:
        raise to_http(e) from e
