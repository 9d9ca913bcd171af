# sundayreg/schemas/registration.py
from __future__ import annotations

from datetime import date, date as _date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from sundayreg.models.registration import RegistrantType


class _Camel(BaseModel):
    # The form posts camelCase; Python code uses snake_case.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def coerce_registrant_type(v):
    """Accept 'member', 'GUEST', ' Guest ' etc.; anything else is left for the enum to reject."""
    if isinstance(v, RegistrantType):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        for t in RegistrantType:
            if t.value.lower() == s:
                return t
    return v


# ---------- Intake ----------

class RegistrantIn(_Camel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    registrant_type: RegistrantType = Field(..., alias="type")

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("registrant_type", mode="before")
    @classmethod
    def _type(cls, v):
        return coerce_registrant_type(v)


class SubmissionIn(_Camel):
    """Payload posted by the registration form."""

    community: Optional[str] = Field(None, max_length=64)
    session_info: Optional[str] = Field(None, max_length=200)
    # Normally the value the form got from GET /registrations/sunday.
    # When omitted the server resolves it at submit time.
    sunday_date: Optional[date] = None
    registrants: List[RegistrantIn] = Field(..., min_length=1)

    @field_validator("community", "session_info", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("sunday_date")
    @classmethod
    def _must_be_sunday(cls, v: Optional[date]) -> Optional[date]:
        if v is not None and v.weekday() != 6:
            raise ValueError(f"{v.isoformat()} is not a Sunday")
        return v


class SubmissionResult(_Camel):
    success: bool
    message: str
    count: int = 0
    emails_sent: int = 0
    email_errors: int = 0
    # addresses only; transport error detail stays in the server log
    failed_emails: List[str] = Field(default_factory=list)
    sunday_date: Optional[date] = None
    sunday_label: Optional[str] = None
    dashboards_refreshed: bool = False


# ---------- Stored rows ----------

class RegistrationRecord(_Camel):
    timestamp: datetime
    community: str
    first_name: str
    last_name: str
    email: str
    registrant_type: RegistrantType = Field(..., alias="type")
    session_label: str
    sunday_date: Optional[date] = None

    @field_validator("registrant_type", mode="before")
    @classmethod
    def _type(cls, v):
        return coerce_registrant_type(v)


# ---------- Sunday resolution ----------

class SundayTarget(_Camel):
    date: _date
    is_today: bool
    label: str


class SundayTargetOut(SundayTarget):
    timezone: str
    cutoff_hour: int
    upcoming: List[SundayTarget] = Field(default_factory=list)
