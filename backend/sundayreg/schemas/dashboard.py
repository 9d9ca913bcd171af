# sundayreg/schemas/dashboard.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Camel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AggregateRow(_Camel):
    """Counts for one month, one year or one Sunday date."""

    label: str
    total: int = 0
    members: int = 0
    guests: int = 0
    unique_emails: int = 0


class MonthlySummary(_Camel):
    year: int
    month: int
    row: AggregateRow


class YearlySummary(_Camel):
    year: int
    months: List[AggregateRow] = Field(default_factory=list)
    total: AggregateRow


class SundaySummary(_Camel):
    # most recent Sunday first
    rows: List[AggregateRow] = Field(default_factory=list)
    sunday_count: int = 0
    total: int = 0
    members: int = 0
    guests: int = 0
    average_per_sunday: int = 0


class DashboardSnapshot(_Camel):
    community: Optional[str] = None
    generated_at: datetime
    monthly: MonthlySummary
    yearly: YearlySummary
    sundays: SundaySummary
