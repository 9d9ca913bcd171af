# sundayreg/models/registration.py
from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from sundayreg.db import Base


class RegistrantType(str, enum.Enum):
    member = "Member"
    guest = "Guest"


class Registration(Base):
    """One registrant for one Sunday. Rows are append-only."""

    __tablename__ = "registrations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # shared by every row of a submission batch
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    community: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, index=True)
    registrant_type: Mapped[RegistrantType] = mapped_column(
        Enum(RegistrantType, name="registrant_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    session_label: Mapped[str] = mapped_column(String(200), nullable=False)
    sunday_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)

    def __repr__(self) -> str:
        return (
            f"<Registration id={self.id} {self.first_name} {self.last_name} "
            f"type={self.registrant_type} sunday={self.sunday_date}>"
        )
