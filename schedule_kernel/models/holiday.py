"""
Module: schedule_kernel.models.holiday
Responsibility: ORM persistence for the non-working-day calendar.
Architecture position: Kernel > Models.  May import from db/base.py and domain/.

Invariants enforced:
    - One holiday per calendar date (unique constraint on ``date``).
    - ``year`` mirrors ``date.year`` for range lookups by year.
"""

from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from schedule_kernel.db.base import TrackedBase
from schedule_kernel.domain.values import Holiday


class HolidayRecord(TrackedBase):
    """A stored holiday, created by import or manual entry."""

    __tablename__ = "holidays"

    __table_args__ = (
        Index("idx_holiday_year", "year"),
    )

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<HolidayRecord {self.date.isoformat()} {self.name}>"

    def to_domain(self) -> Holiday:
        """Convert ORM model to the frozen domain value."""
        return Holiday(date=self.date, name=self.name, recurring=self.recurring)

    @classmethod
    def from_domain(cls, holiday: Holiday, created_by_id: str) -> HolidayRecord:
        """Create ORM model from a domain value."""
        return cls(
            date=holiday.date,
            name=holiday.name,
            year=holiday.date.year,
            recurring=holiday.recurring,
            created_by_id=created_by_id,
        )
