"""
Module: schedule_engines.hierarchy
Responsibility:
    Activity code hierarchy (section ``3``, item ``2.2``, sub-item ``2.2.3``)
    and the date summaries shown on phase and item rows of the Gantt.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from schedule_kernel.domain.values import Activity

SECTION = 0
ITEM = 1
SUB_ITEM = 2


@dataclass(frozen=True)
class DateSummary:
    """Inclusive calendar span covered by a group of activities."""

    start_date: date
    end_date: date
    total_days: int


def activity_level(code: str) -> int:
    """0 for sections, 1 for items, 2 for sub-items (and anything deeper)."""
    parts = code.split(".")
    if len(parts) == 1:
        return SECTION
    if len(parts) == 2:
        return ITEM
    return SUB_ITEM


def parent_code(code: str) -> str | None:
    """Item code a sub-item belongs to; None for items and sections."""
    parts = code.split(".")
    if len(parts) <= 2:
        return None
    return ".".join(parts[:2])


def get_sub_items(item_code: str, activities: Sequence[Activity]) -> list[Activity]:
    return [a for a in activities if parent_code(a.code) == item_code]


def has_sub_items(item_code: str, activities: Sequence[Activity]) -> bool:
    return any(parent_code(a.code) == item_code for a in activities)


def phase_date_summary(activities: Sequence[Activity]) -> DateSummary | None:
    """Earliest start to latest end over ``activities``; None if undated."""
    starts = [a.start_date for a in activities if a.start_date is not None]
    ends = [a.end_date for a in activities if a.end_date is not None]
    if not starts or not ends:
        return None
    start, end = min(starts), max(ends)
    return DateSummary(start_date=start, end_date=end, total_days=(end - start).days + 1)


def item_date_range(item_code: str, activities: Sequence[Activity]) -> DateSummary | None:
    """Date summary of an item together with its sub-items."""
    related = [a for a in activities if a.code == item_code]
    related.extend(get_sub_items(item_code, activities))
    return phase_date_summary(related)
