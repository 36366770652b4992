"""
SchedulingConfig schema.

Defines the human-authored, reviewable scheduling policy.  YAML sets are
parsed into these types by the loader, checked by the validator, and
translated into engine and service inputs by the bridges.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Progress classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VarianceThresholdsDef:
    """Cutoffs (percentage points / activity count) for progress variance."""

    tolerance: int = 5
    critical_gap: int = 20
    critical_delayed_activities: int = 3


# ---------------------------------------------------------------------------
# Role policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RolePolicy:
    """Which role codes may perform schedule-affecting operations."""

    schedule_editors: tuple[str, ...] = ("MANAGER", "ARQUITECTO_RPA")
    holiday_admins: tuple[str, ...] = ("MANAGER",)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SchedulingConfig:
    """A complete, versioned scheduling configuration set."""

    config_id: str
    version: int
    business_timezone: str = "America/Lima"
    holiday_calendar: str = "PE"
    variance_thresholds: VarianceThresholdsDef = field(default_factory=VarianceThresholdsDef)
    roles: RolePolicy = field(default_factory=RolePolicy)
    default_phase_durations: dict[str, int] = field(default_factory=dict)
    checksum: str = ""
