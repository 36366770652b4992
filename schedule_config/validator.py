"""
Configuration Validator (``schedule_config.validator``).

Responsibility
--------------
Validates a parsed ``SchedulingConfig`` before it is handed to services:
thresholds are non-negative integers, role codes are known application
roles, the business timezone is a valid IANA name, and default phase
durations (when given) are complete and positive.

Failure modes
-------------
* Validation errors (``ConfigValidationResult.errors``)  -> the
  configuration MUST NOT be used.
* Validation warnings  -> usable, but should be reviewed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from schedule_config.schema import SchedulingConfig
from schedule_kernel.services.authorization import Role

_PHASE_KEYS = ("prepare", "connect", "realize", "run")
_KNOWN_CALENDARS = frozenset({"PE"})


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: SchedulingConfig) -> ConfigValidationResult:
    """Validate a configuration set; a result with errors MUST NOT be used."""
    result = ConfigValidationResult()

    _validate_thresholds(config, result)
    _validate_roles(config, result)
    _validate_timezone(config, result)
    _validate_calendar(config, result)
    _validate_phase_durations(config, result)

    return result


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_thresholds(config: SchedulingConfig, result: ConfigValidationResult) -> None:
    thresholds = config.variance_thresholds
    for name in ("tolerance", "critical_gap", "critical_delayed_activities"):
        value = getattr(thresholds, name)
        if not _is_int(value) or value < 0:
            result.add_error(f"variance_thresholds.{name} must be a non-negative integer, got {value!r}")
    if _is_int(thresholds.tolerance) and _is_int(thresholds.critical_gap):
        if thresholds.critical_gap < thresholds.tolerance:
            result.add_warning(
                "variance_thresholds.critical_gap is below tolerance; "
                "BEHIND can never be reported"
            )


def _validate_roles(config: SchedulingConfig, result: ConfigValidationResult) -> None:
    known = {r.value for r in Role}
    for group in ("schedule_editors", "holiday_admins"):
        codes = getattr(config.roles, group)
        if not codes:
            result.add_error(f"roles.{group} must name at least one role")
        for code in codes:
            if code not in known:
                result.add_error(f"roles.{group}: unknown role {code!r}")


def _validate_timezone(config: SchedulingConfig, result: ConfigValidationResult) -> None:
    try:
        ZoneInfo(config.business_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        result.add_error(f"business_timezone: unknown timezone {config.business_timezone!r}")


def _validate_calendar(config: SchedulingConfig, result: ConfigValidationResult) -> None:
    if config.holiday_calendar not in _KNOWN_CALENDARS:
        result.add_error(f"holiday_calendar: unsupported calendar {config.holiday_calendar!r}")


def _validate_phase_durations(config: SchedulingConfig, result: ConfigValidationResult) -> None:
    durations = config.default_phase_durations
    if not durations:
        return
    for key in _PHASE_KEYS:
        value = durations.get(key)
        if not _is_int(value) or value <= 0:
            result.add_error(f"default_phase_durations.{key} must be a positive integer, got {value!r}")
    extra = sorted(set(durations) - set(_PHASE_KEYS))
    if extra:
        result.add_warning(f"default_phase_durations: ignoring unknown keys {extra}")
