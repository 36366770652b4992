"""
Configuration Loader (``schedule_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into the typed
``schedule_config.schema`` dataclasses.  No service should call this
directly; the runtime entrypoint is ``schedule_config.get_active_config()``.

Invariants enforced
-------------------
* Required keys (``config_id``, ``version``) raise ``KeyError`` when
  missing; optional sections fall back to the schema defaults.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml

from schedule_config.schema import RolePolicy, SchedulingConfig, VarianceThresholdsDef


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_variance_thresholds(data: dict[str, Any]) -> VarianceThresholdsDef:
    """Parse VarianceThresholdsDef from a dict."""
    defaults = VarianceThresholdsDef()
    return VarianceThresholdsDef(
        tolerance=data.get("tolerance", defaults.tolerance),
        critical_gap=data.get("critical_gap", defaults.critical_gap),
        critical_delayed_activities=data.get(
            "critical_delayed_activities", defaults.critical_delayed_activities
        ),
    )


def parse_roles(data: dict[str, Any]) -> RolePolicy:
    """Parse RolePolicy from a dict."""
    defaults = RolePolicy()
    return RolePolicy(
        schedule_editors=tuple(data.get("schedule_editors", defaults.schedule_editors)),
        holiday_admins=tuple(data.get("holiday_admins", defaults.holiday_admins)),
    )


def parse_config(data: dict[str, Any]) -> SchedulingConfig:
    """
    Parse a ``SchedulingConfig`` from a dict.

    Postconditions:
        - ``checksum`` is the SHA-256 of the raw dict.
    Raises:
        KeyError: if ``config_id`` or ``version`` is missing.
    """
    config = SchedulingConfig(
        config_id=data["config_id"],
        version=data["version"],
        business_timezone=data.get("business_timezone", "America/Lima"),
        holiday_calendar=data.get("holiday_calendar", "PE"),
        variance_thresholds=parse_variance_thresholds(data.get("variance_thresholds") or {}),
        roles=parse_roles(data.get("roles") or {}),
        default_phase_durations=dict(data.get("default_phase_durations") or {}),
    )
    return replace(config, checksum=compute_checksum(data))


def load_config_file(path: Path) -> SchedulingConfig:
    """Load and parse one configuration YAML file."""
    return parse_config(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
