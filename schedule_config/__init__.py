"""
schedule_config -- single public entrypoint for scheduling configuration.

Responsibility:
    Provides the ONLY way to obtain scheduling policy at runtime through
    ``get_active_config()``: variance thresholds, role policy, business
    timezone and default phase durations.

Architecture position:
    Configuration -- YAML-driven policy, validated on load.
    This package sits above ``schedule_kernel`` and ``schedule_engines``.
    The kernel and engines MUST NEVER import from ``schedule_config``;
    bridges in this package translate the config into their inputs.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - A configuration that fails validation is never returned.
    - Same YAML always produces the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the requested configuration file is missing.
    - ``ValueError`` -- validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``SCHEDULE_CONFIG_TRACE`` log entry containing the config_id, version
    and checksum, tying schedule operations to the policy that governed them.
"""

from __future__ import annotations

import logging
from pathlib import Path

from schedule_config.loader import load_config_file
from schedule_config.schema import SchedulingConfig
from schedule_config.validator import validate_configuration

_logger = logging.getLogger("schedule_kernel.config")

# Default configuration set
_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | None = None) -> SchedulingConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to a configuration YAML file.
            Defaults to schedule_config/sets/default.yaml.

    Returns:
        A validated, frozen ``SchedulingConfig``.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ValueError: If configuration validation fails.
    """
    path = config_path or _DEFAULT_CONFIG_PATH
    config = load_config_file(path)

    validation = validate_configuration(config)
    if not validation.is_valid:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("config_validation_warning", extra={"warning": warning})

    _logger.info(
        "SCHEDULE_CONFIG_TRACE",
        extra={
            "trace_type": "SCHEDULE_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "business_timezone": config.business_timezone,
            "holiday_calendar": config.holiday_calendar,
        },
    )
    return config


__all__ = ["SchedulingConfig", "get_active_config"]
