"""
Structured JSON logging for the schedule kernel.

Every record under the ``schedule_kernel`` logger is written as one JSON
object: the envelope (ts, level, logger, message), the request fields bound
through ``LogContext``, the ``extra`` fields of the call and, when an
exception is attached, its type, message and kernel error fields.

Services bind ``actor_id`` and ``project_id`` around each operation, so the
engine records emitted inside it (``SCHEDULE_ENGINE_TRACE``,
``holiday_data_missing``, ...) can be tied back to the project.
"""

__all__ = [
    "CONTEXT_FIELDS",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, TextIO

LOGGER_ROOT = "schedule_kernel"

CONTEXT_FIELDS = ("correlation_id", "actor_id", "project_id", "trace_id")

_EMPTY: Mapping[str, str] = MappingProxyType({})
_bound: ContextVar[Mapping[str, str]] = ContextVar("schedule_log_context", default=_EMPTY)


class LogContext:
    """
    Request-scoped log fields, carried in a single context variable.

    Only ``CONTEXT_FIELDS`` are kept; other names and None values are
    ignored.  Values are stored as strings, so a project UUID can be bound
    as is.
    """

    @staticmethod
    def _merged(fields: Mapping[str, object]) -> Mapping[str, str]:
        current = dict(_bound.get())
        for name, value in fields.items():
            if name in CONTEXT_FIELDS and value is not None:
                current[name] = str(value)
        return MappingProxyType(current)

    @classmethod
    def set(cls, **fields: object) -> None:
        """Set fields for the rest of the current context."""
        _bound.set(cls._merged(fields))

    @classmethod
    @contextmanager
    def bind(cls, **fields: object) -> Iterator[None]:
        """Set fields for the ``with`` block; the previous values come back on exit."""
        token = _bound.set(cls._merged(fields))
        try:
            yield
        finally:
            _bound.reset(token)

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_bound.get())

    @staticmethod
    def clear() -> None:
        _bound.set(_EMPTY)


_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    # UUID, Decimal and the rest
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # kernel errors keep their structured data as public attributes
    for name, value in vars(exc).items():
        if not name.startswith("_"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def get_logger(name: str) -> logging.Logger:
    """Logger ``schedule_kernel.<name>``."""
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


def _kernel_handlers(root: logging.Logger) -> list[logging.Handler]:
    return [h for h in root.handlers if isinstance(h.formatter, StructuredFormatter)]


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``schedule_kernel`` logger.

    Idempotent: once a structured handler is attached, later calls change
    nothing.  ``handler`` wins over ``stream``; the default is stderr.
    """
    root = logging.getLogger(LOGGER_ROOT)
    if _kernel_handlers(root):
        return

    target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    root.addHandler(target)
    root.setLevel(level)
    root.propagate = False


def reset_logging() -> None:
    """Drop every handler of the ``schedule_kernel`` logger. For tests."""
    root = logging.getLogger(LOGGER_ROOT)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(logging.WARNING)
