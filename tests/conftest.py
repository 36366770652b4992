"""
Pytest fixtures for the schedule kernel test suite.

Provides:
- Structured-logging setup and a ``captured_logs`` fixture
- In-memory SQLite sessions (one fresh database per test)
- Deterministic clock and actor fixtures
"""

import json
import logging
from datetime import date
from io import StringIO

import pytest
from sqlalchemy.orm import Session

from schedule_kernel.db.engine import create_db_engine, create_tables
from schedule_kernel.domain.clock import DeterministicClock
from schedule_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from schedule_kernel.services.authorization import ActorContext, Role

# Kickoff used across the suite: Monday 2 June 2025
KICKOFF = date(2025, 6, 2)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture schedule_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            build_schedule(...)
            logs = captured_logs()
            assert any(r["message"] == "schedule_build_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("schedule_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    """A fresh in-memory SQLite database with every table created."""
    db_engine = create_db_engine("sqlite:///:memory:")
    create_tables(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session(engine):
    """Session over the per-test database; rolled back at teardown."""
    db_session = Session(bind=engine, expire_on_commit=False)
    yield db_session
    db_session.rollback()
    db_session.close()


# =============================================================================
# Clock and actors
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Clock fixed at noon in Lima on the suite's kickoff date."""
    return DeterministicClock.on_date(KICKOFF)


@pytest.fixture
def manager():
    return ActorContext(actor_id="manager-1", role=Role.MANAGER)


@pytest.fixture
def architect():
    return ActorContext(actor_id="architect-1", role=Role.ARQUITECTO_RPA)


@pytest.fixture
def consultant():
    return ActorContext(actor_id="consultant-1", role=Role.CONSULTOR)
