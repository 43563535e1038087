"""
Pytest fixtures for the finance intake test suite.

Provides:
- Structured logging setup and log capture
- A deterministic clock (month resolution depends on "today")
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO

import pytest

from finance_intake.domain.clock import DeterministicClock
from finance_intake.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
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
    Capture finance_intake logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.parse(workbook)
            logs = captured_logs()
            assert any(r["message"] == "workbook_parsed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("finance_intake")
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
# Clock fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Clock pinned to 2024-07-15 so "current month/year" fallbacks are stable."""
    return DeterministicClock(datetime(2024, 7, 15, 9, 30, tzinfo=timezone.utc))
