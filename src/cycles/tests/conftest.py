"""Shared fixtures and log builders for cycle engine tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.cycles.config_loader import CycleConfig, load_cycle_config
from src.cycles.models import FlowIntensity, PeriodLog

TEST_DATE = date(2024, 2, 10)


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cycle_config() -> CycleConfig:
    """Load the bundled cycle config for tests."""
    return load_cycle_config()


# ---------------------------------------------------------------------------
# Log builders
# ---------------------------------------------------------------------------


def make_log(
    start: date,
    period_days: int = 5,
    flow: FlowIntensity = FlowIntensity.medium,
) -> PeriodLog:
    return PeriodLog(
        start_date=start,
        end_date=start + timedelta(days=period_days - 1),
        flow_intensity=flow,
    )


def build_logs(
    cycle_lengths: list[int],
    start: date = date(2024, 1, 1),
    period_days: int = 5,
) -> list[PeriodLog]:
    """Build len(cycle_lengths) + 1 logs separated by the given cycle lengths."""
    logs = [make_log(start, period_days)]
    for length in cycle_lengths:
        start += timedelta(days=length)
        logs.append(make_log(start, period_days))
    return logs


@pytest.fixture
def two_logs() -> list[PeriodLog]:
    """Two 5-day periods 28 days apart, starting 2024-01-01."""
    return build_logs([28])


@pytest.fixture
def regular_logs() -> list[PeriodLog]:
    """Seven perfectly regular 28-day cycles."""
    return build_logs([28] * 6)
