"""Shared fixtures and payload builders for API route tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from src.main import create_app


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def log_payload(cycle_lengths: list[int], start: date = date(2024, 1, 1), period_days: int = 5) -> list[dict]:
    """Period logs as JSON, separated by the given cycle lengths."""
    logs = []
    for length in [0, *cycle_lengths]:
        start += timedelta(days=length)
        logs.append(
            {
                "start_date": start.isoformat(),
                "end_date": (start + timedelta(days=period_days - 1)).isoformat(),
                "flow_intensity": "medium",
            }
        )
    return logs
