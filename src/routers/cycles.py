"""Cycle engine API endpoints.

All endpoints are stateless: the client posts its period logs with every
request and the engine recomputes everything from them.

Endpoints:
    POST /cycles/statistics — Average cycle/period length and regularity
    POST /cycles/calendar   — Logged and projected calendar days
    POST /cycles/prediction — Next-period forecast with phase ranges
    POST /cycles/fertility  — Ovulation, graded windows, daily outlook
    POST /cycles/phase      — Statistical and fixed day-of-cycle phase
    POST /cycles/insights   — Cycle, symptom and temperature insights
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, HTTPException

from src.cycles.analyzer import most_recent_first
from src.cycles.fertility import FertilityWindowCalculator
from src.dependencies import Classifier, EngineConfig, Insights, Predictor
from src.models.base import ErrorDetail
from src.models.cycles import (
    CycleDayRead,
    CyclePredictionRead,
    CycleRequest,
    CycleStatisticsRead,
    DailyFertilityStatusRead,
    FertilityRead,
    FertilityRequest,
    FertilityWindowRead,
    InsightRequest,
    InsightSummaryRead,
    PhaseRead,
    PhaseSnapshotRead,
)

logger = logging.getLogger("cadence.routers.cycles")

router = APIRouter(prefix="/cycles", tags=["cycles"])

MAX_DAILY_STATUS_DAYS = 92
_NO_LOGS = "At least one period log is required"


# ---------------------------------------------------------------------------
# POST /cycles/statistics
# ---------------------------------------------------------------------------


@router.post("/statistics", response_model=CycleStatisticsRead)
async def cycle_statistics(body: CycleRequest, predictor: Predictor) -> Any:
    """Cycle statistics.  Too little history yields defaults, not an error."""
    stats = predictor.analyzer.analyze(body.period_logs())
    return CycleStatisticsRead.model_validate(stats)


# ---------------------------------------------------------------------------
# POST /cycles/calendar
# ---------------------------------------------------------------------------


@router.post("/calendar", response_model=list[CycleDayRead])
async def cycle_calendar(body: CycleRequest, predictor: Predictor) -> Any:
    """Logged period days plus the next projected cycles, ascending by date."""
    calendar = predictor.predict(body.period_logs(), body.reference_date)
    logger.debug("Calendar: %d logs → %d days", len(body.logs), len(calendar))
    return [CycleDayRead.model_validate(day) for day in calendar]


# ---------------------------------------------------------------------------
# POST /cycles/prediction
# ---------------------------------------------------------------------------


@router.post(
    "/prediction",
    response_model=CyclePredictionRead,
    responses={422: {"model": ErrorDetail}},
)
async def cycle_prediction(body: CycleRequest, predictor: Predictor) -> Any:
    """Next-period forecast.

    Check ``is_sufficient`` before trusting the dates: fewer than three logs
    still produce a forecast, built on defaults.
    """
    prediction = predictor.predict_next_cycle(body.period_logs(), body.from_date)
    if prediction is None:
        raise HTTPException(status_code=422, detail=_NO_LOGS)
    return CyclePredictionRead.model_validate(prediction)


# ---------------------------------------------------------------------------
# POST /cycles/fertility
# ---------------------------------------------------------------------------


@router.post(
    "/fertility",
    response_model=FertilityRead,
    responses={422: {"model": ErrorDetail}},
)
async def cycle_fertility(
    body: FertilityRequest, predictor: Predictor, config: EngineConfig
) -> Any:
    """Next ovulation, its graded windows, and a day-by-day outlook."""
    logs = body.period_logs()
    reference = body.reference_date
    ovulation = predictor.predict_ovulation(logs, reference)
    if ovulation is None:
        raise HTTPException(status_code=422, detail=_NO_LOGS)

    status_from = body.status_from or min(w.start for w in ovulation.windows)
    status_to = body.status_to or max(w.end for w in ovulation.windows)
    if status_to - status_from > timedelta(days=MAX_DAILY_STATUS_DAYS):
        raise HTTPException(
            status_code=422,
            detail=f"Daily status range is limited to {MAX_DAILY_STATUS_DAYS} days",
        )

    daily = FertilityWindowCalculator(config).daily_status(
        status_from, status_to, ovulation.expected_date, ovulation.confidence
    )
    status = predictor.fertility_status(logs, reference)
    return FertilityRead(
        ovulation_date=ovulation.expected_date,
        confidence=ovulation.confidence,
        windows=[FertilityWindowRead.model_validate(w) for w in ovulation.windows],
        is_fertile=status.is_fertile,
        is_ovulation=status.is_ovulation,
        next_fertile_start=status.next_fertile_start,
        next_ovulation=status.next_ovulation,
        daily=[DailyFertilityStatusRead.model_validate(d) for d in daily],
    )


# ---------------------------------------------------------------------------
# POST /cycles/phase
# ---------------------------------------------------------------------------


@router.post("/phase", response_model=PhaseRead)
async def cycle_phase(
    body: CycleRequest, predictor: Predictor, classifier: Classifier
) -> Any:
    """Phase of the reference date under both phase models."""
    logs = most_recent_first(body.period_logs())
    on_date = body.reference_date

    day = classifier.classify_day(on_date, logs)
    next_phase, days_until = predictor.current_phase(logs, on_date)

    # No fixed-boundary phase before the first logged period.
    snapshot = None
    last_start = next((log.start_date for log in logs if log.start_date <= on_date), None)
    if last_start is not None:
        cycle_length = predictor.analyzer.analyze(logs).average_cycle_length
        snapshot = PhaseSnapshotRead.model_validate(
            classifier.fixed_boundary.snapshot(on_date, last_start, cycle_length)
        )

    return PhaseRead(
        on_date=on_date,
        phase=day.phase,
        is_prediction=day.is_prediction,
        next_marked_phase=next_phase,
        days_until_next_marked=days_until,
        cycle_phase=snapshot,
    )


# ---------------------------------------------------------------------------
# POST /cycles/insights
# ---------------------------------------------------------------------------


@router.post("/insights", response_model=InsightSummaryRead)
async def cycle_insights(body: InsightRequest, aggregator: Insights) -> Any:
    """Insights ordered alert → warning → info."""
    summary = aggregator.summarize(
        body.period_logs(),
        [day.to_domain() for day in body.symptom_days],
        [reading.to_domain() for reading in body.temperatures],
        as_of=body.reference_date,
    )
    return InsightSummaryRead.model_validate(summary)
