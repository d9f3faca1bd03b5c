"""Cycle forecasting: day-level calendar projections and next-cycle summary.

Projections assume a constant 14-day luteal phase, so ovulation is placed
14 days before the following period and the fertile window is the 5 days
leading up to it plus ovulation day itself.

Logged periods always win over projections for the same calendar date.
The predictor keeps no logs between calls; every result is recomputed from
the logs passed in.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from src.cycles.analyzer import CycleStatisticsAnalyzer, chronological, most_recent_first
from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.fertility import FertilityWindowCalculator, OvulationPrediction
from src.cycles.models import (
    CycleDay,
    CyclePhase,
    CyclePrediction,
    DayIntensity,
    DayPhase,
    PeriodLog,
    PhaseRange,
)

logger = logging.getLogger("cadence.cycles.predictor")

# Confidence blend weights.  Fixed policy, not configuration.
CYCLE_COUNT_SATURATION = 9
CYCLE_COUNT_FLOOR = 0.7
VARIATION_FLOOR = 0.8

# Ovulation never lands closer than this to the cycle start.
MIN_OVULATION_OFFSET = 2


@dataclass
class FertilityStatus:
    """Fertility flags for one reference day.

    Attributes:
        is_fertile:         Day is a fertile or ovulation day.
        is_ovulation:       Day is the predicted ovulation day.
        next_fertile_start: First fertile/ovulation day after the reference day.
        next_ovulation:     First ovulation day after the reference day.
    """

    is_fertile: bool = False
    is_ovulation: bool = False
    next_fertile_start: date | None = None
    next_ovulation: date | None = None


def prediction_confidence(
    regularity: float,
    cycle_count: int,
    mean: float,
    stddev: float,
    min_cycles: int = 3,
) -> int:
    """Combine regularity, history size and spread into a 0–100 confidence.

    ``regularity × (0.7 + 0.3 × count_factor) × (0.8 + 0.2 × spread_factor)``
    where ``count_factor = clamp((n − 3) / 9)`` and
    ``spread_factor = max(0, 1 − stddev / mean)``.
    """
    count_factor = max(0.0, min(1.0, (cycle_count - min_cycles) / CYCLE_COUNT_SATURATION))
    confidence = regularity * (CYCLE_COUNT_FLOOR + (1 - CYCLE_COUNT_FLOOR) * count_factor)

    spread_factor = max(0.0, 1.0 - stddev / mean) if mean > 0 else 0.0
    confidence *= VARIATION_FLOOR + (1 - VARIATION_FLOOR) * spread_factor

    return round(max(0.0, min(100.0, confidence)))


def period_intensity(day_index: int) -> DayIntensity:
    """Bleeding intensity by day of period: heavy, medium, then light."""
    if day_index == 0:
        return DayIntensity.heavy
    if day_index < 2:
        return DayIntensity.medium
    return DayIntensity.light


class CyclePredictor:
    """Project future periods, fertile windows and ovulation days.

    Usage::

        predictor = CyclePredictor()
        calendar = predictor.predict(logs, from_date=date(2024, 2, 10))
        summary = predictor.predict_next_cycle(logs)
        if summary and summary.is_sufficient:
            print(summary.next_period_start, summary.confidence)
    """

    def __init__(
        self,
        config: CycleConfig | None = None,
        analyzer: CycleStatisticsAnalyzer | None = None,
        fertility: FertilityWindowCalculator | None = None,
    ) -> None:
        self._config = config or get_cycle_config()
        self._analyzer = analyzer or CycleStatisticsAnalyzer(self._config)
        self._fertility = fertility or FertilityWindowCalculator(self._config)

    @property
    def analyzer(self) -> CycleStatisticsAnalyzer:
        return self._analyzer

    # ------------------------------------------------------------------
    # Anchors
    # ------------------------------------------------------------------

    @staticmethod
    def next_period_start(last_start: date, from_date: date, cycle_length: int) -> date:
        """First projected period start that is not before ``from_date``.

        When ``from_date`` is on or before ``last_start`` the last logged
        start itself is the anchor.
        """
        if from_date <= last_start:
            return last_start
        elapsed = (from_date - last_start).days
        cycles = -(-elapsed // cycle_length)  # ceiling division
        return last_start + timedelta(days=cycles * cycle_length)

    @staticmethod
    def cycle_start_for(last_start: date, on_date: date, cycle_length: int) -> date:
        """Start of the (possibly projected) cycle that contains ``on_date``."""
        if on_date <= last_start:
            return last_start
        elapsed = (on_date - last_start).days
        return last_start + timedelta(days=(elapsed // cycle_length) * cycle_length)

    def ovulation_offset(self, cycle_length: int) -> int:
        """Days from cycle start to ovulation (next start minus luteal phase)."""
        luteal = self._config.prediction.luteal_phase_days
        return max(cycle_length - luteal, MIN_OVULATION_OFFSET)

    # ------------------------------------------------------------------
    # Day-level calendar
    # ------------------------------------------------------------------

    def predict(
        self,
        logs: Iterable[PeriodLog],
        from_date: date | None = None,
    ) -> list[CycleDay]:
        """Logged period days plus projections for the next cycles.

        Args:
            logs:      Validated period logs in any order.
            from_date: Reference date (defaults to today).  The first
                       projected period never starts before it.

        Returns:
            CycleDay entries sorted ascending by date.  Empty when there
            are no logs.
        """
        ordered = most_recent_first(logs)
        if not ordered:
            logger.debug("No period logs available for predictions")
            return []

        from_date = from_date or date.today()
        stats = self._analyzer.analyze(ordered)
        cycle_length = self._analyzer.predicted_cycle_length(stats)
        anchor = self.next_period_start(ordered[0].start_date, from_date, cycle_length)

        logger.debug(
            "Projecting from %s: anchor=%s cycle=%d period=%d",
            from_date, anchor, cycle_length, stats.average_period_length,
        )
        return self._build_calendar(ordered, anchor, cycle_length, stats.average_period_length)

    def _build_calendar(
        self,
        logs: Sequence[PeriodLog],
        anchor: date,
        cycle_length: int,
        period_length: int,
    ) -> list[CycleDay]:
        days: dict[date, CycleDay] = {}

        def _add(day: CycleDay) -> None:
            if day.date not in days:
                days[day.date] = day

        for log in chronological(logs):
            for i in range(log.period_length):
                _add(
                    CycleDay(
                        date=log.start_date + timedelta(days=i),
                        phase=DayPhase.period,
                        intensity=period_intensity(i),
                        is_prediction=False,
                    )
                )

        fertile_days = self._config.prediction.fertile_window_days
        ovulation_offset = self.ovulation_offset(cycle_length)
        for cycle in range(self._config.prediction.horizon_cycles):
            cycle_start = anchor + timedelta(days=cycle * cycle_length)

            for i in range(period_length):
                _add(
                    CycleDay(
                        date=cycle_start + timedelta(days=i),
                        phase=DayPhase.period,
                        intensity=period_intensity(i),
                        is_prediction=True,
                    )
                )

            ovulation = cycle_start + timedelta(days=ovulation_offset)
            for offset in range(-(fertile_days - 1), 1):
                _add(
                    CycleDay(
                        date=ovulation + timedelta(days=offset),
                        phase=DayPhase.ovulation if offset == 0 else DayPhase.fertile,
                        intensity=DayIntensity.none,
                        is_prediction=True,
                    )
                )

        return sorted(days.values(), key=lambda d: d.date)

    # ------------------------------------------------------------------
    # Summary forecast
    # ------------------------------------------------------------------

    def predict_next_cycle(
        self,
        logs: Iterable[PeriodLog],
        from_date: date | None = None,
    ) -> CyclePrediction | None:
        """Summary forecast of the next period and its phases.

        Never raises for thin history: a single log yields defaults with
        ``based_on_cycle_count == 1`` and zero confidence.  Callers decide
        whether the forecast is usable via ``is_sufficient``.

        Args:
            logs:      Validated period logs in any order.
            from_date: Optional reference date.  When given, the forecast is
                       advanced by whole cycles until it is not before it.

        Returns:
            CyclePrediction, or None when there are no logs at all.
        """
        ordered = most_recent_first(logs)
        if not ordered:
            return None

        stats = self._analyzer.analyze(ordered)
        cycle_length = self._analyzer.predicted_cycle_length(stats)
        period_length = stats.average_period_length
        min_cycles = self._config.prediction.min_cycles_for_prediction

        start = ordered[0].start_date + timedelta(days=cycle_length)
        if from_date is not None and start < from_date:
            start = self.next_period_start(ordered[0].start_date, from_date, cycle_length)

        confidence = prediction_confidence(
            stats.regularity_score,
            len(ordered),
            stats.mean_cycle_length,
            stats.standard_deviation,
            min_cycles,
        )

        return CyclePrediction(
            next_period_start=start,
            next_period_end=start + timedelta(days=period_length - 1),
            confidence=confidence,
            based_on_cycle_count=len(ordered),
            average_cycle_length=stats.average_cycle_length,
            predicted_cycle_length=cycle_length,
            standard_deviation=stats.standard_deviation,
            regularity_score=stats.regularity_score,
            phases_prediction=self.phase_ranges(start, cycle_length, period_length),
            min_cycles_for_prediction=min_cycles,
        )

    def phase_ranges(
        self, cycle_start: date, cycle_length: int, period_length: int
    ) -> dict[CyclePhase, PhaseRange]:
        """Inclusive date range of each phase for a cycle starting at ``cycle_start``.

        The menstrual phase is cut short if needed so at least one
        follicular day precedes ovulation.
        """
        ovulation_offset = self.ovulation_offset(cycle_length)
        ovulation = cycle_start + timedelta(days=ovulation_offset)
        menstrual_end = cycle_start + timedelta(
            days=min(period_length - 1, ovulation_offset - MIN_OVULATION_OFFSET)
        )
        return {
            CyclePhase.menstrual: PhaseRange(cycle_start, menstrual_end),
            CyclePhase.follicular: PhaseRange(
                menstrual_end + timedelta(days=1), ovulation - timedelta(days=1)
            ),
            CyclePhase.ovulation: PhaseRange(ovulation, ovulation),
            CyclePhase.luteal: PhaseRange(
                ovulation + timedelta(days=1),
                cycle_start + timedelta(days=cycle_length - 1),
            ),
        }

    # ------------------------------------------------------------------
    # Reference-day views
    # ------------------------------------------------------------------

    def calendar_for(self, logs: Sequence[PeriodLog], on_date: date) -> list[CycleDay]:
        """Calendar around ``on_date``.

        Projections start from the cycle containing ``on_date``.  Dates
        between logged periods also carry the fertile window and ovulation
        inferred from the following period's start, so past days are marked
        the same way ``StatisticalPhaseModel`` marks them.
        """
        ordered = most_recent_first(logs)
        if not ordered:
            return []
        stats = self._analyzer.analyze(ordered)
        cycle_length = self._analyzer.predicted_cycle_length(stats)
        cycle_start = self.cycle_start_for(ordered[0].start_date, on_date, cycle_length)

        days = {day.date: day for day in self.predict(ordered, from_date=cycle_start)}
        for day in self.inferred_history(ordered):
            days.setdefault(day.date, day)
        return sorted(days.values(), key=lambda d: d.date)

    def inferred_history(self, logs: Iterable[PeriodLog]) -> list[CycleDay]:
        """Fertile and ovulation days inferred between consecutive logged periods.

        Ovulation is the later period's start minus the luteal phase.  Days
        that fall inside a logged period are skipped.
        """
        ordered = chronological(logs)
        logged = {
            log.start_date + timedelta(days=i)
            for log in ordered
            for i in range(log.period_length)
        }
        luteal = self._config.prediction.luteal_phase_days
        fertile_days = self._config.prediction.fertile_window_days

        inferred: list[CycleDay] = []
        for previous, following in zip(ordered, ordered[1:]):
            ovulation = following.start_date - timedelta(days=luteal)
            for offset in range(-(fertile_days - 1), 1):
                day = ovulation + timedelta(days=offset)
                if day <= previous.end_date or day in logged:
                    continue
                inferred.append(
                    CycleDay(
                        date=day,
                        phase=DayPhase.ovulation if offset == 0 else DayPhase.fertile,
                        intensity=DayIntensity.none,
                        is_prediction=True,
                    )
                )
        return inferred

    def current_phase(
        self, logs: Sequence[PeriodLog], on_date: date | None = None
    ) -> tuple[DayPhase, int]:
        """Phase of ``on_date``, or the next marked phase and days until it.

        Returns:
            ``(phase, days_until)``; ``days_until`` is 0 when ``on_date``
            itself is marked, and ``(unknown, 0)`` when nothing is ahead.
        """
        on_date = on_date or date.today()
        calendar = self.calendar_for(logs, on_date)
        for day in calendar:
            if day.date == on_date:
                return day.phase, 0
            if day.date > on_date:
                return day.phase, (day.date - on_date).days
        return DayPhase.unknown, 0

    def fertility_status(
        self, logs: Sequence[PeriodLog], on_date: date | None = None
    ) -> FertilityStatus:
        """Whether ``on_date`` is fertile / ovulation day, plus what comes next."""
        on_date = on_date or date.today()
        calendar = self.calendar_for(logs, on_date)
        if not calendar:
            return FertilityStatus()

        fertile = (DayPhase.fertile, DayPhase.ovulation)
        fertile_dates = {d.date for d in calendar if d.phase in fertile}
        window_starts = sorted(
            day for day in fertile_dates if day - timedelta(days=1) not in fertile_dates
        )
        today = next((d for d in calendar if d.date == on_date), None)
        upcoming = [d for d in calendar if d.date > on_date]
        return FertilityStatus(
            is_fertile=today is not None and today.phase in fertile,
            is_ovulation=today is not None and today.phase == DayPhase.ovulation,
            next_fertile_start=next((day for day in window_starts if day > on_date), None),
            next_ovulation=next(
                (d.date for d in upcoming if d.phase == DayPhase.ovulation), None
            ),
        )

    def predict_ovulation(
        self, logs: Sequence[PeriodLog], from_date: date | None = None
    ) -> OvulationPrediction | None:
        """Next expected ovulation with fertility windows.

        The ovulation preceding the predicted next period is used unless it
        is already behind ``from_date``, in which case the one after it is.
        """
        prediction = self.predict_next_cycle(logs, from_date)
        if prediction is None:
            return None

        luteal = self._config.prediction.luteal_phase_days
        expected = prediction.next_period_start - timedelta(days=luteal)
        if from_date is not None and expected < from_date:
            expected = prediction.phases_prediction[CyclePhase.ovulation].start

        confidence = prediction.confidence / 100
        return OvulationPrediction(
            expected_date=expected,
            confidence=confidence,
            windows=self._fertility.compute_windows(expected, confidence),
        )
