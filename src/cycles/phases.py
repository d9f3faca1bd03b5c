"""Cycle phase classification.

Two independent phase models live here and are deliberately kept apart:

``StatisticalPhaseModel``
    Day-level phases (period / fertile / ovulation / unknown) derived from
    the logs and the predictor's projections.

``FixedBoundaryPhaseModel``
    Physiological phases (menstrual / follicular / ovulation / luteal) from
    fixed day-of-cycle boundaries: days 1–5, 6–12, 13–16, then luteal.

The two can disagree for the same date.  Each call site picks one.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from src.cycles.analyzer import chronological
from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.models import CycleDay, CyclePhase, DayIntensity, DayPhase, PeriodLog
from src.cycles.predictor import CyclePredictor, period_intensity

logger = logging.getLogger("cadence.cycles.phases")


@dataclass(frozen=True)
class PhaseInfo:
    """Display information for a physiological phase."""

    name: str
    description: str
    symptoms: tuple[str, ...]
    duration: int


PHASE_INFO: dict[CyclePhase, PhaseInfo] = {
    CyclePhase.menstrual: PhaseInfo(
        name="Menstrual Phase",
        description="Your period is here",
        symptoms=("Menstrual flow", "Possible cramps", "May feel tired"),
        duration=5,
    ),
    CyclePhase.follicular: PhaseInfo(
        name="Follicular Phase",
        description="Building up energy",
        symptoms=("Increasing energy", "Enhanced mood", "Skin improvements"),
        duration=7,
    ),
    CyclePhase.ovulation: PhaseInfo(
        name="Ovulation Phase",
        description="High fertility window",
        symptoms=(
            "Increased energy levels",
            "Peak fertility",
            "Heightened sense of well-being",
        ),
        duration=4,
    ),
    CyclePhase.luteal: PhaseInfo(
        name="Luteal Phase",
        description="Post-ovulation phase",
        symptoms=(
            "Possible mood changes",
            "Energy levels decreasing",
            "May experience PMS",
        ),
        duration=12,
    ),
}


@dataclass
class PhaseSnapshot:
    """Fixed-boundary phase for one day, with countdowns.

    Attributes:
        phase:                 Phase on the reference day.
        day_of_cycle:          1-based day within the current cycle.
        days_until_next_phase: Days until the following phase begins.
        next_period_in:        Days until the next cycle's day 1.
        info:                  Display information for ``phase``.
    """

    phase: CyclePhase
    day_of_cycle: int
    days_until_next_phase: int
    next_period_in: int
    info: PhaseInfo = field(repr=False, default=PHASE_INFO[CyclePhase.menstrual])


# ---------------------------------------------------------------------------
# Fixed day-of-cycle model
# ---------------------------------------------------------------------------


class FixedBoundaryPhaseModel:
    """Approximate phase from the day of cycle alone.

    Independent of the statistical projections: it needs only the last period
    start and a cycle length.
    """

    MENSTRUAL_LAST_DAY = 5
    FOLLICULAR_LAST_DAY = 12
    OVULATION_LAST_DAY = 16

    @staticmethod
    def day_of_cycle(on_date: date, last_period_start: date, cycle_length: int = 28) -> int:
        """Return the 1-based cycle day.  Wraps every ``cycle_length`` days.

        Dates before ``last_period_start`` count as day 1.
        """
        delta = (on_date - last_period_start).days
        if delta < 0:
            return 1
        return (delta % cycle_length) + 1

    def phase_for_day(self, day_of_cycle: int) -> CyclePhase:
        if day_of_cycle <= self.MENSTRUAL_LAST_DAY:
            return CyclePhase.menstrual
        if day_of_cycle <= self.FOLLICULAR_LAST_DAY:
            return CyclePhase.follicular
        if day_of_cycle <= self.OVULATION_LAST_DAY:
            return CyclePhase.ovulation
        return CyclePhase.luteal

    def classify(self, on_date: date, last_period_start: date, cycle_length: int = 28) -> CyclePhase:
        return self.phase_for_day(self.day_of_cycle(on_date, last_period_start, cycle_length))

    def snapshot(
        self, on_date: date, last_period_start: date, cycle_length: int = 28
    ) -> PhaseSnapshot:
        """Phase plus countdowns to the next phase and the next period."""
        day = self.day_of_cycle(on_date, last_period_start, cycle_length)
        phase = self.phase_for_day(day)
        phase_last_day = {
            CyclePhase.menstrual: self.MENSTRUAL_LAST_DAY,
            CyclePhase.follicular: self.FOLLICULAR_LAST_DAY,
            CyclePhase.ovulation: self.OVULATION_LAST_DAY,
            CyclePhase.luteal: cycle_length,
        }[phase]
        return PhaseSnapshot(
            phase=phase,
            day_of_cycle=day,
            days_until_next_phase=max(phase_last_day, day) - day + 1,
            next_period_in=cycle_length - day + 1,
            info=PHASE_INFO[phase],
        )


# ---------------------------------------------------------------------------
# Statistical model
# ---------------------------------------------------------------------------


class StatisticalPhaseModel:
    """Day-level phase from logs and projected cycles.

    * Inside a logged period → period.
    * Between two logged periods → fertile/ovulation if the date falls in
      the window ending 14 days before the later period.
    * After the last logged period → the predictor's projection for the
      cycle containing the date.
    * Anything else → unknown.
    """

    def __init__(
        self,
        config: CycleConfig | None = None,
        predictor: CyclePredictor | None = None,
    ) -> None:
        self._config = config or get_cycle_config()
        self._predictor = predictor or CyclePredictor(self._config)

    def classify(self, on_date: date, logs: Sequence[PeriodLog]) -> DayPhase:
        return self.classify_day(on_date, logs).phase

    def classify_day(self, on_date: date, logs: Sequence[PeriodLog]) -> CycleDay:
        """Classify one date and return it as a CycleDay.

        Args:
            on_date: Date to classify.
            logs:    Validated period logs in any order.

        Returns:
            CycleDay; ``is_prediction`` is True for inferred or projected
            fertile, ovulation and period days.
        """
        ordered = chronological(logs)
        unknown = CycleDay(date=on_date, phase=DayPhase.unknown)
        if not ordered:
            return unknown

        for log in ordered:
            if log.start_date <= on_date <= log.end_date:
                return CycleDay(
                    date=on_date,
                    phase=DayPhase.period,
                    intensity=period_intensity((on_date - log.start_date).days),
                    is_prediction=False,
                )

        if on_date < ordered[0].start_date:
            return unknown

        if on_date < ordered[-1].start_date:
            following = next(log for log in ordered if log.start_date > on_date)
            return self._classify_historical(on_date, following.start_date)

        logger.debug("%s is after the last logged start; using projections", on_date)
        calendar = self._predictor.calendar_for(ordered, on_date)
        return next((day for day in calendar if day.date == on_date), unknown)

    def _classify_historical(self, on_date: date, next_start: date) -> CycleDay:
        prediction_cfg = self._config.prediction
        ovulation = next_start - timedelta(days=prediction_cfg.luteal_phase_days)
        offset = (on_date - ovulation).days
        if offset == 0:
            phase = DayPhase.ovulation
        elif -(prediction_cfg.fertile_window_days - 1) <= offset < 0:
            phase = DayPhase.fertile
        else:
            phase = DayPhase.unknown
        return CycleDay(
            date=on_date,
            phase=phase,
            intensity=DayIntensity.none,
            is_prediction=phase != DayPhase.unknown,
        )


class PhaseClassifier:
    """Entry point exposing both phase models under explicit names.

    ``classify`` uses the statistical model.  ``classify_by_cycle_day``
    uses the fixed day-of-cycle model.
    """

    def __init__(
        self,
        config: CycleConfig | None = None,
        predictor: CyclePredictor | None = None,
    ) -> None:
        self._config = config or get_cycle_config()
        self.statistical = StatisticalPhaseModel(self._config, predictor)
        self.fixed_boundary = FixedBoundaryPhaseModel()

    def classify(self, on_date: date, logs: Sequence[PeriodLog]) -> DayPhase:
        return self.statistical.classify(on_date, logs)

    def classify_day(self, on_date: date, logs: Sequence[PeriodLog]) -> CycleDay:
        return self.statistical.classify_day(on_date, logs)

    def classify_by_cycle_day(
        self, on_date: date, last_period_start: date, cycle_length: int = 28
    ) -> CyclePhase:
        return self.fixed_boundary.classify(on_date, last_period_start, cycle_length)
