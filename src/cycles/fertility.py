"""Probability-graded fertility windows around an ovulation date.

Windows relative to the ovulation day (day 0):

    less fertile     days −5..−4   base probability 0.1
    highly fertile   days −3..−1   base probability 0.3
    fertile          days  0..+1   base probability 0.2

A day's conception probability is its window's base probability scaled by
the overall prediction confidence (0–1).  Days outside every window have
probability 0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.models import CyclePhase, FertilityType, FertilityWindow, date_range

logger = logging.getLogger("cadence.cycles.fertility")

HIGHLY_FERTILE_DAYS = 3
LESS_FERTILE_DAYS = 2
FERTILE_DAYS = 2  # ovulation day plus the day after
FOLLICULAR_LOOKBACK_DAYS = 5


@dataclass
class OvulationPrediction:
    """Expected ovulation with its fertility windows.

    Attributes:
        expected_date: Predicted ovulation day.
        confidence:    0.0–1.0 confidence carried into window probabilities.
        windows:       Graded windows around ``expected_date``.
    """

    expected_date: date
    confidence: float
    windows: list[FertilityWindow] = field(default_factory=list)


@dataclass
class DailyFertilityStatus:
    """Fertility outlook for a single day."""

    date: date
    phase: CyclePhase
    probability: float
    window_type: FertilityType = FertilityType.infertile
    notes: list[str] = field(default_factory=list)


class FertilityWindowCalculator:
    """Derive fertility windows and daily probabilities from an ovulation date.

    Usage::

        calculator = FertilityWindowCalculator()
        windows = calculator.compute_windows(date(2024, 3, 15), confidence=0.8)
        calculator.daily_probability(date(2024, 3, 13), windows)   # 0.24
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    def compute_windows(self, ovulation_date: date, confidence: float) -> list[FertilityWindow]:
        """Build the highly-fertile, fertile and less-fertile windows.

        Args:
            ovulation_date: Predicted or detected ovulation day.
            confidence:     Overall confidence on a 0–1 scale.

        Returns:
            Windows in order: highly fertile, fertile, less fertile.

        Raises:
            ValueError: If ``confidence`` is outside [0, 1].
        """
        if not 0.0 <= confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {confidence}")

        logger.debug("Fertility windows around %s (confidence %.2f)", ovulation_date, confidence)
        probs = self._config.fertility
        highly_start = ovulation_date - timedelta(days=HIGHLY_FERTILE_DAYS)
        highly_end = ovulation_date - timedelta(days=1)
        less_end = highly_start - timedelta(days=1)

        return [
            FertilityWindow(
                start=highly_start,
                end=highly_end,
                type=FertilityType.highly_fertile,
                probability=probs.highly_fertile_probability * confidence,
            ),
            FertilityWindow(
                start=ovulation_date,
                end=ovulation_date + timedelta(days=FERTILE_DAYS - 1),
                type=FertilityType.fertile,
                probability=probs.fertile_probability * confidence,
            ),
            FertilityWindow(
                start=less_end - timedelta(days=LESS_FERTILE_DAYS - 1),
                end=less_end,
                type=FertilityType.less_fertile,
                probability=probs.less_fertile_probability * confidence,
            ),
        ]

    @staticmethod
    def window_for(day: date, windows: list[FertilityWindow]) -> FertilityWindow | None:
        """Return the window containing ``day``, if any."""
        return next((w for w in windows if w.contains(day)), None)

    def daily_probability(self, day: date, windows: list[FertilityWindow]) -> float:
        """Conception probability for ``day``; 0 outside every window."""
        window = self.window_for(day, windows)
        return window.probability if window else 0.0

    def is_in_fertile_window(self, day: date, windows: list[FertilityWindow]) -> bool:
        return self.window_for(day, windows) is not None

    @staticmethod
    def is_ovulation_day(day: date, ovulation_date: date) -> bool:
        return day == ovulation_date

    @staticmethod
    def phase_for(day: date, ovulation_date: date) -> CyclePhase:
        """Fertility phase of ``day`` relative to ovulation.

        Day 0 is ovulation, and so is the following day, which is still
        inside the fertile window.  Up to 5 days before is follicular, up
        to 14 days after is luteal, and anything else defaults to follicular.
        """
        offset = (day - ovulation_date).days
        if 0 <= offset < FERTILE_DAYS:
            return CyclePhase.ovulation
        if -FOLLICULAR_LOOKBACK_DAYS <= offset < 0:
            return CyclePhase.follicular
        if 0 < offset <= 14:
            return CyclePhase.luteal
        return CyclePhase.follicular

    def daily_status(
        self,
        start: date,
        end: date,
        ovulation_date: date,
        confidence: float,
    ) -> list[DailyFertilityStatus]:
        """Day-by-day fertility outlook from ``start`` to ``end`` inclusive.

        Args:
            start:          First day to report.
            end:            Last day to report.
            ovulation_date: Ovulation day the windows are centred on.
            confidence:     Overall confidence on a 0–1 scale.

        Returns:
            One DailyFertilityStatus per day; empty when ``end < start``.
        """
        windows = self.compute_windows(ovulation_date, confidence)
        statuses = []
        for day in date_range(start, end):
            window = self.window_for(day, windows)
            statuses.append(
                DailyFertilityStatus(
                    date=day,
                    phase=self.phase_for(day, ovulation_date),
                    probability=window.probability if window else 0.0,
                    window_type=window.type if window else FertilityType.infertile,
                    notes=self._notes(day, ovulation_date),
                )
            )
        return statuses

    @staticmethod
    def _notes(day: date, ovulation_date: date) -> list[str]:
        offset = (day - ovulation_date).days
        if offset == 0:
            return [
                "Ovulation day - highest chance of conception",
                "Egg survives for about 24 hours after release",
            ]
        if -HIGHLY_FERTILE_DAYS <= offset < 0:
            return [
                "Highly fertile days - recommended for conception",
                "Sperm can survive up to 5 days in fertile cervical mucus",
            ]
        return []
