"""Core value types shared by the cycle engine.

Every date is a ``datetime.date``.  There is no time-of-day component
anywhere in the engine, so day differences are always ``(b - a).days``.

Period logs are the only input; everything else in this module is derived
and recomputed on each call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum

from src.cycles.errors import InvalidLogRangeError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class FlowIntensity(str, Enum):
    light = "light"
    medium = "medium"
    heavy = "heavy"


class DayPhase(str, Enum):
    """Day-level phase used by calendar projections."""

    period = "period"
    fertile = "fertile"
    ovulation = "ovulation"
    unknown = "unknown"


class DayIntensity(str, Enum):
    none = "none"
    light = "light"
    medium = "medium"
    heavy = "heavy"


class CyclePhase(str, Enum):
    """Physiological cycle phase."""

    menstrual = "menstrual"
    follicular = "follicular"
    ovulation = "ovulation"
    luteal = "luteal"


class FertilityType(str, Enum):
    highly_fertile = "highly-fertile"
    fertile = "fertile"
    less_fertile = "less-fertile"
    infertile = "infertile"


# ---------------------------------------------------------------------------
# Input record
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PeriodLog:
    """A single user-reported period.

    Logs are immutable.  Editing a log means replacing it with a new one.

    Attributes:
        start_date:     First day of bleeding.
        end_date:       Last day of bleeding (inclusive, >= start_date).
        flow_intensity: Overall flow reported for the period.

    Raises:
        InvalidLogRangeError: If ``end_date`` is before ``start_date``.
    """

    start_date: date
    end_date: date
    flow_intensity: FlowIntensity = FlowIntensity.medium

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise InvalidLogRangeError(self.start_date, self.end_date)
        # Accept plain strings from collaborators ("heavy" etc.)
        if not isinstance(self.flow_intensity, FlowIntensity):
            object.__setattr__(
                self, "flow_intensity", FlowIntensity(self.flow_intensity)
            )

    @property
    def period_length(self) -> int:
        """Inclusive number of days from start to end."""
        return (self.end_date - self.start_date).days + 1


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CycleDay:
    """One calendar day of a logged or projected cycle."""

    date: date
    phase: DayPhase
    intensity: DayIntensity = DayIntensity.none
    is_prediction: bool = False


@dataclass(frozen=True)
class PhaseRange:
    """Inclusive date range covered by one cycle phase."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass(frozen=True)
class FlowPattern:
    """How often a flow intensity was logged and how long those periods lasted.

    Attributes:
        frequency:        Share of logs with this intensity (0–100).
        average_duration: Mean period length of those logs, in days.
    """

    frequency: int
    average_duration: float


@dataclass
class CycleStatistics:
    """Aggregate statistics computed from a set of period logs.

    Attributes:
        average_cycle_length:  Rounded mean of plausible cycle lengths (days).
        average_period_length: Rounded mean of plausible period lengths (days).
        regularity_score:      0–100, higher means more consistent cycles.
        standard_deviation:    Population std dev of plausible cycle lengths.
        cycle_length_history:  Plausible cycle lengths, oldest first.
        mean_cycle_length:     Unrounded mean used for variation measures.
        variation_coefficient: standard_deviation / mean_cycle_length.
        shortest_cycle:        Shortest plausible cycle, None without cycles.
        longest_cycle:         Longest plausible cycle, None without cycles.
        is_regular:            True when the variation coefficient is small.
        total_logs:            Number of logs analysed.
        flow_patterns:         Per-intensity frequency and mean duration.
    """

    average_cycle_length: int
    average_period_length: int
    regularity_score: float = 0.0
    standard_deviation: float = 0.0
    cycle_length_history: tuple[int, ...] = ()
    mean_cycle_length: float = 0.0
    variation_coefficient: float = 0.0
    shortest_cycle: int | None = None
    longest_cycle: int | None = None
    is_regular: bool = False
    total_logs: int = 0
    flow_patterns: dict[FlowIntensity, FlowPattern] = field(default_factory=dict)

    @property
    def cycle_count(self) -> int:
        """Number of plausible cycle lengths behind the averages."""
        return len(self.cycle_length_history)


@dataclass
class CyclePrediction:
    """Summary forecast for the next cycle.

    Attributes:
        next_period_start:      Predicted first day of the next period.
        next_period_end:        Predicted last day of the next period.
        confidence:             0–100 confidence in the forecast.
        based_on_cycle_count:   Number of logs the forecast is based on.
        average_cycle_length:   Rounded mean cycle length.
        predicted_cycle_length: Cycle length actually used for projection.
        standard_deviation:     Std dev of plausible cycle lengths.
        regularity_score:       0–100 regularity from the analyzer.
        phases_prediction:      Phase → inclusive date range for the next cycle.
        min_cycles_for_prediction: Threshold callers compare against.
    """

    next_period_start: date
    next_period_end: date
    confidence: int
    based_on_cycle_count: int
    average_cycle_length: int
    predicted_cycle_length: int
    standard_deviation: float
    regularity_score: float
    phases_prediction: dict[CyclePhase, PhaseRange] = field(default_factory=dict)
    min_cycles_for_prediction: int = 3

    @property
    def is_sufficient(self) -> bool:
        """True when enough history exists for the forecast to be trusted."""
        return self.based_on_cycle_count >= self.min_cycles_for_prediction


@dataclass(frozen=True)
class FertilityWindow:
    """A graded fertility window.

    Attributes:
        start:       First day of the window (inclusive).
        end:         Last day of the window (inclusive).
        type:        Fertility grade of the window.
        probability: Daily conception probability inside the window (0–1).
    """

    start: date
    end: date
    type: FertilityType
    probability: float

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def date_range(start: date, end: date) -> list[date]:
    """Return every date from ``start`` to ``end`` inclusive."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]
