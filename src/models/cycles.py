"""Pydantic models for the cycle API: period logs in, statistics, calendars,
forecasts, fertility, phases and insights out."""

from __future__ import annotations

from datetime import date

from pydantic import Field, model_validator

from src.cycles.insights import (
    InsightSeverity,
    InsightType,
    SymptomDay,
    TemperatureReading,
)
from src.cycles.models import (
    CyclePhase,
    DayIntensity,
    DayPhase,
    FertilityType,
    FlowIntensity,
    PeriodLog,
)
from src.models.base import CadenceBase

MAX_LOGS = 500
MAX_SERIES_DAYS = 1000


# ---------- Requests ----------

class PeriodLogIn(CadenceBase):
    start_date: date
    end_date: date
    flow_intensity: FlowIntensity = FlowIntensity.medium

    @model_validator(mode="after")
    def _end_not_before_start(self) -> PeriodLogIn:
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date.isoformat()} is before "
                f"start_date {self.start_date.isoformat()}"
            )
        return self

    def to_domain(self) -> PeriodLog:
        return PeriodLog(
            start_date=self.start_date,
            end_date=self.end_date,
            flow_intensity=self.flow_intensity,
        )


class CycleRequest(CadenceBase):
    """Period logs plus an optional reference date (defaults to today)."""

    logs: list[PeriodLogIn] = Field(default_factory=list, max_length=MAX_LOGS)
    from_date: date | None = None

    def period_logs(self) -> list[PeriodLog]:
        return [log.to_domain() for log in self.logs]

    @property
    def reference_date(self) -> date:
        return self.from_date or date.today()


class FertilityRequest(CycleRequest):
    """Daily statuses cover ``status_from``..``status_to``; both default to
    the span of the fertility windows."""

    status_from: date | None = None
    status_to: date | None = None


class SymptomDayIn(CadenceBase):
    date: date
    symptoms: list[str] = Field(default_factory=list, max_length=50)

    def to_domain(self) -> SymptomDay:
        return SymptomDay(date=self.date, symptoms=tuple(self.symptoms))


class TemperatureReadingIn(CadenceBase):
    date: date
    value: float = Field(ge=30, le=45)  # °C

    def to_domain(self) -> TemperatureReading:
        return TemperatureReading(date=self.date, value=self.value)


class InsightRequest(CycleRequest):
    symptom_days: list[SymptomDayIn] = Field(default_factory=list, max_length=MAX_SERIES_DAYS)
    temperatures: list[TemperatureReadingIn] = Field(
        default_factory=list, max_length=MAX_SERIES_DAYS
    )


# ---------- Statistics ----------

class FlowPatternRead(CadenceBase):
    frequency: int
    average_duration: float


class CycleStatisticsRead(CadenceBase):
    average_cycle_length: int
    average_period_length: int
    regularity_score: float
    standard_deviation: float
    cycle_length_history: list[int]
    mean_cycle_length: float
    variation_coefficient: float
    shortest_cycle: int | None = None
    longest_cycle: int | None = None
    is_regular: bool
    total_logs: int
    cycle_count: int
    flow_patterns: dict[FlowIntensity, FlowPatternRead] = Field(default_factory=dict)


# ---------- Calendar / prediction ----------

class CycleDayRead(CadenceBase):
    date: date
    phase: DayPhase
    intensity: DayIntensity
    is_prediction: bool


class PhaseRangeRead(CadenceBase):
    start: date
    end: date


class CyclePredictionRead(CadenceBase):
    next_period_start: date
    next_period_end: date
    confidence: int = Field(ge=0, le=100)
    based_on_cycle_count: int
    average_cycle_length: int
    predicted_cycle_length: int
    standard_deviation: float
    regularity_score: float
    phases_prediction: dict[CyclePhase, PhaseRangeRead] = Field(default_factory=dict)
    is_sufficient: bool


# ---------- Fertility ----------

class FertilityWindowRead(CadenceBase):
    start: date
    end: date
    type: FertilityType
    probability: float = Field(ge=0, le=1)


class DailyFertilityStatusRead(CadenceBase):
    date: date
    phase: CyclePhase
    probability: float
    window_type: FertilityType
    notes: list[str] = Field(default_factory=list)


class FertilityRead(CadenceBase):
    ovulation_date: date
    confidence: float = Field(ge=0, le=1)
    windows: list[FertilityWindowRead]
    is_fertile: bool
    is_ovulation: bool
    next_fertile_start: date | None = None
    next_ovulation: date | None = None
    daily: list[DailyFertilityStatusRead] = Field(default_factory=list)


# ---------- Phase ----------

class PhaseInfoRead(CadenceBase):
    name: str
    description: str
    symptoms: list[str]
    duration: int


class PhaseSnapshotRead(CadenceBase):
    phase: CyclePhase
    day_of_cycle: int
    days_until_next_phase: int
    next_period_in: int
    info: PhaseInfoRead


class PhaseRead(CadenceBase):
    """Both phase models for one date.

    ``phase`` comes from the statistical model; ``cycle_phase`` from the
    fixed day-of-cycle model and is null without logs.
    """

    on_date: date
    phase: DayPhase
    is_prediction: bool
    next_marked_phase: DayPhase
    days_until_next_marked: int
    cycle_phase: PhaseSnapshotRead | None = None


# ---------- Insights ----------

class HealthInsightRead(CadenceBase):
    type: InsightType
    title: str
    description: str
    recommendation: str
    severity: InsightSeverity
    related_dates: list[date] = Field(default_factory=list)
    related_values: list[float] = Field(default_factory=list)
    related_symptoms: list[str] = Field(default_factory=list)


class RelatedSymptomRead(CadenceBase):
    symptom: str
    correlation: float


class SymptomCorrelationRead(CadenceBase):
    symptom: str
    frequency: int
    related_symptoms: list[RelatedSymptomRead] = Field(default_factory=list)
    phase_distribution: dict[CyclePhase, float] = Field(default_factory=dict)


class TemperatureStatsRead(CadenceBase):
    average_basal: float
    post_ovulation_shift: float
    has_enough_data: bool


class CycleAnalysisRead(CadenceBase):
    average_cycle_length: int
    average_period_length: int
    regularity_score: float
    ovulation_predictability: float
    luteal_phase_length: int
    temperature_shift_detected: bool | None = None


class InsightSummaryRead(CadenceBase):
    as_of: date
    cycle: CycleAnalysisRead
    prediction: CyclePredictionRead | None = None
    temperature: TemperatureStatsRead
    correlations: list[SymptomCorrelationRead] = Field(default_factory=list)
    insights: list[HealthInsightRead] = Field(default_factory=list)
