"""Health insights from cycle statistics, symptoms and basal temperature.

Turns engine outputs plus optional symptom and temperature series into
short human-readable observations, e.g.:
- "Irregular Cycles Detected" when regularity drops below 70
- "Frequent cramps" when a symptom shows up on most logged days
- "Temperature Shift Detected" when the second half of the readings runs
  more than 0.2 °C above the first half

Nothing here is persisted; every summary is rebuilt from its inputs.
"""

from __future__ import annotations

import logging
import statistics
from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from src.cycles.analyzer import CycleStatisticsAnalyzer, most_recent_first
from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.models import CyclePhase, CyclePrediction, CycleStatistics, PeriodLog
from src.cycles.phases import FixedBoundaryPhaseModel
from src.cycles.predictor import CyclePredictor

logger = logging.getLogger("cadence.cycles.insights")

MAX_RELATED_SYMPTOMS = 3
UPCOMING_PERIOD_DAYS = 3
LATE_PERIOD_ALERT_DAYS = 7
# Ovulation predictability is reported as a fixed share of regularity.
OVULATION_PREDICTABILITY_FACTOR = 0.9

_SYMPTOM_RECOMMENDATIONS = {
    "headache": "Consider tracking water intake and stress levels. Regular exercise might help reduce frequency.",
    "cramps": "Try gentle exercise, a heating pad, or over-the-counter pain relief. Consult your doctor if severe.",
    "fatigue": "Focus on getting regular sleep and maintaining a balanced diet. Consider iron-rich foods.",
    "bloating": "Try reducing salt intake and eating smaller, more frequent meals. Stay hydrated.",
    "mood changes": "Practice stress-reduction techniques like meditation or yoga. Maintain regular exercise.",
    "acne": "Keep skin clean and consider tracking food triggers. Consult a dermatologist if persistent.",
    "breast tenderness": "Wear a supportive bra and consider reducing caffeine intake.",
    "nausea": "Try eating small, frequent meals and staying hydrated. Ginger tea might help.",
}
_DEFAULT_RECOMMENDATION = (
    "Track when this symptom occurs to identify potential triggers and patterns."
)


class InsightType(str, Enum):
    cycle = "cycle"
    prediction = "prediction"
    symptom = "symptom"
    temperature = "temperature"


class InsightSeverity(str, Enum):
    info = "info"
    warning = "warning"
    alert = "alert"


_SEVERITY_ORDER = {
    InsightSeverity.alert: 0,
    InsightSeverity.warning: 1,
    InsightSeverity.info: 2,
}


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SymptomDay:
    """Symptoms reported on one day, as free-form names."""

    date: date
    symptoms: tuple[str, ...] = ()


@dataclass(frozen=True)
class TemperatureReading:
    """A basal body temperature reading in °C."""

    date: date
    value: float


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass
class HealthInsight:
    """A single generated observation.

    Attributes:
        type:             Which analysis produced the insight.
        title:            Short title for display.
        description:      One-sentence explanation.
        recommendation:   Suggested next step.
        severity:         info, warning or alert.
        related_dates:    Dates the insight was derived from.
        related_values:   Numeric values the insight was derived from.
        related_symptoms: Symptoms involved, primary symptom first.
    """

    type: InsightType
    title: str
    description: str
    recommendation: str
    severity: InsightSeverity = InsightSeverity.info
    related_dates: list[date] = field(default_factory=list)
    related_values: list[float] = field(default_factory=list)
    related_symptoms: list[str] = field(default_factory=list)


@dataclass
class RelatedSymptom:
    symptom: str
    correlation: float


@dataclass
class SymptomCorrelation:
    """Frequency and co-occurrence profile for one symptom.

    Attributes:
        symptom:            Normalised symptom name.
        frequency:          Number of days the symptom was reported.
        related_symptoms:   Up to three symptoms most often reported on the
                            same days, with the share of those days.
        phase_distribution: Share of attributed days per cycle phase.
    """

    symptom: str
    frequency: int
    related_symptoms: list[RelatedSymptom] = field(default_factory=list)
    phase_distribution: dict[CyclePhase, float] = field(default_factory=dict)


@dataclass
class TemperatureStats:
    average_basal: float = 0.0
    post_ovulation_shift: float = 0.0
    has_enough_data: bool = False


@dataclass
class CycleAnalysis:
    """Cycle-level figures shown alongside insights."""

    average_cycle_length: int
    average_period_length: int
    regularity_score: float
    ovulation_predictability: float
    luteal_phase_length: int
    temperature_shift_detected: bool | None = None


@dataclass
class InsightSummary:
    """Everything the insight layer produced for one reference date."""

    as_of: date
    cycle: CycleAnalysis
    prediction: CyclePrediction | None = None
    temperature: TemperatureStats = field(default_factory=TemperatureStats)
    correlations: list[SymptomCorrelation] = field(default_factory=list)
    insights: list[HealthInsight] = field(default_factory=list)


def symptom_recommendation(symptom: str) -> str:
    """Canned advice for a known symptom, generic tracking advice otherwise."""
    return _SYMPTOM_RECOMMENDATIONS.get(symptom.strip().lower(), _DEFAULT_RECOMMENDATION)


def _normalise(symptom: str) -> str:
    return " ".join(symptom.strip().lower().split())


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------


class InsightAggregator:
    """Compose cycle statistics, predictions, symptoms and temperatures into insights.

    Usage::

        aggregator = InsightAggregator()
        summary = aggregator.summarize(logs, symptom_days, temperatures)
        for insight in summary.insights:
            print(insight.severity, insight.title)
    """

    def __init__(
        self,
        config: CycleConfig | None = None,
        predictor: CyclePredictor | None = None,
    ) -> None:
        self._config = config or get_cycle_config()
        self._predictor = predictor or CyclePredictor(self._config)
        self._phase_model = FixedBoundaryPhaseModel()

    @property
    def analyzer(self) -> CycleStatisticsAnalyzer:
        return self._predictor.analyzer

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def analyze_cycle(self, stats: CycleStatistics) -> tuple[CycleAnalysis, list[HealthInsight]]:
        """Cycle-level figures plus irregularity and thin-history insights."""
        cfg = self._config.insights
        analysis = CycleAnalysis(
            average_cycle_length=stats.average_cycle_length,
            average_period_length=stats.average_period_length,
            regularity_score=stats.regularity_score,
            ovulation_predictability=round(
                stats.regularity_score * OVULATION_PREDICTABILITY_FACTOR, 1
            ),
            luteal_phase_length=self._config.prediction.luteal_phase_days,
        )

        insights: list[HealthInsight] = []
        if stats.cycle_count >= 2 and stats.regularity_score < cfg.irregular_regularity_threshold:
            insights.append(
                HealthInsight(
                    type=InsightType.cycle,
                    title="Irregular Cycles Detected",
                    description="Your cycle lengths have been varying significantly.",
                    recommendation=(
                        "Consider tracking additional factors like stress and sleep "
                        "that might affect cycle regularity."
                    ),
                    related_values=[float(v) for v in stats.cycle_length_history],
                )
            )

        min_logs = self._config.prediction.min_cycles_for_prediction
        if stats.total_logs < min_logs:
            insights.append(
                HealthInsight(
                    type=InsightType.cycle,
                    title="Keep Logging Your Periods",
                    description=(
                        f"{stats.total_logs} of {min_logs} periods logged. "
                        "Predictions use default values until then."
                    ),
                    recommendation="Log each period's start and end date as it happens.",
                    related_values=[float(stats.total_logs)],
                )
            )
        return analysis, insights

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def analyze_prediction(
        self, prediction: CyclePrediction | None, as_of: date
    ) -> list[HealthInsight]:
        """Upcoming, late and low-confidence period insights."""
        if prediction is None:
            return []

        insights: list[HealthInsight] = []
        days_until = (prediction.next_period_start - as_of).days

        if 0 <= days_until <= UPCOMING_PERIOD_DAYS:
            when = "today" if days_until == 0 else f"in {days_until} day{'s' if days_until != 1 else ''}"
            insights.append(
                HealthInsight(
                    type=InsightType.prediction,
                    title="Period Expected Soon",
                    description=f"Your next period is expected {when}.",
                    recommendation="Keep period products at hand.",
                    related_dates=[prediction.next_period_start],
                )
            )
        elif days_until < 0 and prediction.is_sufficient:
            days_late = -days_until
            insights.append(
                HealthInsight(
                    type=InsightType.prediction,
                    title="Period May Be Late",
                    description=(
                        f"Your period was expected {days_late} day"
                        f"{'s' if days_late != 1 else ''} ago."
                    ),
                    recommendation=(
                        "Log your period if it has started. Consider a pregnancy test "
                        "or a doctor's visit if it stays late."
                    ),
                    severity=(
                        InsightSeverity.alert
                        if days_late > LATE_PERIOD_ALERT_DAYS
                        else InsightSeverity.warning
                    ),
                    related_dates=[prediction.next_period_start],
                    related_values=[float(days_late)],
                )
            )

        if (
            prediction.is_sufficient
            and prediction.confidence < self._config.insights.low_confidence_threshold
        ):
            insights.append(
                HealthInsight(
                    type=InsightType.prediction,
                    title="Low Prediction Confidence",
                    description=(
                        f"Confidence in your next period date is {prediction.confidence}%."
                    ),
                    recommendation="Predictions sharpen as your cycles become more consistent.",
                    related_values=[float(prediction.confidence)],
                )
            )
        return insights

    # ------------------------------------------------------------------
    # Symptoms
    # ------------------------------------------------------------------

    def analyze_symptoms(
        self,
        days: Sequence[SymptomDay],
        logs: Sequence[PeriodLog] = (),
    ) -> tuple[list[SymptomCorrelation], list[HealthInsight]]:
        """Per-symptom frequency, co-occurrence and phase distribution.

        Args:
            days: Symptom days in any order.  A symptom repeated within one
                  day counts once.
            logs: Period logs used to place each day in a cycle phase.

        Returns:
            ``(correlations, insights)``; correlations ordered by frequency
            (highest first) then name.
        """
        day_sets = [(day.date, {_normalise(s) for s in day.symptoms if s.strip()}) for day in days]

        frequency: Counter[str] = Counter()
        co_occurrence: dict[str, Counter[str]] = defaultdict(Counter)
        phase_counts: dict[str, Counter[CyclePhase]] = defaultdict(Counter)

        ordered_logs = most_recent_first(logs)
        cycle_length = self.analyzer.analyze(ordered_logs).average_cycle_length

        for on_date, symptoms in day_sets:
            phase = self._phase_on(on_date, ordered_logs, cycle_length)
            for symptom in symptoms:
                frequency[symptom] += 1
                if phase is not None:
                    phase_counts[symptom][phase] += 1
                for other in symptoms:
                    if other != symptom:
                        co_occurrence[symptom][other] += 1

        correlations: list[SymptomCorrelation] = []
        insights: list[HealthInsight] = []
        ratio = self._config.insights.frequent_symptom_ratio

        for symptom, count in sorted(frequency.items(), key=lambda kv: (-kv[1], kv[0])):
            related = sorted(
                (
                    RelatedSymptom(symptom=other, correlation=round(n / count, 2))
                    for other, n in co_occurrence[symptom].items()
                ),
                key=lambda r: (-r.correlation, r.symptom),
            )[:MAX_RELATED_SYMPTOMS]

            attributed = sum(phase_counts[symptom].values())
            distribution = {
                phase: round(phase_counts[symptom][phase] / attributed, 2) if attributed else 0.0
                for phase in CyclePhase
            }
            correlations.append(
                SymptomCorrelation(
                    symptom=symptom,
                    frequency=count,
                    related_symptoms=related,
                    phase_distribution=distribution,
                )
            )

            if count > len(day_sets) * ratio:
                insights.append(
                    HealthInsight(
                        type=InsightType.symptom,
                        title=f"Frequent {symptom}",
                        description=(
                            f"{symptom} has been reported in over {round(ratio * 100)}% of your logs."
                        ),
                        recommendation=symptom_recommendation(symptom),
                        severity=InsightSeverity.warning,
                        related_symptoms=[symptom, *(r.symptom for r in related)],
                    )
                )

        logger.debug(
            "Analyzed %d symptom days: %d distinct symptoms, %d frequent",
            len(day_sets), len(correlations), len(insights),
        )
        return correlations, insights

    def _phase_on(
        self, on_date: date, ordered_logs: Sequence[PeriodLog], cycle_length: int
    ) -> CyclePhase | None:
        """Fixed-boundary phase relative to the latest period started on or before ``on_date``."""
        start = next((log.start_date for log in ordered_logs if log.start_date <= on_date), None)
        if start is None:
            return None
        return self._phase_model.classify(on_date, start, cycle_length)

    # ------------------------------------------------------------------
    # Temperature
    # ------------------------------------------------------------------

    def analyze_temperature(
        self, readings: Sequence[TemperatureReading]
    ) -> tuple[TemperatureStats, list[HealthInsight]]:
        """Average basal temperature and first-half → second-half shift.

        Fewer than ``min_temperature_readings`` readings yields empty stats
        with ``has_enough_data`` False.
        """
        cfg = self._config.insights
        if len(readings) < cfg.min_temperature_readings:
            logger.debug(
                "Insufficient temperature data: %d readings (need %d)",
                len(readings), cfg.min_temperature_readings,
            )
            return TemperatureStats(), []

        ordered = sorted(readings, key=lambda r: r.date)
        values = [r.value for r in ordered]
        midpoint = len(values) // 2
        shift = statistics.mean(values[midpoint:]) - statistics.mean(values[:midpoint])

        stats = TemperatureStats(
            average_basal=round(statistics.mean(values), 2),
            post_ovulation_shift=round(shift, 2),
            has_enough_data=True,
        )

        insights: list[HealthInsight] = []
        if shift > cfg.temperature_shift_threshold_c:
            insights.append(
                HealthInsight(
                    type=InsightType.temperature,
                    title="Temperature Shift Detected",
                    description=(
                        "A significant temperature rise has been detected, "
                        "indicating possible ovulation."
                    ),
                    recommendation="Continue tracking temperature to confirm ovulation pattern.",
                    related_dates=[r.date for r in ordered],
                    related_values=values,
                )
            )
        return stats, insights

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def summarize(
        self,
        logs: Iterable[PeriodLog],
        symptom_days: Sequence[SymptomDay] = (),
        temperatures: Sequence[TemperatureReading] = (),
        as_of: date | None = None,
    ) -> InsightSummary:
        """Run every analysis and merge the insights.

        Insights are ordered alert → warning → info, then by title.
        """
        as_of = as_of or date.today()
        ordered = most_recent_first(logs)

        stats = self.analyzer.analyze(ordered)
        analysis, insights = self.analyze_cycle(stats)

        prediction = self._predictor.predict_next_cycle(ordered)
        insights.extend(self.analyze_prediction(prediction, as_of))

        correlations, symptom_insights = self.analyze_symptoms(symptom_days, ordered)
        insights.extend(symptom_insights)

        temperature, temperature_insights = self.analyze_temperature(temperatures)
        insights.extend(temperature_insights)
        if temperature.has_enough_data:
            analysis.temperature_shift_detected = bool(temperature_insights)

        insights.sort(key=lambda i: (_SEVERITY_ORDER[i.severity], i.title))
        logger.info(
            "Generated %d insights from %d logs as of %s", len(insights), len(ordered), as_of
        )
        return InsightSummary(
            as_of=as_of,
            cycle=analysis,
            prediction=prediction,
            temperature=temperature,
            correlations=correlations,
            insights=insights,
        )
