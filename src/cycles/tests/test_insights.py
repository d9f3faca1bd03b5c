"""Tests for cycle, prediction, symptom and temperature insights."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.cycles.config_loader import CycleConfig
from src.cycles.insights import (
    InsightAggregator,
    InsightSeverity,
    InsightType,
    SymptomDay,
    TemperatureReading,
    symptom_recommendation,
)
from src.cycles.models import CyclePhase
from src.cycles.predictor import CyclePredictor
from src.cycles.tests.conftest import build_logs


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def symptom_days() -> list[SymptomDay]:
    return [
        SymptomDay(date(2024, 1, 2), ("Cramps", "fatigue", "  cramps ")),
        SymptomDay(date(2024, 1, 3), ("cramps",)),
        SymptomDay(date(2024, 1, 10), ("cramps", "headache")),
        SymptomDay(date(2023, 12, 30), ("fatigue",)),
    ]


def biphasic_temps(start: date = date(2024, 1, 1), n: int = 14) -> list[TemperatureReading]:
    return [
        TemperatureReading(start + timedelta(days=i), 36.4 if i < n // 2 else 36.8)
        for i in range(n)
    ]


def titles(insights) -> list[str]:
    return [i.title for i in insights]


# ---------------------------------------------------------------------------
# Cycle
# ---------------------------------------------------------------------------


class TestAnalyzeCycle:
    def test_irregular_cycles(self, cycle_config: CycleConfig):
        aggregator = InsightAggregator(cycle_config)
        stats = aggregator.analyzer.analyze(build_logs([21, 35, 22, 34]))
        analysis, insights = aggregator.analyze_cycle(stats)
        assert titles(insights) == ["Irregular Cycles Detected"]
        assert insights[0].related_values == [21.0, 35.0, 22.0, 34.0]
        assert analysis.ovulation_predictability == pytest.approx(stats.regularity_score * 0.9, abs=0.1)
        assert analysis.luteal_phase_length == 14

    def test_thin_history_asks_for_more_logs(self, cycle_config: CycleConfig, two_logs):
        aggregator = InsightAggregator(cycle_config)
        _, insights = aggregator.analyze_cycle(aggregator.analyzer.analyze(two_logs))
        # One cycle length is too little to call irregular.
        assert titles(insights) == ["Keep Logging Your Periods"]

    def test_regular_history_is_quiet(self, cycle_config: CycleConfig, regular_logs):
        aggregator = InsightAggregator(cycle_config)
        _, insights = aggregator.analyze_cycle(aggregator.analyzer.analyze(regular_logs))
        assert insights == []


# ---------------------------------------------------------------------------
# Prediction
# ---------------------------------------------------------------------------


class TestAnalyzePrediction:
    def test_none_prediction(self, cycle_config: CycleConfig):
        assert InsightAggregator(cycle_config).analyze_prediction(None, date(2024, 1, 1)) == []

    def test_period_expected_soon(self, cycle_config: CycleConfig, two_logs):
        prediction = CyclePredictor(cycle_config).predict_next_cycle(two_logs)
        insights = InsightAggregator(cycle_config).analyze_prediction(prediction, date(2024, 2, 24))
        assert titles(insights) == ["Period Expected Soon"]
        assert "in 2 days" in insights[0].description

    def test_nothing_when_period_is_far(self, cycle_config: CycleConfig, two_logs):
        prediction = CyclePredictor(cycle_config).predict_next_cycle(two_logs)
        assert InsightAggregator(cycle_config).analyze_prediction(prediction, date(2024, 2, 10)) == []

    @pytest.mark.parametrize(
        "as_of, severity",
        [(date(2024, 7, 18), InsightSeverity.warning), (date(2024, 7, 30), InsightSeverity.alert)],
    )
    def test_late_period(self, cycle_config: CycleConfig, regular_logs, as_of, severity):
        prediction = CyclePredictor(cycle_config).predict_next_cycle(regular_logs)
        insights = InsightAggregator(cycle_config).analyze_prediction(prediction, as_of)
        assert titles(insights) == ["Period May Be Late"]
        assert insights[0].severity == severity

    def test_low_confidence(self, cycle_config: CycleConfig):
        prediction = CyclePredictor(cycle_config).predict_next_cycle(build_logs([21, 35, 22, 34]))
        insights = InsightAggregator(cycle_config).analyze_prediction(
            prediction, prediction.next_period_start - timedelta(days=10)
        )
        assert titles(insights) == ["Low Prediction Confidence"]


# ---------------------------------------------------------------------------
# Symptoms
# ---------------------------------------------------------------------------


class TestAnalyzeSymptoms:
    def test_frequency_and_co_occurrence(self, cycle_config: CycleConfig, two_logs):
        correlations, insights = InsightAggregator(cycle_config).analyze_symptoms(
            symptom_days(), two_logs
        )
        by_symptom = {c.symptom: c for c in correlations}
        assert [c.symptom for c in correlations] == ["cramps", "fatigue", "headache"]
        assert by_symptom["cramps"].frequency == 3
        assert [r.symptom for r in by_symptom["cramps"].related_symptoms] == [
            "fatigue",
            "headache",
        ]
        assert by_symptom["cramps"].related_symptoms[0].correlation == pytest.approx(0.33)

        assert titles(insights) == ["Frequent cramps"]
        assert insights[0].severity == InsightSeverity.warning
        assert insights[0].type == InsightType.symptom
        assert insights[0].related_symptoms[0] == "cramps"
        assert insights[0].recommendation.startswith("Try gentle exercise")

    def test_phase_distribution(self, cycle_config: CycleConfig, two_logs):
        correlations, _ = InsightAggregator(cycle_config).analyze_symptoms(symptom_days(), two_logs)
        by_symptom = {c.symptom: c for c in correlations}
        cramps = by_symptom["cramps"].phase_distribution
        assert cramps[CyclePhase.menstrual] == pytest.approx(0.67)
        assert cramps[CyclePhase.follicular] == pytest.approx(0.33)
        assert cramps[CyclePhase.luteal] == 0.0
        # The day before the first log cannot be placed in a cycle.
        assert by_symptom["fatigue"].phase_distribution[CyclePhase.menstrual] == 1.0

    def test_no_logs_leaves_distribution_empty(self, cycle_config: CycleConfig):
        correlations, _ = InsightAggregator(cycle_config).analyze_symptoms(symptom_days())
        assert all(v == 0.0 for c in correlations for v in c.phase_distribution.values())

    def test_no_symptoms(self, cycle_config: CycleConfig):
        assert InsightAggregator(cycle_config).analyze_symptoms([]) == ([], [])

    def test_recommendation_fallback(self):
        assert symptom_recommendation("Headache").startswith("Consider tracking water")
        assert symptom_recommendation("hiccups").startswith("Track when this symptom")


# ---------------------------------------------------------------------------
# Temperature
# ---------------------------------------------------------------------------


class TestAnalyzeTemperature:
    def test_requires_minimum_readings(self, cycle_config: CycleConfig):
        stats, insights = InsightAggregator(cycle_config).analyze_temperature(biphasic_temps(n=13))
        assert stats.has_enough_data is False
        assert insights == []

    def test_detects_shift(self, cycle_config: CycleConfig):
        stats, insights = InsightAggregator(cycle_config).analyze_temperature(biphasic_temps())
        assert stats.has_enough_data is True
        assert stats.average_basal == pytest.approx(36.6)
        assert stats.post_ovulation_shift == pytest.approx(0.4)
        assert titles(insights) == ["Temperature Shift Detected"]
        assert len(insights[0].related_dates) == 14

    def test_input_order_does_not_matter(self, cycle_config: CycleConfig):
        stats, _ = InsightAggregator(cycle_config).analyze_temperature(
            list(reversed(biphasic_temps()))
        )
        assert stats.post_ovulation_shift == pytest.approx(0.4)

    def test_flat_temperatures(self, cycle_config: CycleConfig):
        flat = [TemperatureReading(date(2024, 1, 1) + timedelta(days=i), 36.5) for i in range(20)]
        stats, insights = InsightAggregator(cycle_config).analyze_temperature(flat)
        assert stats.post_ovulation_shift == pytest.approx(0.0)
        assert insights == []


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


class TestSummarize:
    def test_orders_by_severity_then_title(self, cycle_config: CycleConfig, two_logs):
        summary = InsightAggregator(cycle_config).summarize(
            two_logs, symptom_days(), biphasic_temps(), as_of=date(2024, 2, 24)
        )
        assert titles(summary.insights) == [
            "Frequent cramps",
            "Keep Logging Your Periods",
            "Period Expected Soon",
            "Temperature Shift Detected",
        ]
        assert summary.cycle.temperature_shift_detected is True
        assert summary.prediction.next_period_start == date(2024, 2, 26)
        assert summary.as_of == date(2024, 2, 24)

    def test_without_optional_series(self, cycle_config: CycleConfig, regular_logs):
        summary = InsightAggregator(cycle_config).summarize(regular_logs, as_of=date(2024, 7, 1))
        assert summary.insights == []
        assert summary.correlations == []
        assert summary.temperature.has_enough_data is False
        assert summary.cycle.temperature_shift_detected is None

    def test_empty_logs(self, cycle_config: CycleConfig):
        summary = InsightAggregator(cycle_config).summarize([], as_of=date(2024, 7, 1))
        assert summary.prediction is None
        assert titles(summary.insights) == ["Keep Logging Your Periods"]
