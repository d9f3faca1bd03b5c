"""Cadence cycle engine.

Statistical prediction of menstrual cycles from user-logged periods: cycle
statistics, day-level calendar projections, graded fertility windows, phase
classification and health insights.  Every result is recomputed from the
logs passed in; nothing is stored between calls.

Modules:
    models        — Period logs, calendar days and derived records
    config_loader — Load/validate/hot-reload cycle_config.yaml
    analyzer      — Cycle statistics and regularity score
    predictor     — Calendar projections and next-cycle forecast
    fertility     — Probability-graded fertility windows
    phases        — Statistical and fixed day-of-cycle phase models
    insights      — Cycle, symptom and temperature insights
"""

from src.cycles.analyzer import CycleStatisticsAnalyzer
from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.errors import CycleEngineError, InvalidLogRangeError
from src.cycles.fertility import FertilityWindowCalculator
from src.cycles.insights import InsightAggregator
from src.cycles.models import (
    CycleDay,
    CyclePrediction,
    CycleStatistics,
    FertilityWindow,
    PeriodLog,
)
from src.cycles.phases import PhaseClassifier
from src.cycles.predictor import CyclePredictor

__all__ = [
    "PeriodLog",
    "CycleDay",
    "CycleStatistics",
    "CyclePrediction",
    "FertilityWindow",
    "CycleStatisticsAnalyzer",
    "CyclePredictor",
    "FertilityWindowCalculator",
    "PhaseClassifier",
    "InsightAggregator",
    "CycleConfig",
    "get_cycle_config",
    "CycleEngineError",
    "InvalidLogRangeError",
]
