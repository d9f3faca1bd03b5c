"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from src.config import Settings, get_settings
from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.insights import InsightAggregator
from src.cycles.phases import PhaseClassifier
from src.cycles.predictor import CyclePredictor


def get_engine_config() -> CycleConfig:
    """The process-wide cycle config.  Loaded lazily, replaced on reload."""
    return get_cycle_config()


EngineConfig = Annotated[CycleConfig, Depends(get_engine_config)]


def get_predictor(config: EngineConfig) -> CyclePredictor:
    return CyclePredictor(config)


def get_phase_classifier(config: EngineConfig) -> PhaseClassifier:
    return PhaseClassifier(config)


def get_insight_aggregator(config: EngineConfig) -> InsightAggregator:
    return InsightAggregator(config)


# Annotated shortcuts for route signatures
Predictor = Annotated[CyclePredictor, Depends(get_predictor)]
Classifier = Annotated[PhaseClassifier, Depends(get_phase_classifier)]
Insights = Annotated[InsightAggregator, Depends(get_insight_aggregator)]
AppSettings = Annotated[Settings, Depends(get_settings)]
