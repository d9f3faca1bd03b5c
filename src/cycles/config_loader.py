"""Load, validate, and hot-reload the cycle engine configuration.

The config lives in ``cycle_config.yaml`` alongside this module.  At startup
it is loaded once and cached.  Call ``reload_cycle_config()`` to re-read from
disk after an edit without a restart.

Usage::

    from src.cycles.config_loader import get_cycle_config

    config = get_cycle_config()
    config.cycle_length.min_days          # 21
    config.prediction.luteal_phase_days   # 14
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("cadence.cycles.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "cycle_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class LengthBounds:
    """Default and plausibility bounds for a length measured in days."""

    default_days: int
    min_days: int
    max_days: int

    def is_plausible(self, days: int) -> bool:
        return self.min_days <= days <= self.max_days


@dataclass
class CycleLengthConfig(LengthBounds):
    rolling_average_cycles: int = 6
    weight_decay: float = 0.8


@dataclass
class PredictionConfig:
    """Projection horizon and luteal/fertile assumptions."""

    horizon_cycles: int = 3
    min_cycles_for_prediction: int = 3
    luteal_phase_days: int = 14
    fertile_window_days: int = 6


@dataclass
class FertilityConfig:
    """Base daily conception probability per window grade."""

    highly_fertile_probability: float = 0.3
    fertile_probability: float = 0.2
    less_fertile_probability: float = 0.1


@dataclass
class InsightConfig:
    irregular_regularity_threshold: float = 70.0
    low_confidence_threshold: float = 50.0
    frequent_symptom_ratio: float = 0.5
    min_temperature_readings: int = 14
    temperature_shift_threshold_c: float = 0.2


@dataclass
class CycleConfig:
    """Complete, validated cycle engine configuration.

    This is the single in-memory representation of cycle_config.yaml.
    The analyzer, predictor, fertility calculator and insight aggregator
    all read from this object.
    """

    version: str
    cycle_length: CycleLengthConfig
    period_length: LengthBounds
    prediction: PredictionConfig
    fertility: FertilityConfig
    insights: InsightConfig
    _raw: dict = field(default_factory=dict, repr=False)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when cycle_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Cycle config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> CycleConfig:
    """Validate the raw YAML dict and construct a CycleConfig.

    Missing keys fall back to defaults; wrong types and inconsistent bounds
    are collected and reported together.

    Raises:
        ConfigValidationError: If any value is invalid.
    """
    errors: list[str] = []

    def _number(section: dict, key: str, default: Any, cast: type, where: str) -> Any:
        value = section.get(key, default)
        try:
            return cast(value)
        except (TypeError, ValueError):
            errors.append(f"{where}.{key} must be a number, got {value!r}")
            return default

    def _section(name: str) -> dict:
        value = raw.get(name) or {}
        if not isinstance(value, dict):
            errors.append(f"'{name}' must be a mapping")
            return {}
        return value

    version = str(raw.get("version", "1.0"))

    # ── Lengths ──
    cl_raw = _section("cycle_length")
    cycle_length = CycleLengthConfig(
        default_days=_number(cl_raw, "default_days", 28, int, "cycle_length"),
        min_days=_number(cl_raw, "min_days", 21, int, "cycle_length"),
        max_days=_number(cl_raw, "max_days", 35, int, "cycle_length"),
        rolling_average_cycles=_number(cl_raw, "rolling_average_cycles", 6, int, "cycle_length"),
        weight_decay=_number(cl_raw, "weight_decay", 0.8, float, "cycle_length"),
    )

    pl_raw = _section("period_length")
    period_length = LengthBounds(
        default_days=_number(pl_raw, "default_days", 5, int, "period_length"),
        min_days=_number(pl_raw, "min_days", 3, int, "period_length"),
        max_days=_number(pl_raw, "max_days", 10, int, "period_length"),
    )

    for name, bounds in (("cycle_length", cycle_length), ("period_length", period_length)):
        if bounds.min_days < 1:
            errors.append(f"{name}.min_days must be >= 1, got {bounds.min_days}")
        if bounds.min_days > bounds.max_days:
            errors.append(
                f"{name}.min_days ({bounds.min_days}) is greater than "
                f"max_days ({bounds.max_days})"
            )
        if not bounds.is_plausible(bounds.default_days):
            errors.append(
                f"{name}.default_days ({bounds.default_days}) is outside "
                f"[{bounds.min_days}, {bounds.max_days}]"
            )

    if cycle_length.rolling_average_cycles < 1:
        errors.append("cycle_length.rolling_average_cycles must be >= 1")
    if not (0.0 < cycle_length.weight_decay <= 1.0):
        errors.append(
            f"cycle_length.weight_decay = {cycle_length.weight_decay} is out of range (0.0, 1.0]"
        )

    # ── Prediction ──
    pr_raw = _section("prediction")
    prediction = PredictionConfig(
        horizon_cycles=_number(pr_raw, "horizon_cycles", 3, int, "prediction"),
        min_cycles_for_prediction=_number(pr_raw, "min_cycles_for_prediction", 3, int, "prediction"),
        luteal_phase_days=_number(pr_raw, "luteal_phase_days", 14, int, "prediction"),
        fertile_window_days=_number(pr_raw, "fertile_window_days", 6, int, "prediction"),
    )
    if prediction.horizon_cycles < 1:
        errors.append("prediction.horizon_cycles must be >= 1")
    if prediction.fertile_window_days < 1:
        errors.append("prediction.fertile_window_days must be >= 1")
    if prediction.luteal_phase_days >= cycle_length.min_days:
        errors.append(
            f"prediction.luteal_phase_days ({prediction.luteal_phase_days}) must be "
            f"shorter than cycle_length.min_days ({cycle_length.min_days})"
        )

    # ── Fertility ──
    fe_raw = _section("fertility")
    fertility = FertilityConfig(
        highly_fertile_probability=_number(fe_raw, "highly_fertile_probability", 0.3, float, "fertility"),
        fertile_probability=_number(fe_raw, "fertile_probability", 0.2, float, "fertility"),
        less_fertile_probability=_number(fe_raw, "less_fertile_probability", 0.1, float, "fertility"),
    )
    for key, value in vars(fertility).items():
        if not (0.0 <= value <= 1.0):
            errors.append(f"fertility.{key} = {value} is out of range [0.0, 1.0]")

    # ── Insights ──
    in_raw = _section("insights")
    insights = InsightConfig(
        irregular_regularity_threshold=_number(in_raw, "irregular_regularity_threshold", 70, float, "insights"),
        low_confidence_threshold=_number(in_raw, "low_confidence_threshold", 50, float, "insights"),
        frequent_symptom_ratio=_number(in_raw, "frequent_symptom_ratio", 0.5, float, "insights"),
        min_temperature_readings=_number(in_raw, "min_temperature_readings", 14, int, "insights"),
        temperature_shift_threshold_c=_number(in_raw, "temperature_shift_threshold_c", 0.2, float, "insights"),
    )
    if insights.min_temperature_readings < 2:
        errors.append("insights.min_temperature_readings must be >= 2")

    if errors:
        raise ConfigValidationError(
            f"cycle_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return CycleConfig(
        version=version,
        cycle_length=cycle_length,
        period_length=period_length,
        prediction=prediction,
        fertility=fertility,
        insights=insights,
        _raw=raw,
    )


def load_cycle_config(path: Path | None = None) -> CycleConfig:
    """Load and validate the cycle config from disk.

    Args:
        path: Override path to YAML. Uses the bundled cycle_config.yaml by default.

    Returns:
        Validated CycleConfig instance.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded cycle config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: CycleConfig | None = None
_config_lock = threading.Lock()


def get_cycle_config() -> CycleConfig:
    """Return the global CycleConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_cycle_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_cycle_config()
    return _config


def reload_cycle_config(path: Path | None = None) -> CycleConfig:
    """Reload the cycle config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is
    re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_cycle_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded cycle config: %s → %s", old_version, new_config.version)
    return new_config
