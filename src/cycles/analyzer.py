"""Cycle statistics from historical period logs.

Turns an unordered collection of period logs into average cycle length,
average period length, and a regularity score.  Intervals outside the
physiologically plausible range are dropped before averaging so a single
data-entry mistake cannot drag the averages.

With too little history the analyzer returns documented defaults (28-day
cycle, 5-day period, regularity 0) instead of raising.
"""

from __future__ import annotations

import logging
import statistics
from collections.abc import Iterable, Sequence

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.models import CycleStatistics, FlowIntensity, FlowPattern, PeriodLog

logger = logging.getLogger("cadence.cycles.analyzer")

# A variation coefficient at or above this value scores 0 regularity.
IRREGULAR_VARIATION = 0.3
# Cycles whose variation coefficient stays at or below this are "regular".
REGULAR_VARIATION = 0.15


def chronological(logs: Iterable[PeriodLog]) -> list[PeriodLog]:
    """Return logs sorted oldest first."""
    return sorted(logs, key=lambda log: (log.start_date, log.end_date))


def most_recent_first(logs: Iterable[PeriodLog]) -> list[PeriodLog]:
    """Return logs sorted newest first."""
    return sorted(logs, key=lambda log: (log.start_date, log.end_date), reverse=True)


def regularity_score(mean: float, stddev: float) -> float:
    """Map the variation coefficient to a 0–100 regularity score.

    ``100 × (1 − cv / 0.3)`` clamped to [0, 100]: cv 0 scores 100 and
    cv ≥ 0.3 scores 0.
    """
    if mean <= 0:
        return 0.0
    variation = stddev / mean
    return max(0.0, min(100.0, 100.0 * (1.0 - variation / IRREGULAR_VARIATION)))


class CycleStatisticsAnalyzer:
    """Compute cycle statistics from period logs.

    Usage::

        analyzer = CycleStatisticsAnalyzer()
        stats = analyzer.analyze(logs)
        print(stats.average_cycle_length, stats.regularity_score)
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    @property
    def config(self) -> CycleConfig:
        return self._config

    def analyze(self, logs: Iterable[PeriodLog]) -> CycleStatistics:
        """Compute statistics for a set of period logs.

        Args:
            logs: Validated period logs in any order.

        Returns:
            CycleStatistics.  Defaults are used wherever the logs do not
            contain enough plausible data.
        """
        ordered = chronological(logs)
        cycle_cfg = self._config.cycle_length
        period_cfg = self._config.period_length

        history = self.cycle_lengths(ordered)
        periods = self.period_lengths(ordered)

        if history:
            mean = statistics.mean(history)
            average_cycle = round(mean)
        else:
            mean = float(cycle_cfg.default_days)
            average_cycle = cycle_cfg.default_days

        average_period = round(statistics.mean(periods)) if periods else period_cfg.default_days

        if len(history) >= 2:
            stddev = statistics.pstdev(history)
            variation = stddev / mean
            regularity = round(regularity_score(mean, stddev), 1)
        else:
            stddev = 0.0
            variation = 0.0
            regularity = 0.0

        stats = CycleStatistics(
            average_cycle_length=average_cycle,
            average_period_length=average_period,
            regularity_score=regularity,
            standard_deviation=round(stddev, 2),
            cycle_length_history=tuple(history),
            mean_cycle_length=round(mean, 2),
            variation_coefficient=round(variation, 4),
            shortest_cycle=min(history) if history else None,
            longest_cycle=max(history) if history else None,
            is_regular=len(history) >= 2 and variation <= REGULAR_VARIATION,
            total_logs=len(ordered),
            flow_patterns=self.flow_patterns(ordered),
        )
        logger.debug(
            "Analyzed %d logs: cycle=%d period=%d regularity=%.1f (%d plausible cycles)",
            stats.total_logs,
            stats.average_cycle_length,
            stats.average_period_length,
            stats.regularity_score,
            stats.cycle_count,
        )
        return stats

    def cycle_lengths(self, ordered: Sequence[PeriodLog]) -> list[int]:
        """Plausible cycle lengths between chronologically adjacent logs.

        Args:
            ordered: Logs sorted oldest first.

        Returns:
            Cycle lengths in days, oldest first.
        """
        bounds = self._config.cycle_length
        lengths: list[int] = []
        for previous, current in zip(ordered, ordered[1:]):
            days = (current.start_date - previous.start_date).days
            if bounds.is_plausible(days):
                lengths.append(days)
            else:
                logger.debug(
                    "Dropping implausible cycle length %d days (%s → %s)",
                    days, previous.start_date, current.start_date,
                )
        return lengths

    def period_lengths(self, logs: Iterable[PeriodLog]) -> list[int]:
        """Plausible inclusive period lengths, one per log."""
        bounds = self._config.period_length
        lengths = []
        for log in logs:
            if bounds.is_plausible(log.period_length):
                lengths.append(log.period_length)
            else:
                logger.debug(
                    "Dropping implausible period length %d days (started %s)",
                    log.period_length, log.start_date,
                )
        return lengths

    def weighted_cycle_length(self, history: Sequence[int]) -> float | None:
        """Exponentially weighted average of the most recent cycle lengths.

        Weight is ``decay ** i`` with i = 0 for the most recent cycle, over at
        most ``rolling_average_cycles`` cycles.

        Args:
            history: Cycle lengths, oldest first.

        Returns:
            Weighted mean, or None for an empty history.
        """
        cfg = self._config.cycle_length
        recent = list(reversed(history))[: cfg.rolling_average_cycles]
        if not recent:
            return None
        weights = [cfg.weight_decay**i for i in range(len(recent))]
        return sum(w * length for w, length in zip(weights, recent)) / sum(weights)

    def predicted_cycle_length(self, stats: CycleStatistics) -> int:
        """Cycle length to project forward.

        The weighted average is preferred once ``min_cycles_for_prediction``
        plausible cycles exist; below that the plain rounded mean is used.
        """
        if stats.cycle_count >= self._config.prediction.min_cycles_for_prediction:
            weighted = self.weighted_cycle_length(stats.cycle_length_history)
            if weighted is not None:
                return round(weighted)
        return stats.average_cycle_length

    @staticmethod
    def flow_patterns(logs: Sequence[PeriodLog]) -> dict[FlowIntensity, FlowPattern]:
        """Frequency (0–100) and mean period length per flow intensity."""
        patterns: dict[FlowIntensity, FlowPattern] = {}
        if not logs:
            return patterns
        for intensity in FlowIntensity:
            matching = [log.period_length for log in logs if log.flow_intensity == intensity]
            patterns[intensity] = FlowPattern(
                frequency=round(100 * len(matching) / len(logs)),
                average_duration=round(statistics.mean(matching), 1) if matching else 0.0,
            )
        return patterns
