"""Estimated star history from activity signals and the current total."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from itertools import accumulate
from typing import Protocol, Sequence

from starhistory.config.settings import settings
from starhistory.models.history import StarHistoryPoint
from starhistory.models.snapshot import ActivityEvent, ActivityKind
from starhistory.services.history.weeks import build_week_grid, count_by_week, counts_per_grid_week

logger = logging.getLogger(__name__)

# Model defaults, overridable through settings.
DEFAULT_SEED_FRACTION = 0.05
DEFAULT_GROWTH_EXPONENT = 1.75
DEFAULT_COMMIT_WEIGHT = 0.02
DEFAULT_MAX_ACTIVITY_BONUS = 0.5
DEFAULT_RELEASE_BOOST = 0.04
DEFAULT_EARLY_BOOST = 0.08
DEFAULT_EARLY_WINDOW_WEEKS = 10
DEFAULT_EARLY_DECAY_WEEKS = 3.0

SMOOTHING_FACTOR = 0.95


@dataclass(frozen=True, slots=True)
class WeeklySignals:
    """Per-grid-week commit counts and release flags."""

    commits: tuple[int, ...]
    releases: tuple[bool, ...]


def build_weekly_signals(
    activity_events: Sequence[ActivityEvent],
    grid: Sequence[datetime],
    *,
    now: datetime,
) -> WeeklySignals:
    commit_counts = count_by_week(event.timestamp for event in activity_events if event.kind == ActivityKind.COMMIT)
    release_counts = count_by_week(event.timestamp for event in activity_events if event.kind == ActivityKind.RELEASE)
    return WeeklySignals(
        commits=counts_per_grid_week(grid, commit_counts, now=now),
        releases=tuple(count > 0 for count in counts_per_grid_week(grid, release_counts, now=now)),
    )


class EstimationStrategy(Protocol):
    """Growth model plugged into the estimation path.

    `estimate` returns one candidate cumulative value per grid week. The path
    owns the fold, ceiling clamp, final-point correction and smoothing, so a
    strategy only shapes the curve.
    """

    def seed(self, current_total: int) -> int: ...

    def estimate(
        self,
        grid: Sequence[datetime],
        signals: WeeklySignals,
        current_total: int,
    ) -> Sequence[float]: ...


@dataclass(slots=True)
class WeightedSignalStrategy:
    """Base growth, activity multiplier, release boost and early-adoption boost."""

    seed_fraction: float = field(
        default_factory=lambda: getattr(settings, "ESTIMATION_SEED_FRACTION", DEFAULT_SEED_FRACTION)
    )
    growth_exponent: float = field(
        default_factory=lambda: getattr(settings, "ESTIMATION_GROWTH_EXPONENT", DEFAULT_GROWTH_EXPONENT)
    )
    commit_weight: float = field(
        default_factory=lambda: getattr(settings, "ESTIMATION_COMMIT_WEIGHT", DEFAULT_COMMIT_WEIGHT)
    )
    max_activity_bonus: float = field(
        default_factory=lambda: getattr(settings, "ESTIMATION_MAX_ACTIVITY_BONUS", DEFAULT_MAX_ACTIVITY_BONUS)
    )
    release_boost: float = field(
        default_factory=lambda: getattr(settings, "ESTIMATION_RELEASE_BOOST", DEFAULT_RELEASE_BOOST)
    )
    early_boost: float = field(
        default_factory=lambda: getattr(settings, "ESTIMATION_EARLY_BOOST", DEFAULT_EARLY_BOOST)
    )
    early_window_weeks: int = field(
        default_factory=lambda: getattr(settings, "ESTIMATION_EARLY_WINDOW_WEEKS", DEFAULT_EARLY_WINDOW_WEEKS)
    )
    early_decay_weeks: float = field(
        default_factory=lambda: getattr(settings, "ESTIMATION_EARLY_DECAY_WEEKS", DEFAULT_EARLY_DECAY_WEEKS)
    )

    def seed(self, current_total: int) -> int:
        return max(1, math.floor(current_total * self.seed_fraction))

    def estimate(
        self,
        grid: Sequence[datetime],
        signals: WeeklySignals,
        current_total: int,
    ) -> list[float]:
        total_weeks = len(grid)
        candidates: list[float] = []
        for index in range(total_weeks):
            progress = index / total_weeks
            base = current_total * progress**self.growth_exponent
            candidate = base * self._activity_multiplier(signals.commits[index])
            if signals.releases[index]:
                candidate += current_total * self.release_boost
            candidate += self._early_adoption(index, current_total)
            candidates.append(candidate)
        return candidates

    def _activity_multiplier(self, commits: int) -> float:
        return 1.0 + min(commits * self.commit_weight, self.max_activity_bonus)

    def _early_adoption(self, index: int, current_total: int) -> float:
        if index >= self.early_window_weeks:
            return 0.0
        decay = max(self.early_decay_weeks, 1e-9)
        return current_total * self.early_boost * math.exp(-index / decay)


def smooth_backward(values: Sequence[int]) -> tuple[int, ...]:
    """Walk right to left pulling any value above its successor down to 95% of it.

    Applying it to its own output changes nothing.
    """

    smoothed = list(values)
    for index in range(len(smoothed) - 2, -1, -1):
        if smoothed[index] > smoothed[index + 1]:
            smoothed[index] = math.floor(smoothed[index + 1] * SMOOTHING_FACTOR)
    return tuple(smoothed)


def reconstruct_estimated(
    activity_events: Sequence[ActivityEvent],
    current_star_count: int,
    created_at: datetime,
    *,
    now: datetime,
    strategy: EstimationStrategy | None = None,
) -> tuple[StarHistoryPoint, ...]:
    """Plausible weekly series anchored at a small seed and the exact current total."""

    grid = build_week_grid(created_at, now)
    if current_star_count <= 0:
        return tuple(StarHistoryPoint(date=instant.date(), cumulative_stars=0) for instant in grid)

    model = strategy or WeightedSignalStrategy()
    signals = build_weekly_signals(activity_events, grid, now=now)
    candidates = list(model.estimate(grid, signals, current_star_count))
    if len(candidates) != len(grid):
        raise ValueError(f"Estimation strategy returned {len(candidates)} values for {len(grid)} weeks")

    seed = min(current_star_count, max(1, int(model.seed(current_star_count))))

    def _step(running: int, candidate: float) -> int:
        return min(current_star_count, max(running, math.floor(candidate)))

    folded = tuple(accumulate(candidates, _step, initial=seed))[1:]
    corrected = folded[:-1] + (current_star_count,)
    values = smooth_backward(corrected)

    logger.debug(
        "Built estimated star history",
        extra={
            "weeks": len(grid),
            "commits": sum(signals.commits),
            "release_weeks": sum(signals.releases),
            "seed": seed,
        },
    )
    return tuple(
        StarHistoryPoint(date=instant.date(), cumulative_stars=value)
        for instant, value in zip(grid, values)
    )
