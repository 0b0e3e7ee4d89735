"""Growth metrics derived from a reconstructed star series."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Optional, Sequence

from starhistory.config.settings import settings
from starhistory.exceptions import InsufficientHistoryError
from starhistory.models.history import StarHistoryPoint
from starhistory.models.metrics import GrowthWindow, Milestone, MilestoneTier, RepositoryMetrics
from starhistory.models.snapshot import RepositorySnapshot, ensure_utc

logger = logging.getLogger(__name__)

MILESTONE_THRESHOLDS = (100, 500, 1000, 5000, 10000, 50000, 100000)
RECENT_POINTS = 30
MAX_WINDOW_POINTS = 30
VELOCITY_SCALE = 10.0
MIN_AGE_YEARS = 0.1
DEFAULT_PREDICTION_HORIZON_DAYS = 30


def age_in_days(created_at: datetime, now: datetime) -> int:
    """Whole days since creation, never below one."""
    return max(1, (ensure_utc(now) - ensure_utc(created_at)) // timedelta(days=1))


def stars_per_day(current_star_count: int, age_days: int) -> float:
    return current_star_count / max(age_days, 1)


def annualized_growth_rate(current_star_count: int, age_days: int) -> float:
    """Stars per year as a percentage; repositories under ~36 days count as 0.1 years."""
    return (current_star_count / max(age_days / 365, MIN_AGE_YEARS)) * 100


def milestone_tier(threshold: int) -> MilestoneTier:
    if threshold >= 10000:
        return MilestoneTier.MAJOR
    if threshold >= 1000:
        return MilestoneTier.SIGNIFICANT
    return MilestoneTier.MINOR


def find_milestones(series: Sequence[StarHistoryPoint]) -> tuple[Milestone, ...]:
    milestones: list[Milestone] = []
    for threshold in MILESTONE_THRESHOLDS:
        reached = next((point for point in series if point.cumulative_stars >= threshold), None)
        if reached is not None:
            milestones.append(Milestone(date=reached.date, stars=threshold, tier=milestone_tier(threshold)))
    return tuple(milestones)


def best_growth_window(series: Sequence[StarHistoryPoint]) -> Optional[GrowthWindow]:
    """Largest net increase across `min(30, len // 2)` consecutive steps."""
    window = min(MAX_WINDOW_POINTS, len(series) // 2)
    if window < 1:
        return None

    best: Optional[GrowthWindow] = None
    for start in range(len(series) - window):
        end = start + window
        growth = max(0, series[end].cumulative_stars - series[start].cumulative_stars)
        if growth > 0 and (best is None or growth > best.growth):
            best = GrowthWindow(start=series[start].date, end=series[end].date, growth=growth)
    return best


def _daily_growth(first: StarHistoryPoint, last: StarHistoryPoint) -> float:
    days = max(1, (last.date - first.date).days)
    return max(0, last.cumulative_stars - first.cumulative_stars) / days


def _consistency(series: Sequence[StarHistoryPoint]) -> int:
    increments = [
        max(0, current.cumulative_stars - previous.cumulative_stars)
        for previous, current in zip(series, series[1:])
    ]
    if not increments:
        return 0
    mean = sum(increments) / len(increments)
    if mean <= 0:
        return 0
    variance = sum((increment - mean) ** 2 for increment in increments) / len(increments)
    score = 100 - (math.sqrt(variance) / mean) * 100
    return round(max(0.0, min(100.0, score)))


def compute_metrics(
    snapshot: RepositorySnapshot,
    series: Sequence[StarHistoryPoint],
    *,
    now: datetime,
    horizon_days: int | None = None,
) -> RepositoryMetrics:
    """Velocity, consistency, momentum, milestones and a linear 30-day forecast."""

    if not series:
        raise InsufficientHistoryError(f"No star history points for {snapshot.identifier}")

    history = sorted(series, key=lambda point: point.date)
    horizon = horizon_days or getattr(settings, "PREDICTION_HORIZON_DAYS", DEFAULT_PREDICTION_HORIZON_DAYS)
    current = snapshot.current_star_count
    age = age_in_days(snapshot.created_at, now)

    average_daily_growth = _daily_growth(history[0], history[-1])
    total_growth = max(0, history[-1].cumulative_stars - history[0].cumulative_stars)

    recent = history[-min(RECENT_POINTS, len(history)):]
    recent_daily_growth = _daily_growth(recent[0], recent[-1]) if len(recent) > 1 else 0.0
    momentum_ratio = recent_daily_growth / average_daily_growth if average_daily_growth > 0 else 0.0

    metrics = RepositoryMetrics(
        identifier=snapshot.identifier,
        age_in_days=age,
        stars_per_day=stars_per_day(current, age),
        annualized_growth_rate=annualized_growth_rate(current, age),
        average_daily_growth=average_daily_growth,
        velocity_score=min(100.0, max(0.0, average_daily_growth * VELOCITY_SCALE)),
        consistency_score=_consistency(history),
        momentum_score=round(max(0.0, min(100.0, momentum_ratio * 100))),
        momentum_ratio=momentum_ratio,
        history_growth_percent=(total_growth / current) * 100 if current > 0 else 0.0,
        milestones=find_milestones(history),
        best_growth_window=best_growth_window(history),
        prediction_30_days=max(current, round(current + average_daily_growth * horizon)),
    )
    logger.debug(
        "Computed repository metrics",
        extra={
            "repository": snapshot.identifier,
            "velocity": metrics.velocity_score,
            "consistency": metrics.consistency_score,
            "momentum": metrics.momentum_score,
        },
    )
    return metrics
