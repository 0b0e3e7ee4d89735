"""Narrative insights over computed repository metrics."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence

from starhistory.config.settings import settings
from starhistory.models.metrics import Insight, InsightType, MilestoneTier, RepositoryMetrics
from starhistory.models.snapshot import RepositorySnapshot, ensure_utc

STRONG_MOMENTUM_RATIO = 1.2
SLOWING_MOMENTUM_RATIO = 0.5
DEFAULT_RECENT_DAYS = 30


def generate_insights(
    entries: Sequence[tuple[RepositorySnapshot, RepositoryMetrics]],
    *,
    now: datetime,
    recent_days: int | None = None,
) -> list[Insight]:
    """Momentum trends, fresh milestones, forecasts and the growth leader."""

    window = recent_days or getattr(settings, "INSIGHT_RECENT_DAYS", DEFAULT_RECENT_DAYS)
    recent_cutoff = (ensure_utc(now) - timedelta(days=window)).date()
    insights: list[Insight] = []

    for snapshot, metrics in entries:
        name = snapshot.identifier

        if metrics.momentum_ratio > STRONG_MOMENTUM_RATIO:
            insights.append(
                Insight(
                    type=InsightType.TREND,
                    title="Strong Growth Momentum",
                    description=(
                        f"{name} is experiencing accelerated growth, outpacing its historical average "
                        f"by {round((metrics.momentum_ratio - 1) * 100)}%"
                    ),
                    repository=name,
                    trend="up",
                    severity="high",
                )
            )
        elif metrics.average_daily_growth > 0 and metrics.momentum_ratio < SLOWING_MOMENTUM_RATIO:
            insights.append(
                Insight(
                    type=InsightType.TREND,
                    title="Slowing Growth",
                    description=f"{name} growth has slowed significantly compared to its historical pattern",
                    repository=name,
                    trend="down",
                    severity="medium",
                )
            )

        for milestone in metrics.milestones:
            if milestone.date <= recent_cutoff:
                continue
            insights.append(
                Insight(
                    type=InsightType.MILESTONE,
                    title=f"{milestone.stars:,} Stars Milestone",
                    description=f"{name} recently reached {milestone.stars:,} stars",
                    repository=name,
                    severity="high" if milestone.tier == MilestoneTier.MAJOR else "medium",
                    date=milestone.date,
                )
            )

        projected_gain = metrics.prediction_30_days - snapshot.current_star_count
        if projected_gain > 0:
            insights.append(
                Insight(
                    type=InsightType.PREDICTION,
                    title="30-Day Growth Forecast",
                    description=f"{name} is projected to gain ~{projected_gain:,} stars in the next 30 days",
                    repository=name,
                    value=f"+{projected_gain:,}",
                    trend="up",
                    severity="low",
                )
            )

    if len(entries) > 1:
        leader, _ = max(
            entries,
            key=lambda entry: (entry[1].momentum_score, entry[1].stars_per_day, entry[0].identifier),
        )
        insights.append(
            Insight(
                type=InsightType.COMPARISON,
                title="Growth Leader",
                description=(
                    f"{leader.identifier} has the strongest current growth momentum among compared repositories"
                ),
                repository=leader.identifier,
                trend="up",
                severity="medium",
            )
        )

    return insights
