"""Derived metrics, comparison and insight value objects."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Optional


class MilestoneTier(str, enum.Enum):
    MINOR = "minor"
    SIGNIFICANT = "significant"
    MAJOR = "major"


@dataclass(frozen=True, slots=True)
class Milestone:
    """First point at which the series reached a threshold."""

    date: date
    stars: int
    tier: MilestoneTier


@dataclass(frozen=True, slots=True)
class GrowthWindow:
    """Sliding window with the largest net increase."""

    start: date
    end: date
    growth: int


@dataclass(frozen=True, slots=True)
class RepositoryMetrics:
    """Per-repository metrics bundle derived from a reconstructed series."""

    identifier: str
    age_in_days: int
    stars_per_day: float
    annualized_growth_rate: float
    average_daily_growth: float
    velocity_score: float
    consistency_score: int
    momentum_score: int
    momentum_ratio: float
    history_growth_percent: float
    milestones: tuple[Milestone, ...] = field(default_factory=tuple)
    best_growth_window: Optional[GrowthWindow] = None
    prediction_30_days: int = 0

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["milestones"] = [
            {"date": milestone.date.isoformat(), "stars": milestone.stars, "type": milestone.tier.value}
            for milestone in self.milestones
        ]
        if self.best_growth_window is not None:
            payload["best_growth_window"] = {
                "start": self.best_growth_window.start.isoformat(),
                "end": self.best_growth_window.end.isoformat(),
                "growth": self.best_growth_window.growth,
            }
        return payload


class ComparisonOutcome(str, enum.Enum):
    FIRST = "first"
    SECOND = "second"
    TIE = "tie"


@dataclass(frozen=True, slots=True)
class ComparisonSide:
    identifier: str
    age_in_days: int
    stars_per_day: float
    annualized_growth_rate: float


@dataclass(frozen=True, slots=True)
class ComparisonResult:
    """Two snapshots scored against each other by stars per day."""

    first: ComparisonSide
    second: ComparisonSide
    outcome: ComparisonOutcome

    @property
    def winner(self) -> Optional[str]:
        if self.outcome == ComparisonOutcome.FIRST:
            return self.first.identifier
        if self.outcome == ComparisonOutcome.SECOND:
            return self.second.identifier
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "first": asdict(self.first),
            "second": asdict(self.second),
            "outcome": self.outcome.value,
            "winner": self.winner,
        }


class InsightType(str, enum.Enum):
    MILESTONE = "milestone"
    TREND = "trend"
    PREDICTION = "prediction"
    COMPARISON = "comparison"


@dataclass(frozen=True, slots=True)
class Insight:
    """Narrative observation about one or more repositories."""

    type: InsightType
    title: str
    description: str
    repository: str
    value: Optional[str] = None
    trend: Optional[str] = None
    severity: Optional[str] = None
    date: Optional[date] = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["type"] = self.type.value
        payload["date"] = self.date.isoformat() if self.date else None
        return payload
