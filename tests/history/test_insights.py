from __future__ import annotations

from datetime import UTC, date, datetime

from starhistory.models.metrics import InsightType, Milestone, MilestoneTier, RepositoryMetrics
from starhistory.models.snapshot import RepositorySnapshot
from starhistory.services.history.insights import generate_insights

NOW = datetime(2024, 6, 1, tzinfo=UTC)


def _entry(identifier: str, current: int, **overrides) -> tuple[RepositorySnapshot, RepositoryMetrics]:
    snapshot = RepositorySnapshot(
        identifier=identifier,
        created_at=datetime(2023, 1, 1, tzinfo=UTC),
        current_star_count=current,
    )
    values = {
        "identifier": identifier,
        "age_in_days": 517,
        "stars_per_day": current / 517,
        "annualized_growth_rate": 0.0,
        "average_daily_growth": 1.0,
        "velocity_score": 10.0,
        "consistency_score": 50,
        "momentum_score": 100,
        "momentum_ratio": 1.0,
        "history_growth_percent": 90.0,
        "prediction_30_days": current,
    }
    values.update(overrides)
    return snapshot, RepositoryMetrics(**values)


def _titles(insights) -> list[str]:
    return [insight.title for insight in insights]


def test_strong_momentum_is_reported() -> None:
    insights = generate_insights([_entry("a/fast", 1000, momentum_ratio=1.5)], now=NOW)

    assert _titles(insights) == ["Strong Growth Momentum"]
    assert insights[0].type == InsightType.TREND
    assert insights[0].trend == "up"
    assert "50%" in insights[0].description


def test_slowing_growth_is_reported() -> None:
    insights = generate_insights([_entry("a/slow", 1000, momentum_ratio=0.2, momentum_score=20)], now=NOW)

    assert _titles(insights) == ["Slowing Growth"]
    assert insights[0].trend == "down"


def test_flat_repository_is_not_reported_as_slowing() -> None:
    insights = generate_insights(
        [_entry("a/flat", 1000, momentum_ratio=0.0, momentum_score=0, average_daily_growth=0.0)],
        now=NOW,
    )

    assert insights == []


def test_only_recent_milestones_are_reported() -> None:
    milestones = (
        Milestone(date=date(2023, 3, 1), stars=1000, tier=MilestoneTier.SIGNIFICANT),
        Milestone(date=date(2024, 5, 20), stars=10000, tier=MilestoneTier.MAJOR),
    )

    insights = generate_insights([_entry("a/big", 12000, milestones=milestones)], now=NOW)

    assert _titles(insights) == ["10,000 Stars Milestone"]
    assert insights[0].severity == "high"
    assert insights[0].to_dict()["date"] == "2024-05-20"


def test_forecast_reports_projected_gain() -> None:
    insights = generate_insights([_entry("a/grow", 1000, prediction_30_days=1300)], now=NOW)

    assert _titles(insights) == ["30-Day Growth Forecast"]
    assert insights[0].value == "+300"
    assert insights[0].type == InsightType.PREDICTION


def test_growth_leader_is_picked_by_momentum() -> None:
    insights = generate_insights(
        [
            _entry("a/steady", 5000, momentum_score=60),
            _entry("b/rising", 800, momentum_score=80),
        ],
        now=NOW,
    )

    leader = [insight for insight in insights if insight.type == InsightType.COMPARISON]
    assert len(leader) == 1
    assert leader[0].repository == "b/rising"
    assert leader[0].to_dict()["type"] == "comparison"
