from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from starhistory.models.metrics import ComparisonOutcome
from starhistory.models.snapshot import RepositorySnapshot
from starhistory.services.history.comparison import compare, decide_outcome

NOW = datetime(2024, 6, 1, tzinfo=UTC)


def _snapshot(identifier: str, stars: int, age_days: int = 100) -> RepositorySnapshot:
    return RepositorySnapshot(
        identifier=identifier,
        created_at=NOW - timedelta(days=age_days),
        current_star_count=stars,
    )


def test_rates_within_margin_are_a_tie() -> None:
    result = compare(_snapshot("a/one", 1000), _snapshot("b/two", 1050), now=NOW)

    assert result.first.stars_per_day == pytest.approx(10.0)
    assert result.second.stars_per_day == pytest.approx(10.5)
    assert result.outcome == ComparisonOutcome.TIE
    assert result.winner is None


def test_rate_beyond_margin_wins() -> None:
    result = compare(_snapshot("a/one", 1000), _snapshot("b/two", 1150), now=NOW)

    assert result.outcome == ComparisonOutcome.SECOND
    assert result.winner == "b/two"


def test_outcome_is_symmetric() -> None:
    result = compare(_snapshot("b/two", 1150), _snapshot("a/one", 1000), now=NOW)

    assert result.outcome == ComparisonOutcome.FIRST
    assert result.winner == "b/two"


def test_older_repository_with_more_stars_can_lose() -> None:
    result = compare(_snapshot("old/big", 5000, age_days=1000), _snapshot("new/small", 1000, age_days=50), now=NOW)

    assert result.outcome == ComparisonOutcome.SECOND


def test_custom_margin() -> None:
    assert decide_outcome(10.0, 10.5, tie_margin=0.01) == ComparisonOutcome.SECOND
    assert decide_outcome(10.0, 10.5, tie_margin=0.10) == ComparisonOutcome.TIE
    assert decide_outcome(0.0, 0.0, tie_margin=0.10) == ComparisonOutcome.TIE


def test_comparison_serializes() -> None:
    payload = compare(_snapshot("a/one", 1000), _snapshot("b/two", 1150), now=NOW).to_dict()

    assert payload["outcome"] == "second"
    assert payload["winner"] == "b/two"
    assert payload["first"]["identifier"] == "a/one"
