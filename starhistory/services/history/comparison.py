"""Two-way repository comparison with a tie margin."""

from __future__ import annotations

from datetime import datetime

from starhistory.config.settings import settings
from starhistory.models.metrics import ComparisonOutcome, ComparisonResult, ComparisonSide
from starhistory.models.snapshot import RepositorySnapshot
from starhistory.services.history.metrics import age_in_days, annualized_growth_rate, stars_per_day

DEFAULT_TIE_MARGIN = 0.10


def _side(snapshot: RepositorySnapshot, now: datetime) -> ComparisonSide:
    age = age_in_days(snapshot.created_at, now)
    return ComparisonSide(
        identifier=snapshot.identifier,
        age_in_days=age,
        stars_per_day=stars_per_day(snapshot.current_star_count, age),
        annualized_growth_rate=annualized_growth_rate(snapshot.current_star_count, age),
    )


def decide_outcome(first_rate: float, second_rate: float, *, tie_margin: float) -> ComparisonOutcome:
    """A side wins only when its rate beats the other's by more than the margin."""
    if first_rate > second_rate * (1 + tie_margin):
        return ComparisonOutcome.FIRST
    if second_rate > first_rate * (1 + tie_margin):
        return ComparisonOutcome.SECOND
    return ComparisonOutcome.TIE


def compare(
    first: RepositorySnapshot,
    second: RepositorySnapshot,
    *,
    now: datetime,
    tie_margin: float | None = None,
) -> ComparisonResult:
    margin = tie_margin if tie_margin is not None else getattr(settings, "COMPARISON_TIE_MARGIN", DEFAULT_TIE_MARGIN)
    first_side = _side(first, now)
    second_side = _side(second, now)
    return ComparisonResult(
        first=first_side,
        second=second_side,
        outcome=decide_outcome(first_side.stars_per_day, second_side.stars_per_day, tie_margin=margin),
    )
