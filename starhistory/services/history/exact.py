"""Exact star history from enumerated stargazer timestamps."""

from __future__ import annotations

import logging
from datetime import datetime
from itertools import accumulate
from typing import Sequence

from starhistory.models.history import StarHistoryPoint
from starhistory.models.snapshot import StargazerEvent
from starhistory.services.history.weeks import build_week_grid, count_by_week, counts_per_grid_week

logger = logging.getLogger(__name__)


def reconstruct_exact(
    stargazer_events: Sequence[StargazerEvent],
    created_at: datetime,
    *,
    now: datetime,
) -> tuple[StarHistoryPoint, ...]:
    """Cumulative weekly counts of the given stargazer events.

    Monotonic by construction. The last point is whatever the events add up
    to; callers decide whether that is authoritative.

    Stars are counted per calendar week bucket, and a whole bucket lands in
    the grid week where the bucket starts. A point can therefore include
    stars given up to one bucket (under seven days) after its week ends.
    """

    grid = build_week_grid(created_at, now)
    weekly = counts_per_grid_week(
        grid,
        count_by_week(event.timestamp for event in stargazer_events),
        now=now,
    )
    running = accumulate(weekly)
    points = tuple(
        StarHistoryPoint(date=instant.date(), cumulative_stars=total)
        for instant, total in zip(grid, running)
    )
    logger.debug(
        "Built exact star history",
        extra={"events": len(stargazer_events), "weeks": len(points)},
    )
    return points
