"""Choose between exact and estimated reconstruction for a snapshot."""

from __future__ import annotations

import enum
import logging
from datetime import datetime
from typing import Any

from starhistory.config.settings import settings as default_settings
from starhistory.models.history import StarHistoryPoint
from starhistory.models.snapshot import RepositorySnapshot
from starhistory.services.history.estimation import EstimationStrategy, reconstruct_estimated
from starhistory.services.history.exact import reconstruct_exact

logger = logging.getLogger(__name__)

DEFAULT_ENUMERATION_CUTOFF = 10000


class ReconstructionMethod(str, enum.Enum):
    EXACT = "exact"
    ESTIMATED = "estimated"


def enumeration_cutoff(config: Any = None) -> int:
    return int(getattr(config or default_settings, "STAR_HISTORY_ENUMERATION_CUTOFF", DEFAULT_ENUMERATION_CUTOFF))


def select_method(snapshot: RepositorySnapshot, *, cutoff: int = DEFAULT_ENUMERATION_CUTOFF) -> ReconstructionMethod:
    """Exact only for fully enumerated stargazers below the cost cutoff."""
    if (
        snapshot.stargazer_events
        and snapshot.stargazers_complete
        and snapshot.current_star_count < cutoff
    ):
        return ReconstructionMethod.EXACT
    return ReconstructionMethod.ESTIMATED


def reconstruct_history(
    snapshot: RepositorySnapshot,
    *,
    now: datetime,
    strategy: EstimationStrategy | None = None,
    settings: Any = None,
) -> tuple[StarHistoryPoint, ...]:
    """Weekly cumulative star series for one snapshot at reference instant `now`."""

    method = select_method(snapshot, cutoff=enumeration_cutoff(settings))
    if method == ReconstructionMethod.EXACT:
        points = reconstruct_exact(snapshot.stargazer_events, snapshot.created_at, now=now)
        ceiling = snapshot.current_star_count
        # Unstars between enumeration and the metadata read can overshoot the total.
        points = tuple(
            point if point.cumulative_stars <= ceiling else StarHistoryPoint(point.date, ceiling)
            for point in points
        )
    else:
        if snapshot.stargazer_events and not snapshot.stargazers_complete:
            logger.info(
                "Stargazer enumeration truncated, estimating history instead",
                extra={"repository": snapshot.identifier, "stargazer_events": len(snapshot.stargazer_events)},
            )
        points = reconstruct_estimated(
            snapshot.activity_events,
            snapshot.current_star_count,
            snapshot.created_at,
            now=now,
            strategy=strategy,
        )

    logger.info(
        "Reconstructed star history",
        extra={"repository": snapshot.identifier, "method": method.value, "points": len(points)},
    )
    return points
