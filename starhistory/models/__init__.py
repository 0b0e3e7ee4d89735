"""Value objects shared by the reconstruction engine and its callers."""

from starhistory.models.history import StarHistoryPoint, format_display_label
from starhistory.models.metrics import (
    ComparisonOutcome,
    ComparisonResult,
    ComparisonSide,
    GrowthWindow,
    Insight,
    InsightType,
    Milestone,
    MilestoneTier,
    RepositoryMetrics,
)
from starhistory.models.snapshot import (
    ActivityEvent,
    ActivityKind,
    RepositorySnapshot,
    StargazerEvent,
    ensure_utc,
)

__all__ = [
    "ActivityEvent",
    "ActivityKind",
    "RepositorySnapshot",
    "StargazerEvent",
    "ensure_utc",
    "StarHistoryPoint",
    "format_display_label",
    "ComparisonOutcome",
    "ComparisonResult",
    "ComparisonSide",
    "GrowthWindow",
    "Insight",
    "InsightType",
    "Milestone",
    "MilestoneTier",
    "RepositoryMetrics",
]
