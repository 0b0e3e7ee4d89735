"""Star-history reconstruction and metrics engine."""

from starhistory.services.history.comparison import compare
from starhistory.services.history.estimation import (
    EstimationStrategy,
    WeeklySignals,
    WeightedSignalStrategy,
    reconstruct_estimated,
    smooth_backward,
)
from starhistory.services.history.exact import reconstruct_exact
from starhistory.services.history.insights import generate_insights
from starhistory.services.history.metrics import compute_metrics
from starhistory.services.history.reconstruction import (
    ReconstructionMethod,
    reconstruct_history,
    select_method,
)
from starhistory.services.history.weeks import WeekBucket, build_week_grid, week_bucket, week_key

__all__ = [
    "EstimationStrategy",
    "WeeklySignals",
    "WeightedSignalStrategy",
    "ReconstructionMethod",
    "WeekBucket",
    "build_week_grid",
    "compare",
    "compute_metrics",
    "generate_insights",
    "reconstruct_estimated",
    "reconstruct_exact",
    "reconstruct_history",
    "select_method",
    "smooth_backward",
    "week_bucket",
    "week_key",
]
