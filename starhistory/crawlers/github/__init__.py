"""GitHub provider for repository snapshots."""

from starhistory.crawlers.github.client import GitHubStarClient, sanitize_for_log, sanitize_log_extra
from starhistory.crawlers.github.contracts import FetchResult, FetchState
from starhistory.crawlers.github.snapshot_stage import SnapshotStage

__all__ = [
    "FetchResult",
    "FetchState",
    "GitHubStarClient",
    "SnapshotStage",
    "sanitize_for_log",
    "sanitize_log_extra",
]
