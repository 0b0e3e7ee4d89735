"""Multi-repository star-history run with per-repository failure isolation."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from itertools import combinations
from typing import Any, Callable, Sequence

from starhistory.config.settings import settings
from starhistory.crawlers.github.client import GitHubStarClient, sanitize_for_log, sanitize_log_extra
from starhistory.crawlers.github.snapshot_stage import SnapshotStage
from starhistory.exceptions import RateLimitExceededError, RepositoryNotFoundError, UpstreamError
from starhistory.models.metrics import RepositoryMetrics
from starhistory.models.snapshot import RepositorySnapshot, ensure_utc
from starhistory.services.history.comparison import compare
from starhistory.services.history.estimation import EstimationStrategy
from starhistory.services.history.insights import generate_insights
from starhistory.services.history.metrics import compute_metrics
from starhistory.services.history.reconstruction import enumeration_cutoff, reconstruct_history, select_method

logger = logging.getLogger(__name__)

MIN_METRIC_POINTS = 2


def classify_error(exc: Exception) -> str:
    if isinstance(exc, RepositoryNotFoundError):
        return "not_found"
    if isinstance(exc, RateLimitExceededError):
        return "rate_limited"
    if isinstance(exc, UpstreamError):
        return "transport"
    return "unexpected"


class StarHistoryOrchestrator:
    """Fetches snapshots concurrently, then reconstructs, scores and compares them."""

    def __init__(
        self,
        *,
        github_client_factory: Callable[[], Any] = GitHubStarClient,
        snapshot_stage: Any | None = None,
        strategy: EstimationStrategy | None = None,
        concurrency: int | None = None,
    ) -> None:
        self._github_client_factory = github_client_factory
        self._snapshot_stage = snapshot_stage
        self._strategy = strategy
        self._concurrency = max(1, concurrency or getattr(settings, "GITHUB_CONCURRENCY", 4))

    async def run(self, repositories: Sequence[str], *, now: datetime) -> dict[str, Any]:
        reference = ensure_utc(now)
        run_stats: dict[str, Any] = {
            "reference_instant": reference.isoformat(),
            "repositories_requested": list(repositories),
            "repositories": {},
            "comparisons": [],
            "insights": [],
            "errors": [],
        }
        logger.info(
            "Star history run started",
            extra=sanitize_log_extra(repositories=list(repositories), reference_instant=reference.isoformat()),
        )

        outcomes = await self._fetch_snapshots(repositories)

        analysed: list[tuple[RepositorySnapshot, RepositoryMetrics]] = []
        for identifier, outcome in outcomes:
            if isinstance(outcome, Exception):
                self._record_failure(run_stats, identifier, outcome)
                continue

            try:
                result, metrics = self._analyse(outcome, now=reference)
            except Exception as exc:
                logger.exception(
                    "Star history analysis raised exception",
                    extra=sanitize_log_extra(repository=identifier, error=str(exc)),
                )
                self._record_failure(run_stats, identifier, exc)
                continue

            run_stats["repositories"][identifier] = result
            if metrics is not None:
                analysed.append((outcome, metrics))

        for (first, _), (second, _) in combinations(analysed, 2):
            run_stats["comparisons"].append(compare(first, second, now=reference).to_dict())
        run_stats["insights"] = [insight.to_dict() for insight in generate_insights(analysed, now=reference)]

        run_stats["success"] = all(entry.get("success", False) for entry in run_stats["repositories"].values())
        logger.info(
            "Star history run completed",
            extra=sanitize_log_extra(
                success=run_stats["success"],
                repository_count=len(run_stats["repositories"]),
                errors=run_stats["errors"],
            ),
        )
        return run_stats

    async def _fetch_snapshots(
        self,
        repositories: Sequence[str],
    ) -> list[tuple[str, RepositorySnapshot | Exception]]:
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _fetch_one(stage: Any, identifier: str) -> tuple[str, RepositorySnapshot | Exception]:
            async with semaphore:
                try:
                    return identifier, await stage.fetch_snapshot(identifier)
                except Exception as exc:
                    logger.warning(
                        "Snapshot fetch failed for repository",
                        extra=sanitize_log_extra(repository=identifier, error=str(exc)),
                    )
                    return identifier, exc

        async def _run(stage: Any) -> list[tuple[str, RepositorySnapshot | Exception]]:
            return list(await asyncio.gather(*(_fetch_one(stage, identifier) for identifier in repositories)))

        if self._snapshot_stage is not None:
            return await _run(self._snapshot_stage)
        async with self._github_client_factory() as client:
            return await _run(SnapshotStage(client))

    def _analyse(
        self,
        snapshot: RepositorySnapshot,
        *,
        now: datetime,
    ) -> tuple[dict[str, Any], RepositoryMetrics | None]:
        method = select_method(snapshot, cutoff=enumeration_cutoff())
        points = reconstruct_history(snapshot, now=now, strategy=self._strategy)

        metrics: RepositoryMetrics | None = None
        if len(points) >= MIN_METRIC_POINTS:
            metrics = compute_metrics(snapshot, points, now=now)

        return (
            {
                "success": True,
                "identifier": snapshot.identifier,
                "method": method.value,
                "current_stars": snapshot.current_star_count,
                "created_at": snapshot.created_at.isoformat(),
                "points": [point.to_dict() for point in points],
                "metrics": metrics.to_dict() if metrics else None,
            },
            metrics,
        )

    @staticmethod
    def _record_failure(run_stats: dict[str, Any], identifier: str, exc: Exception) -> None:
        sanitized_error = sanitize_for_log(str(exc), key="error")
        run_stats["repositories"][identifier] = {
            "success": False,
            "identifier": identifier,
            "error": sanitized_error,
            "error_type": classify_error(exc),
        }
        run_stats["errors"].append(f"{identifier}: {sanitized_error}")
