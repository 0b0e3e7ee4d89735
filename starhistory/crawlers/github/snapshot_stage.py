"""Repository snapshot stage: metadata plus capped activity and stargazer pages."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from dateutil import parser as date_parser

from starhistory.config.settings import settings
from starhistory.crawlers.github.client import sanitize_log_extra
from starhistory.crawlers.github.contracts import FetchResult, FetchState
from starhistory.exceptions import (
    RateLimitExceededError,
    RepositoryNotFoundError,
    UpstreamError,
    UpstreamTransportError,
)
from starhistory.models.snapshot import ActivityEvent, ActivityKind, RepositorySnapshot, StargazerEvent

logger = logging.getLogger(__name__)

PageFetcher = Callable[..., Awaitable[FetchResult[list[dict[str, Any]]]]]


class SnapshotStage:
    """Builds a `RepositorySnapshot` for one repository from the GitHub API."""

    def __init__(
        self,
        github_client: Any,
        *,
        per_page: Optional[int] = None,
        max_commit_pages: Optional[int] = None,
        max_release_pages: Optional[int] = None,
        max_stargazer_pages: Optional[int] = None,
        enumeration_cutoff: Optional[int] = None,
    ) -> None:
        self._github_client = github_client
        self._per_page = per_page or getattr(settings, "GITHUB_PER_PAGE", 100)
        self._max_commit_pages = max_commit_pages or getattr(settings, "GITHUB_MAX_COMMIT_PAGES", 3)
        self._max_release_pages = max_release_pages or getattr(settings, "GITHUB_MAX_RELEASE_PAGES", 3)
        self._max_stargazer_pages = max_stargazer_pages or getattr(settings, "GITHUB_MAX_STARGAZER_PAGES", 100)
        self._enumeration_cutoff = enumeration_cutoff or getattr(settings, "STAR_HISTORY_ENUMERATION_CUTOFF", 10000)

    async def fetch_snapshot(self, identifier: str) -> RepositorySnapshot:
        owner, repo = self._split_repo(identifier)
        response = await self._github_client.get_repo(owner, repo)
        if not response.is_ok or not isinstance(response.data, dict):
            raise self._upstream_error(f"{owner}/{repo}", response)

        payload = response.data
        full_name = payload.get("full_name") or f"{owner}/{repo}"
        created_at = date_parser.isoparse(payload["created_at"])
        star_count = max(0, int(payload.get("stargazers_count") or 0))

        commits, _ = await self._collect_pages(
            self._github_client.list_commits, owner, repo, self._max_commit_pages, "commits"
        )
        releases, _ = await self._collect_pages(
            self._github_client.list_releases, owner, repo, self._max_release_pages, "releases"
        )

        stargazers: list[dict[str, Any]] = []
        complete = star_count == 0
        if 0 < star_count < self._enumeration_cutoff:
            stargazers, complete = await self._collect_pages(
                self._github_client.list_stargazers, owner, repo, self._max_stargazer_pages, "stargazers"
            )

        activity = [
            ActivityEvent(timestamp=moment, kind=ActivityKind.COMMIT)
            for moment in self._extract_timestamps(commits, self._commit_timestamp)
        ]
        activity.extend(
            ActivityEvent(timestamp=moment, kind=ActivityKind.RELEASE)
            for moment in self._extract_timestamps(releases, self._release_timestamp)
        )
        activity.sort(key=lambda event: event.timestamp)
        star_events = sorted(
            (StargazerEvent(timestamp=moment) for moment in self._extract_timestamps(stargazers, self._star_timestamp)),
            key=lambda event: event.timestamp,
        )

        logger.info(
            "Fetched repository snapshot",
            extra={
                "repository": full_name,
                "stars": star_count,
                "activity_events": len(activity),
                "stargazer_events": len(star_events),
                "stargazers_complete": complete,
            },
        )
        return RepositorySnapshot(
            identifier=full_name,
            created_at=created_at,
            current_star_count=star_count,
            activity_events=tuple(activity),
            stargazer_events=tuple(star_events),
            stargazers_complete=complete,
        )

    async def _collect_pages(
        self,
        fetch: PageFetcher,
        owner: str,
        repo: str,
        max_pages: int,
        label: str,
    ) -> tuple[list[dict[str, Any]], bool]:
        """Gather pages until exhausted; the flag is False when a cap or failure cut it short."""

        items: list[dict[str, Any]] = []
        for page in range(1, max_pages + 1):
            response = await fetch(owner, repo, page=page, per_page=self._per_page)
            if response.state == FetchState.FAILED:
                logger.warning(
                    "Stopped paging after failed fetch",
                    extra=sanitize_log_extra(
                        repository=f"{owner}/{repo}",
                        collection=label,
                        page=page,
                        status_code=response.status_code,
                        error=response.error,
                    ),
                )
                return items, False

            if response.state == FetchState.EMPTY or not response.data:
                return items, True

            items.extend(item for item in response.data if isinstance(item, dict))
            if len(response.data) < self._per_page:
                return items, True

        logger.info(
            "Page cap reached",
            extra={"repository": f"{owner}/{repo}", "collection": label, "max_pages": max_pages},
        )
        return items, False

    @staticmethod
    def _split_repo(full_name: str) -> tuple[str, str]:
        owner, repo = full_name.split("/", 1)
        return owner.strip(), repo.strip()

    @staticmethod
    def _upstream_error(identifier: str, response: FetchResult[Any]) -> UpstreamError:
        if response.is_not_found:
            return RepositoryNotFoundError(
                f"Repository {identifier} not found", identifier=identifier, status_code=404
            )
        if response.is_rate_limited:
            return RateLimitExceededError(
                response.error or "API rate limit exceeded",
                identifier=identifier,
                status_code=response.status_code,
            )
        return UpstreamTransportError(
            f"Failed to fetch repository {identifier}: {response.error or response.state.value}",
            identifier=identifier,
            status_code=response.status_code,
        )

    @staticmethod
    def _extract_timestamps(
        payload: list[dict[str, Any]],
        pick: Callable[[dict[str, Any]], Any],
    ) -> list[datetime]:
        moments: list[datetime] = []
        for item in payload:
            raw = pick(item)
            if not isinstance(raw, str):
                continue
            try:
                moments.append(date_parser.isoparse(raw))
            except (TypeError, ValueError):
                continue
        return moments

    @staticmethod
    def _commit_timestamp(item: dict[str, Any]) -> Any:
        commit = item.get("commit") or {}
        author = commit.get("author") or commit.get("committer") or {}
        return author.get("date")

    @staticmethod
    def _release_timestamp(item: dict[str, Any]) -> Any:
        return item.get("published_at") or item.get("created_at")

    @staticmethod
    def _star_timestamp(item: dict[str, Any]) -> Any:
        return item.get("starred_at")
