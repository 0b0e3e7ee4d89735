from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from starhistory.crawlers.github.contracts import FetchResult, FetchState
from starhistory.crawlers.github.snapshot_stage import SnapshotStage
from starhistory.exceptions import (
    RateLimitExceededError,
    RepositoryNotFoundError,
    UpstreamTransportError,
)
from starhistory.models.snapshot import ActivityKind


def _ok(data: Any) -> FetchResult[Any]:
    return FetchResult(state=FetchState.OK, data=data, status_code=200)


def _empty() -> FetchResult[Any]:
    return FetchResult(state=FetchState.EMPTY, data=[], status_code=200)


class FakeClient:
    def __init__(self, stars: int = 3) -> None:
        self.repo_result = _ok(
            {
                "full_name": "Octo/Widgets",
                "created_at": "2023-01-01T00:00:00Z",
                "stargazers_count": stars,
            }
        )
        self.commit_pages: dict[int, FetchResult[Any]] = {
            1: _ok(
                [
                    {"commit": {"author": {"date": "2023-01-10T00:00:00Z"}}},
                    {"commit": {"committer": {"date": "2023-01-03T00:00:00Z"}}},
                    {"commit": {}},
                ]
            )
        }
        self.release_pages: dict[int, FetchResult[Any]] = {
            1: _ok([{"published_at": "2023-02-06T00:00:00Z"}, {"published_at": None, "created_at": "2023-01-20T00:00:00Z"}])
        }
        self.stargazer_pages: dict[int, FetchResult[Any]] = {
            1: _ok(
                [
                    {"starred_at": "2023-01-05T00:00:00Z"},
                    {"starred_at": "2023-01-02T00:00:00Z"},
                    {"starred_at": "not-a-date"},
                    {"starred_at": "2023-01-16T00:00:00Z"},
                ]
            )
        }
        self.stargazer_calls: list[int] = []

    async def get_repo(self, *_: Any, **__: Any) -> FetchResult[dict[str, Any]]:
        return self.repo_result

    async def list_commits(self, _: str, __: str, *, page: int, per_page: int) -> FetchResult[Any]:
        return self.commit_pages.get(page, _empty())

    async def list_releases(self, _: str, __: str, *, page: int, per_page: int) -> FetchResult[Any]:
        return self.release_pages.get(page, _empty())

    async def list_stargazers(self, _: str, __: str, *, page: int, per_page: int) -> FetchResult[Any]:
        self.stargazer_calls.append(page)
        return self.stargazer_pages.get(page, _empty())


@pytest.mark.asyncio
async def test_snapshot_collects_activity_and_complete_stargazers() -> None:
    stage = SnapshotStage(FakeClient(), per_page=100)

    snapshot = await stage.fetch_snapshot("octo/widgets")

    assert snapshot.identifier == "Octo/Widgets"
    assert snapshot.created_at == datetime(2023, 1, 1, tzinfo=UTC)
    assert snapshot.current_star_count == 3
    assert snapshot.commit_count == 2
    assert snapshot.release_count == 2
    assert [event.kind for event in snapshot.activity_events] == [
        ActivityKind.COMMIT,
        ActivityKind.COMMIT,
        ActivityKind.RELEASE,
        ActivityKind.RELEASE,
    ]
    assert [event.timestamp.day for event in snapshot.stargazer_events] == [2, 5, 16]
    assert snapshot.stargazers_complete is True


@pytest.mark.asyncio
async def test_missing_repository_raises_not_found() -> None:
    client = FakeClient()
    client.repo_result = FetchResult(state=FetchState.FAILED, status_code=404, error="Not Found")

    with pytest.raises(RepositoryNotFoundError) as exc_info:
        await SnapshotStage(client).fetch_snapshot("octo/missing")

    assert str(exc_info.value) == "Repository octo/missing not found"
    assert exc_info.value.identifier == "octo/missing"


@pytest.mark.asyncio
async def test_rate_limited_metadata_raises_rate_limit_error() -> None:
    client = FakeClient()
    client.repo_result = FetchResult(
        state=FetchState.FAILED,
        status_code=429,
        error="API rate limit exceeded. Please add a GitHub token.",
    )

    with pytest.raises(RateLimitExceededError) as exc_info:
        await SnapshotStage(client).fetch_snapshot("octo/widgets")

    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_server_failure_raises_transport_error() -> None:
    client = FakeClient()
    client.repo_result = FetchResult(state=FetchState.FAILED, status_code=502, error="GitHub server error (503)")

    with pytest.raises(UpstreamTransportError):
        await SnapshotStage(client).fetch_snapshot("octo/widgets")


@pytest.mark.asyncio
async def test_stargazer_page_cap_marks_enumeration_incomplete() -> None:
    client = FakeClient(stars=5)
    client.stargazer_pages = {
        1: _ok([{"starred_at": "2023-01-02T00:00:00Z"}, {"starred_at": "2023-01-03T00:00:00Z"}]),
        2: _ok([{"starred_at": "2023-01-04T00:00:00Z"}, {"starred_at": "2023-01-05T00:00:00Z"}]),
        3: _ok([{"starred_at": "2023-01-06T00:00:00Z"}]),
    }

    snapshot = await SnapshotStage(client, per_page=2, max_stargazer_pages=2).fetch_snapshot("octo/widgets")

    assert len(snapshot.stargazer_events) == 4
    assert snapshot.stargazers_complete is False
    assert client.stargazer_calls == [1, 2]


@pytest.mark.asyncio
async def test_large_repository_skips_stargazer_enumeration() -> None:
    client = FakeClient(stars=25000)

    snapshot = await SnapshotStage(client).fetch_snapshot("octo/widgets")

    assert client.stargazer_calls == []
    assert snapshot.stargazer_events == ()
    assert snapshot.stargazers_complete is False


@pytest.mark.asyncio
async def test_zero_star_repository_is_complete_without_paging() -> None:
    client = FakeClient(stars=0)

    snapshot = await SnapshotStage(client).fetch_snapshot("octo/widgets")

    assert client.stargazer_calls == []
    assert snapshot.stargazers_complete is True


@pytest.mark.asyncio
async def test_failed_activity_page_degrades_to_partial_signals() -> None:
    client = FakeClient()
    client.commit_pages = {1: FetchResult(state=FetchState.FAILED, status_code=403, error="rate limited")}

    snapshot = await SnapshotStage(client).fetch_snapshot("octo/widgets")

    assert snapshot.commit_count == 0
    assert snapshot.release_count == 2
    assert snapshot.stargazers_complete is True


@pytest.mark.asyncio
async def test_failed_stargazer_page_marks_enumeration_incomplete() -> None:
    client = FakeClient()
    client.stargazer_pages = {1: FetchResult(state=FetchState.FAILED, status_code=502, error="boom")}

    snapshot = await SnapshotStage(client).fetch_snapshot("octo/widgets")

    assert snapshot.stargazer_events == ()
    assert snapshot.stargazers_complete is False
