"""Weekly bucketing helpers shared by both reconstruction paths."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Iterable, Mapping, NamedTuple, Sequence

from starhistory.models.snapshot import ensure_utc

WEEK = timedelta(days=7)


class WeekBucket(NamedTuple):
    """`(calendar year, 7-day index since Jan 1)`; tuples order chronologically."""

    year: int
    index: int

    @property
    def key(self) -> str:
        return f"{self.year}-W{self.index}"

    @property
    def start(self) -> datetime:
        return datetime(self.year, 1, 1, tzinfo=UTC) + WEEK * self.index


def week_bucket(timestamp: datetime) -> WeekBucket:
    moment = ensure_utc(timestamp)
    jan_first = datetime(moment.year, 1, 1, tzinfo=UTC)
    return WeekBucket(moment.year, (moment - jan_first) // WEEK)


def week_key(timestamp: datetime) -> str:
    """Aggregation key such as `2023-W4`; the year keeps buckets apart across Jan 1."""
    return week_bucket(timestamp).key


def count_by_week(timestamps: Iterable[datetime]) -> dict[WeekBucket, int]:
    counts: dict[WeekBucket, int] = {}
    for timestamp in timestamps:
        bucket = week_bucket(timestamp)
        counts[bucket] = counts.get(bucket, 0) + 1
    return counts


def build_week_grid(created_at: datetime, now: datetime) -> tuple[datetime, ...]:
    """Instants `created_at + 7k` strictly before `now`, never empty.

    Each instant opens one week, so the last instant opens the week that
    contains `now`. A repository created at (or after) `now` gets a single
    instant at the earlier of the two.
    """

    start = ensure_utc(created_at)
    end = ensure_utc(now)
    if start >= end:
        return (end,)

    instants: list[datetime] = []
    current = start
    while current < end:
        instants.append(current)
        current += WEEK
    return tuple(instants)


def counts_per_grid_week(
    grid: Sequence[datetime],
    counts: Mapping[WeekBucket, int],
    *,
    now: datetime,
) -> tuple[int, ...]:
    """Assign every bucket to the grid week in which it starts.

    The grid is anchored on the creation instant while buckets are anchored on
    Jan 1, so buckets are consumed in order instead of looked up by key; each
    bucket lands in exactly one week. Buckets starting before the first week
    fold into it, buckets starting after `now` are dropped.
    """

    if not grid:
        return ()

    ordered = sorted(counts.items())
    end = ensure_utc(now)
    position = 0
    per_week: list[int] = []
    for index in range(len(grid)):
        upper = grid[index + 1] if index + 1 < len(grid) else None
        total = 0
        while position < len(ordered):
            bucket, count = ordered[position]
            bucket_start = bucket.start
            if upper is not None and bucket_start >= upper:
                break
            if upper is None and bucket_start > max(end, grid[index]):
                break
            total += count
            position += 1
        per_week.append(total)
    return tuple(per_week)
