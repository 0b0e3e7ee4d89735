"""Repository snapshot consumed by the reconstruction engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class ActivityKind(str, enum.Enum):
    """Kinds of repository activity used as growth signals."""

    COMMIT = "commit"
    RELEASE = "release"


@dataclass(frozen=True, slots=True)
class ActivityEvent:
    """A single commit or release instant."""

    timestamp: datetime
    kind: ActivityKind


@dataclass(frozen=True, slots=True)
class StargazerEvent:
    """One star action; each event is one increment."""

    timestamp: datetime


@dataclass(frozen=True, slots=True)
class RepositorySnapshot:
    """Point-in-time read of a repository's identity, age and star total."""

    identifier: str
    created_at: datetime
    current_star_count: int
    activity_events: tuple[ActivityEvent, ...] = field(default_factory=tuple)
    stargazer_events: tuple[StargazerEvent, ...] = field(default_factory=tuple)
    stargazers_complete: bool = False

    def __post_init__(self) -> None:
        if self.current_star_count < 0:
            raise ValueError(f"current_star_count must be non-negative, got {self.current_star_count}")
        object.__setattr__(self, "created_at", ensure_utc(self.created_at))
        object.__setattr__(self, "activity_events", tuple(self.activity_events))
        object.__setattr__(self, "stargazer_events", tuple(self.stargazer_events))

    @property
    def commit_count(self) -> int:
        return sum(1 for event in self.activity_events if event.kind == ActivityKind.COMMIT)

    @property
    def release_count(self) -> int:
        return sum(1 for event in self.activity_events if event.kind == ActivityKind.RELEASE)
