"""Typed fetch contracts returned by the GitHub client."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class FetchState(str, enum.Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(slots=True)
class FetchResult(Generic[T]):
    """Outcome of one GitHub request; failures carry status and message instead of raising."""

    state: FetchState
    data: Optional[T] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.state == FetchState.OK

    @property
    def is_empty(self) -> bool:
        return self.state == FetchState.EMPTY

    @property
    def is_failed(self) -> bool:
        return self.state == FetchState.FAILED

    @property
    def is_not_found(self) -> bool:
        return self.is_failed and self.status_code == 404

    @property
    def is_rate_limited(self) -> bool:
        return self.is_failed and self.status_code in (403, 429)


RepoContract = FetchResult[dict[str, Any]]
CommitContract = FetchResult[list[dict[str, Any]]]
ReleaseContract = FetchResult[list[dict[str, Any]]]
StargazerContract = FetchResult[list[dict[str, Any]]]
