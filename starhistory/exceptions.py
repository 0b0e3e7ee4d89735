"""Exception hierarchy for star-history reconstruction.

Everything derives from ``StarHistoryError``. Upstream failures reported by
the GitHub provider share the ``UpstreamError`` branch so callers can tell
"not found" from "rate limited" from plain transport trouble.
"""

from __future__ import annotations

from typing import Optional


class StarHistoryError(Exception):
    """Base exception for all star-history errors."""


# ---------------------------------------------------------------------------
# Upstream provider errors
# ---------------------------------------------------------------------------


class UpstreamError(StarHistoryError):
    """Raised when the repository metadata provider cannot answer."""

    def __init__(self, message: str, *, identifier: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.identifier = identifier
        self.status_code = status_code


class RepositoryNotFoundError(UpstreamError):
    """Raised when the repository does not exist or is not visible."""


class RateLimitExceededError(UpstreamError):
    """Raised when the GitHub API refuses the request due to rate limiting."""


class UpstreamTransportError(UpstreamError):
    """Raised for network failures and unexpected HTTP responses."""


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------


class InvalidRequestError(StarHistoryError, ValueError):
    """Raised when caller input cannot be interpreted."""


class InvalidRepositoryIdentifierError(InvalidRequestError):
    """Raised when a repository reference is not `owner/name` or a GitHub URL."""


class InvalidReferenceInstantError(InvalidRequestError):
    """Raised when the reference instant is not an ISO 8601 timestamp."""


class InsufficientHistoryError(StarHistoryError, ValueError):
    """Raised when metrics are requested for a series without any point."""
