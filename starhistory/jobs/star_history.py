"""Star-history job entrypoints and repository identifier parsing."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any, Iterable, Sequence

from dateutil import parser as date_parser

from starhistory.exceptions import InvalidReferenceInstantError, InvalidRepositoryIdentifierError
from starhistory.orchestrator import StarHistoryOrchestrator

_IDENTIFIER_PATTERNS = (
    re.compile(r"^([^/\s]+)/([^/\s]+)$"),
    re.compile(r"^https?://(?:www\.)?github\.com/([^/\s]+)/([^/\s?#]+)"),
)


def parse_repository_identifier(raw: str) -> str:
    """Normalize `owner/repo` or a GitHub URL into `owner/repo`."""
    text = str(raw).strip()
    for pattern in _IDENTIFIER_PATTERNS:
        match = pattern.match(text)
        if match:
            owner, repo = match.group(1), match.group(2)
            if repo.endswith(".git"):
                repo = repo[: -len(".git")]
            if owner and repo:
                return f"{owner}/{repo}"
    raise InvalidRepositoryIdentifierError(
        f"Invalid repository reference {text!r}; expected owner/repo or a GitHub URL"
    )


def parse_repository_identifiers(raw: str | Sequence[str] | None) -> list[str]:
    """Parse a comma-separated string or a sequence; dedupes case-insensitively, keeps order."""
    if raw is None:
        return []

    if isinstance(raw, str):
        values: Iterable[Any] = [part.strip() for part in raw.split(",")]
    else:
        values = [str(part).strip() for part in raw]

    parsed: list[str] = []
    seen: set[str] = set()
    for value in values:
        if not value:
            continue
        identifier = parse_repository_identifier(value)
        if identifier.lower() in seen:
            continue
        seen.add(identifier.lower())
        parsed.append(identifier)
    return parsed


def parse_reference_instant(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw
    try:
        return date_parser.isoparse(str(raw))
    except (OverflowError, ValueError) as exc:
        raise InvalidReferenceInstantError(
            f"Invalid reference instant {raw!r}; expected an ISO 8601 timestamp"
        ) from exc


async def run_star_history(
    repositories: str | Sequence[str],
    *,
    orchestrator: StarHistoryOrchestrator | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Reconstruct and compare star histories; `now` defaults to the current UTC instant."""
    job_orchestrator = orchestrator or StarHistoryOrchestrator()
    identifiers = parse_repository_identifiers(repositories)
    reference = now or datetime.now(UTC)
    return await job_orchestrator.run(identifiers, now=reference)
