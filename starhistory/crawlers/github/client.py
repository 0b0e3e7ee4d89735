"""Async GitHub REST client for star-history inputs."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from starhistory.config.settings import settings
from starhistory.crawlers.github.contracts import (
    CommitContract,
    FetchResult,
    FetchState,
    ReleaseContract,
    RepoContract,
    StargazerContract,
)

logger = logging.getLogger(__name__)

_REDACTED_VALUE = "***REDACTED***"
_SENSITIVE_KEYS = ("authorization", "token", "secret", "password", "cookie")
_TOKEN_PATTERNS = (
    re.compile(r"(?i)(bearer\s+)[^\s,;]+"),
    re.compile(r"(?i)(token\s+)(gh[pousr]_[^\s,;]+)"),
    re.compile(r"(?i)(access_token=)[^&\s]+"),
)


def sanitize_for_log(value: Any, *, key: Optional[str] = None) -> Any:
    """Return a recursively sanitized copy of log payloads."""

    if key and any(keyword in key.lower() for keyword in _SENSITIVE_KEYS):
        return _REDACTED_VALUE

    if isinstance(value, dict):
        return {str(field): sanitize_for_log(item, key=str(field)) for field, item in value.items()}

    if isinstance(value, (list, tuple, set)):
        return [sanitize_for_log(item) for item in value]

    if isinstance(value, str):
        redacted = value
        for pattern in _TOKEN_PATTERNS:
            redacted = pattern.sub(rf"\1{_REDACTED_VALUE}", redacted)
        return redacted

    return value


def sanitize_log_extra(**kwargs: Any) -> dict[str, Any]:
    """Helper for `extra=` payloads in structured logging."""

    return {key: sanitize_for_log(value, key=key) for key, value in kwargs.items()}


class _TransientError(Exception):
    """Retryable server-side failure for tenacity."""


class GitHubStarClient:
    """Typed GitHub API client; rate limits are reported, transient failures retried."""

    API_VERSION = "2022-11-28"
    ACCEPT_JSON = "application/vnd.github+json"
    ACCEPT_STARGAZERS = "application/vnd.github.star+json"

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_base_seconds: Optional[float] = None,
        backoff_max_seconds: Optional[float] = None,
        base_url: Optional[str] = None,
        transport: Optional[Any] = None,
    ) -> None:
        self._token = token or settings.GITHUB_TOKEN
        self._timeout_seconds = timeout_seconds or getattr(settings, "GITHUB_TIMEOUT_SECONDS", 30.0)
        self._max_retries = max_retries or getattr(settings, "GITHUB_MAX_RETRIES", 3)
        self._backoff_base_seconds = backoff_base_seconds or getattr(settings, "GITHUB_BACKOFF_BASE_SECONDS", 1.0)
        self._backoff_max_seconds = backoff_max_seconds or getattr(settings, "GITHUB_BACKOFF_MAX_SECONDS", 16.0)
        self._base_url = base_url or getattr(settings, "GITHUB_API_BASE_URL", "https://api.github.com")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "GitHubStarClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_repo(self, owner: str, repo: str) -> RepoContract:
        return await self._fetch_json_contract(f"/repos/{owner}/{repo}")

    async def list_commits(self, owner: str, repo: str, *, page: int = 1, per_page: int = 100) -> CommitContract:
        return await self._fetch_json_contract(
            f"/repos/{owner}/{repo}/commits",
            params={"page": page, "per_page": per_page},
        )

    async def list_releases(self, owner: str, repo: str, *, page: int = 1, per_page: int = 100) -> ReleaseContract:
        return await self._fetch_json_contract(
            f"/repos/{owner}/{repo}/releases",
            params={"page": page, "per_page": per_page},
        )

    async def list_stargazers(self, owner: str, repo: str, *, page: int = 1, per_page: int = 100) -> StargazerContract:
        return await self._fetch_json_contract(
            f"/repos/{owner}/{repo}/stargazers",
            params={"page": page, "per_page": per_page},
            accept=self.ACCEPT_STARGAZERS,
        )

    async def search_repositories(self, query: str, *, limit: int = 5) -> FetchResult[list[dict[str, Any]]]:
        """Search repositories by stars, returning the `items` payload."""

        response = await self._request(
            "/search/repositories",
            params={"q": query, "sort": "stars", "order": "desc", "per_page": limit},
        )
        if response.state != FetchState.OK:
            return response

        payload = response.data if isinstance(response.data, dict) else {}
        items = payload.get("items") if isinstance(payload.get("items"), list) else []
        if not items:
            return FetchResult(state=FetchState.EMPTY, data=[], status_code=response.status_code)
        return FetchResult(state=FetchState.OK, data=items, status_code=response.status_code)

    async def get_rate_limit(self) -> FetchResult[dict[str, Any]]:
        return await self._fetch_json_contract("/rate_limit")

    async def _fetch_json_contract(
        self,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        accept: Optional[str] = None,
    ) -> FetchResult[Any]:
        response = await self._request(path, params=params, accept=accept)
        if response.state != FetchState.OK:
            return response

        payload = response.data
        if payload is None or (isinstance(payload, (list, dict)) and len(payload) == 0):
            return FetchResult(state=FetchState.EMPTY, data=payload, status_code=response.status_code)
        return response

    async def _request(
        self,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        accept: Optional[str] = None,
    ) -> FetchResult[Any]:
        client = await self._ensure_client()
        headers = {"Accept": accept} if accept else {}

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_retries),
                wait=wait_exponential(multiplier=self._backoff_base_seconds, max=self._backoff_max_seconds),
                retry=retry_if_exception_type((_TransientError, httpx.TransportError)),
                reraise=True,
            ):
                with attempt:
                    response = await client.get(path, params=params, headers=headers)

                    if response.status_code in (403, 429):
                        logger.warning(
                            "GitHub API rate limit encountered",
                            extra=sanitize_log_extra(
                                path=path,
                                status_code=response.status_code,
                                remaining=response.headers.get("x-ratelimit-remaining"),
                                reset=response.headers.get("x-ratelimit-reset"),
                            ),
                        )
                        return FetchResult(
                            state=FetchState.FAILED,
                            status_code=response.status_code,
                            error="API rate limit exceeded. Please add a GitHub token.",
                        )

                    if response.status_code >= 500:
                        raise _TransientError(f"GitHub server error ({response.status_code})")

                    response.raise_for_status()
                    return FetchResult(
                        state=FetchState.OK,
                        data=response.json(),
                        status_code=response.status_code,
                    )
        except _TransientError as exc:
            logger.warning(
                "GitHub request failed after retries",
                extra=sanitize_log_extra(path=path, params=params, error=str(exc)),
            )
            return FetchResult(state=FetchState.FAILED, error=str(exc), status_code=502)
        except httpx.HTTPError as exc:
            status_code = getattr(getattr(exc, "response", None), "status_code", None)
            if status_code != 404:
                logger.warning(
                    "GitHub request failed",
                    extra=sanitize_log_extra(path=path, params=params, error=str(exc), status_code=status_code),
                )
            return FetchResult(state=FetchState.FAILED, error=str(exc), status_code=status_code)

        return FetchResult(state=FetchState.FAILED, error="Unknown GitHub request failure")

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client:
            return self._client

        headers = {
            "Accept": self.ACCEPT_JSON,
            "User-Agent": settings.USER_AGENT,
            "X-GitHub-Api-Version": self.API_VERSION,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=self._timeout_seconds,
            transport=self._transport,
        )
        return self._client
