"""Async GitHub REST client for manual replay."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx

from hookrelay.core.exceptions import (
    GitHubAuthError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from hookrelay.core.logging import get_logger
from hookrelay.github.schemas import (
    GitHubBranch,
    GitHubCommit,
    GitHubIssue,
    GitHubPullRequest,
    GitHubRepository,
)

logger = get_logger(__name__)


class GitHubClient:
    """Async client for the GitHub REST API.

    The access token is read from ``token_provider`` on every request, so a
    rotated credential takes effect on the next call.  The provider may be
    slow the first time (key derivation), so it runs in a worker thread.
    """

    def __init__(
        self,
        token_provider: Callable[[], str],
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _handle_error(self, response: httpx.Response, context: str = "") -> None:
        """Map HTTP status codes to domain exceptions."""
        if response.is_success:
            return

        status = response.status_code
        detail = f"{context} — HTTP {status}"

        try:
            message = response.json().get("message", "")
        except (ValueError, AttributeError):
            message = ""
        if message:
            detail = f"{detail}: {message}"

        if status == 401:
            raise GitHubAuthError(detail)
        if status in (403, 429) and "rate limit" in detail.lower():
            reset_at = response.headers.get("X-RateLimit-Reset")
            raise GitHubRateLimitError(reset_at=int(reset_at) if reset_at else None)
        if status == 404:
            raise GitHubNotFoundError(detail)
        raise GitHubError(detail)

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Make an authenticated GET request."""
        token = await asyncio.to_thread(self._token_provider)
        client = await self._get_client()
        try:
            response = await client.get(
                path,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise GitHubError(f"GET {path} failed: {e}") from e
        self._handle_error(response, context=f"GET {path}")
        return response.json()

    async def get_repository(self, owner: str, repo: str) -> GitHubRepository:
        data = await self._get(f"/repos/{owner}/{repo}")
        return GitHubRepository.model_validate(data)

    async def get_commit(self, owner: str, repo: str, ref: str) -> GitHubCommit:
        """Fetch a commit (by SHA or branch name), including line statistics."""
        data = await self._get(f"/repos/{owner}/{repo}/commits/{ref}")
        return GitHubCommit.model_validate(data)

    async def list_branches(
        self, owner: str, repo: str, per_page: int = 100
    ) -> list[GitHubBranch]:
        data = await self._get(
            f"/repos/{owner}/{repo}/branches",
            params={"per_page": per_page},
        )
        return [GitHubBranch.model_validate(b) for b in data]

    async def list_commits(
        self, owner: str, repo: str, sha: str, per_page: int = 10
    ) -> list[GitHubCommit]:
        """Fetch the most recent ``per_page`` commits reachable from ``sha``."""
        data = await self._get(
            f"/repos/{owner}/{repo}/commits",
            params={"sha": sha, "per_page": per_page},
        )
        return [GitHubCommit.model_validate(c) for c in data]

    async def get_pull_request(self, owner: str, repo: str, number: int) -> GitHubPullRequest:
        data = await self._get(f"/repos/{owner}/{repo}/pulls/{number}")
        return GitHubPullRequest.model_validate(data)

    async def get_issue(self, owner: str, repo: str, number: int) -> GitHubIssue:
        data = await self._get(f"/repos/{owner}/{repo}/issues/{number}")
        return GitHubIssue.model_validate(data)
