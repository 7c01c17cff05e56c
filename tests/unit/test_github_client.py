"""Tests for hookrelay.github.client — requests and error mapping."""

from __future__ import annotations

import httpx
import pytest

from conftest import ENCRYPTION_KEY
from hookrelay.core.exceptions import (
    GitHubAuthError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from hookrelay.github.client import GitHubClient
from hookrelay.security.token_store import FileTokenStore
from hookrelay.security.vault import CredentialVault

REPO = {
    "name": "app",
    "full_name": "org/app",
    "html_url": "https://github.com/org/app",
    "private": True,
    "default_branch": "develop",
    "owner": {"login": "org", "avatar_url": "https://avatars.example/org.png"},
}


def _client(handler, token: str = "gho_token") -> GitHubClient:
    return GitHubClient(
        token_provider=lambda: token,
        base_url="https://api.github.test",
        transport=httpx.MockTransport(handler),
    )


class TestRequests:
    @pytest.mark.asyncio
    async def test_auth_headers(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=REPO)

        client = _client(handler)
        repo = await client.get_repository("org", "app")
        await client.close()

        assert repo.default_branch == "develop"
        assert repo.private is True
        assert seen[0].url.path == "/repos/org/app"
        assert seen[0].headers["Authorization"] == "Bearer gho_token"
        assert seen[0].headers["Accept"] == "application/vnd.github+json"

    @pytest.mark.asyncio
    async def test_rotated_token_used_on_next_request(self):
        tokens = iter(["old-token", "new-token"])
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["Authorization"])
            return httpx.Response(200, json=REPO)

        client = GitHubClient(
            token_provider=lambda: next(tokens),
            transport=httpx.MockTransport(handler),
        )
        await client.get_repository("org", "app")
        await client.get_repository("org", "app")
        await client.close()
        assert seen == ["Bearer old-token", "Bearer new-token"]

    @pytest.mark.asyncio
    async def test_vault_rotation_reaches_live_client(self, tmp_path):
        vault = CredentialVault(ENCRYPTION_KEY, FileTokenStore(tmp_path / "token"))
        vault.store_token("gho_first")
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["Authorization"])
            return httpx.Response(200, json=REPO)

        client = GitHubClient(
            token_provider=vault.require_token,
            transport=httpx.MockTransport(handler),
        )
        await client.get_repository("org", "app")
        vault.rotate("gho_second")
        await client.get_repository("org", "app")
        await client.close()
        assert seen == ["Bearer gho_first", "Bearer gho_second"]

    @pytest.mark.asyncio
    async def test_get_commit_with_stats(self):
        def handler(request):
            return httpx.Response(
                200,
                json={
                    "sha": "abc",
                    "html_url": "https://github.com/org/app/commit/abc",
                    "commit": {
                        "message": "Fix",
                        "author": {"name": "Octo", "date": "2024-05-01T10:00:00Z"},
                        "committer": {"name": "GitHub", "date": "2024-05-01T11:00:00Z"},
                    },
                    "author": {"login": "octocat"},
                    "stats": {"additions": 3, "deletions": 1, "total": 4},
                },
            )

        commit = await _client(handler).get_commit("org", "app", "abc")
        assert commit.stats.additions == 3
        assert commit.date.hour == 11

    @pytest.mark.asyncio
    async def test_list_commits_params(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[{"sha": "a"}, {"sha": "b"}])

        commits = await _client(handler).list_commits("org", "app", sha="main", per_page=10)
        assert [c.sha for c in commits] == ["a", "b"]
        assert seen[0].url.params["sha"] == "main"
        assert seen[0].url.params["per_page"] == "10"

    @pytest.mark.asyncio
    async def test_list_branches(self):
        def handler(request):
            return httpx.Response(200, json=[{"name": "main", "commit": {"sha": "m0"}}])

        branches = await _client(handler).list_branches("org", "app")
        assert branches[0].name == "main"
        assert branches[0].commit.sha == "m0"


class TestErrorMapping:
    @pytest.mark.asyncio
    async def test_401(self):
        client = _client(lambda r: httpx.Response(401, json={"message": "Bad credentials"}))
        with pytest.raises(GitHubAuthError) as exc_info:
            await client.get_repository("org", "app")
        assert "Bad credentials" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_404(self):
        client = _client(lambda r: httpx.Response(404, json={"message": "Not Found"}))
        with pytest.raises(GitHubNotFoundError):
            await client.get_pull_request("org", "app", 1)

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        def handler(request):
            return httpx.Response(
                403,
                json={"message": "API rate limit exceeded"},
                headers={"X-RateLimit-Reset": "1700000000"},
            )

        with pytest.raises(GitHubRateLimitError) as exc_info:
            await _client(handler).get_issue("org", "app", 1)
        assert exc_info.value.reset_at == 1700000000

    @pytest.mark.asyncio
    async def test_403_without_rate_limit(self):
        client = _client(lambda r: httpx.Response(403, json={"message": "Forbidden"}))
        with pytest.raises(GitHubError) as exc_info:
            await client.get_repository("org", "app")
        assert not isinstance(exc_info.value, GitHubRateLimitError)

    @pytest.mark.asyncio
    async def test_server_error_without_json(self):
        client = _client(lambda r: httpx.Response(502, text="bad gateway"))
        with pytest.raises(GitHubError):
            await client.get_repository("org", "app")

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GitHubError):
            await _client(handler).get_repository("org", "app")
