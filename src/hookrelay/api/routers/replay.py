"""Manual replay endpoints — re-post a commit, PR or issue on demand."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from hookrelay.api.dependencies import Services, get_services
from hookrelay.api.schemas import ReplayResponse, RepositoriesResponse
from hookrelay.core.models import ReplayResult

router = APIRouter(tags=["Replay"])


def _to_response(result: ReplayResult) -> ReplayResponse:
    return ReplayResponse(
        kind=result.kind.value,
        repository=result.repository,
        reference=result.reference,
        destination=result.destination,
        branch=result.branch,
    )


@router.post("/manual/commit/{owner}/{repo}/{sha}", response_model=ReplayResponse)
async def replay_commit(
    owner: str,
    repo: str,
    sha: str = Path(..., min_length=4, max_length=40, pattern=r"^[0-9a-fA-F]+$"),
    services: Services = Depends(get_services),
) -> ReplayResponse:
    """Post a commit as a push notification.

    The branch is inferred from the repository's configured branch patterns.
    """
    return _to_response(await services.replay.replay_commit(owner, repo, sha))


@router.post("/manual/pr/{owner}/{repo}/{number}", response_model=ReplayResponse)
async def replay_pull_request(
    owner: str,
    repo: str,
    number: int = Path(..., ge=1),
    services: Services = Depends(get_services),
) -> ReplayResponse:
    return _to_response(await services.replay.replay_pull_request(owner, repo, number))


@router.post("/manual/issue/{owner}/{repo}/{number}", response_model=ReplayResponse)
async def replay_issue(
    owner: str,
    repo: str,
    number: int = Path(..., ge=1),
    services: Services = Depends(get_services),
) -> ReplayResponse:
    return _to_response(await services.replay.replay_issue(owner, repo, number))


@router.get("/repositories", response_model=RepositoriesResponse)
async def list_repositories(services: Services = Depends(get_services)) -> RepositoriesResponse:
    """Names of the repositories that have a routing rule."""
    return RepositoriesResponse(repositories=list(services.config_store.get().repository_names))
