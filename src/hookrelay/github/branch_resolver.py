"""Best-effort detection of the branch a replayed commit belongs to.

GitHub does not say which branch a commit was pushed to, so the resolver
looks at a bounded window: the ``max_branches`` most recently updated
branches that match the repository's patterns, and the latest
``history_depth`` commits of each.  A commit deeper than that window, or
reachable from several branches, may resolve to the wrong branch or to the
default.  Callers must treat the answer as advisory.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Sequence
from datetime import datetime
from typing import TypeVar

from hookrelay.core.exceptions import GitHubError
from hookrelay.core.logging import get_logger
from hookrelay.core.models import BranchCandidate
from hookrelay.github.client import GitHubClient
from hookrelay.github.schemas import GitHubBranch
from hookrelay.routing.patterns import matches_any

logger = get_logger(__name__)

T = TypeVar("T")


def select_branch(candidates: Sequence[BranchCandidate]) -> BranchCandidate | None:
    """Pick the most plausible candidate.

    A branch whose tip is the commit beats any branch that merely contains
    it; then the smaller distance from the tip wins; remaining ties go to
    the earliest candidate.
    """
    if not candidates:
        return None
    return min(candidates, key=lambda c: (not c.is_head, c.distance_from_head))


class BranchResolver:
    """Resolves a commit SHA to a branch name using the GitHub API."""

    def __init__(
        self,
        github: GitHubClient,
        default_branch: str = "main",
        max_branches: int = 5,
        history_depth: int = 10,
        call_timeout: float = 10.0,
    ) -> None:
        self._github = github
        self.default_branch = default_branch
        self.max_branches = max_branches
        self.history_depth = history_depth
        self.call_timeout = call_timeout

    async def _call(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self.call_timeout)

    async def resolve(
        self,
        owner: str,
        repo: str,
        commit_sha: str,
        patterns: Sequence[str],
    ) -> str:
        """Return the branch that most plausibly holds ``commit_sha``.

        Falls back to ``default_branch`` when no checked branch contains it,
        and when the branch listing itself fails or times out.
        """
        short_sha = commit_sha[:7]
        try:
            branches = await self._call(self._github.list_branches(owner, repo))
        except (GitHubError, TimeoutError) as e:
            logger.warning(
                "branch_listing_unavailable",
                repo=f"{owner}/{repo}",
                default_branch=self.default_branch,
                error=str(e) or type(e).__name__,
            )
            return self.default_branch

        matching = [b for b in branches if matches_any(b.name, patterns)]

        if not matching:
            logger.warning(
                "branch_detection_no_matching_branches",
                repo=f"{owner}/{repo}",
                patterns=list(patterns),
            )
            return self.default_branch

        ranked = await self._most_recent(owner, repo, matching)
        logger.info(
            "branch_detection_checking",
            commit=short_sha,
            branches=[b.name for b in ranked],
        )

        candidates = await self.find_candidates(owner, repo, commit_sha, ranked)
        selected = select_branch(candidates)

        if selected is None:
            logger.warning(
                "branch_detection_fallback",
                commit=short_sha,
                default_branch=self.default_branch,
            )
            return self.default_branch

        logger.info(
            "branch_detection_selected",
            commit=short_sha,
            branch=selected.branch_name,
            is_head=selected.is_head,
            distance=selected.distance_from_head,
        )
        return selected.branch_name

    async def _tip_date(self, owner: str, repo: str, branch: GitHubBranch) -> datetime | None:
        try:
            tip = await self._call(self._github.get_commit(owner, repo, branch.name))
        except (GitHubError, TimeoutError) as e:
            logger.debug("branch_tip_date_unavailable", branch=branch.name, error=str(e))
            return None
        return tip.date

    async def _most_recent(
        self, owner: str, repo: str, branches: list[GitHubBranch]
    ) -> list[GitHubBranch]:
        """Keep the ``max_branches`` branches with the newest tip commits."""
        dates = await asyncio.gather(*(self._tip_date(owner, repo, b) for b in branches))

        # Undated branches sort last; sorted() keeps listing order for ties
        def sort_key(item: tuple[GitHubBranch, datetime | None]) -> tuple[bool, float]:
            date = item[1]
            return (date is None, -date.timestamp() if date is not None else 0.0)

        ordered = sorted(zip(branches, dates), key=sort_key)
        return [branch for branch, _ in ordered[: self.max_branches]]

    async def find_candidates(
        self,
        owner: str,
        repo: str,
        commit_sha: str,
        branches: Sequence[GitHubBranch],
    ) -> list[BranchCandidate]:
        """Check each branch, in order, for the commit."""
        candidates: list[BranchCandidate] = []

        for branch in branches:
            if branch.commit.sha == commit_sha:
                candidates.append(
                    BranchCandidate(branch_name=branch.name, is_head=True, distance_from_head=0)
                )
                continue

            try:
                history = await self._call(
                    self._github.list_commits(
                        owner, repo, sha=branch.name, per_page=self.history_depth
                    )
                )
            except (GitHubError, TimeoutError) as e:
                logger.warning("branch_history_unavailable", branch=branch.name, error=str(e))
                continue

            for position, commit in enumerate(history[: self.history_depth]):
                if commit.sha == commit_sha:
                    candidates.append(
                        BranchCandidate(
                            branch_name=branch.name,
                            is_head=False,
                            distance_from_head=position,
                        )
                    )
                    break

        return candidates
