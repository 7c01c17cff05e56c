"""Manual replay — re-post a commit, pull request or issue fetched from GitHub.

Replays skip signature verification and the event/branch filters (an
operator asked for them explicitly) but still require the repository to be
configured, and use the normal destination resolution.
"""

from __future__ import annotations

import asyncio

from hookrelay.core.exceptions import RepositoryNotConfiguredError
from hookrelay.core.logging import get_logger
from hookrelay.core.models import (
    Account,
    CommitAuthor,
    CommitStats,
    EventKind,
    Issue,
    IssueEvent,
    GitRef,
    PullRequest,
    PullRequestEvent,
    PushCommit,
    PushEvent,
    Pusher,
    ReplayResult,
    RepositoryRule,
    Repository,
)
from hookrelay.core.constants import BRANCH_REF_PREFIX
from hookrelay.github.branch_resolver import BranchResolver
from hookrelay.github.client import GitHubClient
from hookrelay.github.schemas import GitHubCommit, GitHubRepository, GitHubUser
from hookrelay.messaging.base import MessageSender
from hookrelay.messaging.formatter import (
    format_issue_event,
    format_pull_request_event,
    format_push_event,
)
from hookrelay.routing.config_store import RoutingConfigStore
from hookrelay.routing.policy import resolve_destination

logger = get_logger(__name__)


def _account(user: GitHubUser | None) -> Account:
    if user is None:
        return Account()
    return Account(login=user.login, avatar_url=user.avatar_url)


def _repository(repo: GitHubRepository) -> Repository:
    return Repository(
        name=repo.name,
        full_name=repo.full_name,
        html_url=repo.html_url,
        private=repo.private,
        owner=_account(repo.owner),
    )


def _push_commit(commit: GitHubCommit) -> PushCommit:
    login = commit.author.login if commit.author else "Unknown"
    git_author = commit.commit.author
    stats = commit.stats or CommitStats()
    return PushCommit(
        id=commit.sha,
        message=commit.commit.message,
        url=commit.html_url,
        author=CommitAuthor(
            name=(git_author.name if git_author else "") or login,
            email=git_author.email if git_author else "",
            username=login,
        ),
        stats=CommitStats(
            additions=stats.additions,
            deletions=stats.deletions,
            total=stats.total,
        ),
    )


class ReplayService:
    """Builds synthetic webhook events from the GitHub API and sends them."""

    def __init__(
        self,
        config_store: RoutingConfigStore,
        github: GitHubClient,
        resolver: BranchResolver,
        sender: MessageSender,
    ) -> None:
        self._config_store = config_store
        self._github = github
        self._resolver = resolver
        self._sender = sender

    def _rule(self, full_name: str) -> RepositoryRule:
        rule = self._config_store.get().rule_for(full_name)
        if rule is None:
            raise RepositoryNotConfiguredError(f"Repository {full_name} is not configured")
        return rule

    def _destination(self, full_name: str) -> str:
        return resolve_destination(self._config_store.get(), full_name)

    async def replay_commit(self, owner: str, repo: str, sha: str) -> ReplayResult:
        full_name = f"{owner}/{repo}"
        rule = self._rule(full_name)
        logger.info("replay_commit", repo=full_name, commit=sha[:7])

        commit, repository = await asyncio.gather(
            self._github.get_commit(owner, repo, sha),
            self._github.get_repository(owner, repo),
        )
        branch = await self._resolver.resolve(
            owner, repo, commit.sha, rule.allowed_branch_patterns
        )

        pushed = _push_commit(commit)
        event = PushEvent(
            ref=f"{BRANCH_REF_PREFIX}{branch}",
            repository=_repository(repository),
            commits=[pushed],
            head_commit=pushed,
            pusher=Pusher(name=pushed.author.username),
        )

        destination = self._destination(full_name)
        await self._sender.send(destination, format_push_event(event))
        logger.info("replay_sent", repo=full_name, kind="commit", destination=destination)

        return ReplayResult(
            kind=EventKind.PUSH,
            repository=full_name,
            reference=commit.sha,
            destination=destination,
            branch=branch,
        )

    async def replay_pull_request(self, owner: str, repo: str, number: int) -> ReplayResult:
        full_name = f"{owner}/{repo}"
        self._rule(full_name)
        logger.info("replay_pull_request", repo=full_name, number=number)

        pr, repository = await asyncio.gather(
            self._github.get_pull_request(owner, repo, number),
            self._github.get_repository(owner, repo),
        )

        event = PullRequestEvent(
            action="opened" if pr.state == "open" else "closed",
            pull_request=PullRequest(
                number=pr.number,
                title=pr.title,
                body=pr.body,
                html_url=pr.html_url,
                state=pr.state,
                merged=pr.merged,
                merged_at=pr.merged_at,
                user=_account(pr.user),
                head=GitRef(ref=pr.head.ref, sha=pr.head.sha),
                base=GitRef(ref=pr.base.ref, sha=pr.base.sha),
            ),
            repository=_repository(repository),
        )

        destination = self._destination(full_name)
        await self._sender.send(destination, format_pull_request_event(event))
        logger.info("replay_sent", repo=full_name, kind="pull_request", destination=destination)

        return ReplayResult(
            kind=EventKind.PULL_REQUEST,
            repository=full_name,
            reference=f"#{pr.number}",
            destination=destination,
            branch=pr.head.ref,
        )

    async def replay_issue(self, owner: str, repo: str, number: int) -> ReplayResult:
        full_name = f"{owner}/{repo}"
        self._rule(full_name)
        logger.info("replay_issue", repo=full_name, number=number)

        issue, repository = await asyncio.gather(
            self._github.get_issue(owner, repo, number),
            self._github.get_repository(owner, repo),
        )

        event = IssueEvent(
            action="opened" if issue.state == "open" else "closed",
            issue=Issue(
                number=issue.number,
                title=issue.title,
                body=issue.body,
                html_url=issue.html_url,
                state=issue.state,
                user=_account(issue.user),
            ),
            repository=_repository(repository),
        )

        destination = self._destination(full_name)
        await self._sender.send(destination, format_issue_event(event))
        logger.info("replay_sent", repo=full_name, kind="issue", destination=destination)

        return ReplayResult(
            kind=EventKind.ISSUES,
            repository=full_name,
            reference=f"#{issue.number}",
            destination=destination,
        )
