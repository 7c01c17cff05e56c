"""Pydantic models for GitHub REST API responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class GitHubUser(BaseModel):
    login: str
    avatar_url: str = ""


class GitHubRepository(BaseModel):
    """Subset of GET /repos/{owner}/{repo} we actually need."""

    name: str
    full_name: str
    html_url: str = ""
    private: bool = False
    default_branch: str = "main"
    owner: GitHubUser


class GitHubGitActor(BaseModel):
    name: str = ""
    email: str = ""
    date: datetime | None = None


class GitHubCommitDetail(BaseModel):
    message: str = ""
    author: GitHubGitActor | None = None
    committer: GitHubGitActor | None = None


class GitHubCommitStats(BaseModel):
    additions: int = 0
    deletions: int = 0
    total: int = 0


class GitHubCommit(BaseModel):
    """A commit as returned by GET /repos/{owner}/{repo}/commits/{ref} or the list endpoint."""

    sha: str
    html_url: str = ""
    commit: GitHubCommitDetail = Field(default_factory=GitHubCommitDetail)
    author: GitHubUser | None = None
    stats: GitHubCommitStats | None = None

    @property
    def date(self) -> datetime | None:
        """Committer date, falling back to the author date."""
        for actor in (self.commit.committer, self.commit.author):
            if actor is not None and actor.date is not None:
                return actor.date
        return None


class GitHubBranchTip(BaseModel):
    sha: str


class GitHubBranch(BaseModel):
    name: str
    commit: GitHubBranchTip


class GitHubRef(BaseModel):
    ref: str
    sha: str


class GitHubPullRequest(BaseModel):
    number: int
    title: str
    body: str | None = None
    state: str = "open"
    merged: bool = False
    merged_at: datetime | None = None
    head: GitHubRef
    base: GitHubRef
    user: GitHubUser | None = None
    html_url: str = ""


class GitHubIssue(BaseModel):
    number: int
    title: str
    body: str | None = None
    state: str = "open"
    user: GitHubUser | None = None
    html_url: str = ""
