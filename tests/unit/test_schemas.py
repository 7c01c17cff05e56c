"""Tests for hookrelay.github.schemas — GitHub REST response models."""

from __future__ import annotations

from datetime import datetime, timezone

from hookrelay.github.schemas import GitHubCommit, GitHubPullRequest, GitHubRepository


class TestGitHubCommit:
    def test_minimal(self):
        commit = GitHubCommit.model_validate({"sha": "abc"})
        assert commit.commit.message == ""
        assert commit.author is None
        assert commit.stats is None
        assert commit.date is None

    def test_date_prefers_committer(self):
        commit = GitHubCommit.model_validate(
            {
                "sha": "abc",
                "commit": {
                    "author": {"date": "2024-01-01T00:00:00Z"},
                    "committer": {"date": "2024-02-01T00:00:00Z"},
                },
            }
        )
        assert commit.date == datetime(2024, 2, 1, tzinfo=timezone.utc)

    def test_date_falls_back_to_author(self):
        commit = GitHubCommit.model_validate(
            {"sha": "abc", "commit": {"author": {"date": "2024-01-01T00:00:00Z"}}}
        )
        assert commit.date == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_unknown_author_account(self):
        # Commits by emails not linked to a GitHub account come back with author null
        commit = GitHubCommit.model_validate({"sha": "abc", "author": None})
        assert commit.author is None


class TestGitHubRepository:
    def test_extra_fields_ignored(self):
        repo = GitHubRepository.model_validate(
            {
                "name": "app",
                "full_name": "org/app",
                "owner": {"login": "org"},
                "stargazers_count": 12,
            }
        )
        assert repo.default_branch == "main"
        assert repo.private is False


class TestGitHubPullRequest:
    def test_merged(self):
        pr = GitHubPullRequest.model_validate(
            {
                "number": 1,
                "title": "t",
                "state": "closed",
                "merged": True,
                "merged_at": "2024-05-01T12:00:00Z",
                "head": {"ref": "feature", "sha": "h"},
                "base": {"ref": "main", "sha": "b"},
            }
        )
        assert pr.merged is True
        assert pr.merged_at.year == 2024
        assert pr.user is None
