"""Tests for hookrelay.core.exceptions — domain exception hierarchy."""

from __future__ import annotations

import pytest

from hookrelay.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DecryptionError,
    ExternalCallError,
    GitHubAuthError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    HookRelayError,
    InvalidPayloadError,
    MessagingError,
    MissingHeadersError,
    RepositoryNotConfiguredError,
    ValidationError,
)


class TestHookRelayError:
    def test_basic_creation(self):
        err = HookRelayError("something failed")
        assert str(err) == "something failed"
        assert err.detail == "something failed"

    def test_with_detail(self):
        err = HookRelayError("msg", detail="extra detail")
        assert str(err) == "msg"
        assert err.detail == "extra detail"

    def test_empty_message(self):
        err = HookRelayError()
        assert str(err) == ""
        assert err.detail == ""


class TestHierarchy:
    @pytest.mark.parametrize(
        ("child", "parent"),
        [
            (AuthenticationError, HookRelayError),
            (ConfigurationError, HookRelayError),
            (RepositoryNotConfiguredError, ConfigurationError),
            (DecryptionError, HookRelayError),
            (ExternalCallError, HookRelayError),
            (GitHubError, ExternalCallError),
            (GitHubAuthError, GitHubError),
            (GitHubRateLimitError, GitHubError),
            (GitHubNotFoundError, GitHubError),
            (MessagingError, ExternalCallError),
            (ValidationError, HookRelayError),
            (MissingHeadersError, ValidationError),
            (InvalidPayloadError, ValidationError),
        ],
    )
    def test_subclass(self, child, parent):
        assert issubclass(child, parent)

    def test_decryption_is_not_configuration(self):
        assert not issubclass(DecryptionError, ConfigurationError)

    def test_messaging_is_not_github(self):
        assert not issubclass(MessagingError, GitHubError)


class TestGitHubRateLimitError:
    def test_reset_at(self):
        err = GitHubRateLimitError(reset_at=1700000000)
        assert err.reset_at == 1700000000
        assert "rate limit" in str(err).lower()
        assert "1700000000" in err.detail

    def test_no_reset(self):
        assert GitHubRateLimitError().reset_at is None
