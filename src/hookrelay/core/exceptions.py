"""Domain exception hierarchy.

All exceptions inherit from ``HookRelayError`` so callers can catch broadly
or narrowly as needed.  FastAPI exception handlers map these to HTTP responses.
"""

from __future__ import annotations


class HookRelayError(Exception):
    """Base exception for all hookrelay errors."""

    def __init__(self, message: str = "", *, detail: str = "") -> None:
        self.detail = detail or message
        super().__init__(message)


# ── Authentication ───────────────────────────────────────────────────────────


class AuthenticationError(HookRelayError):
    """A delivery carried a missing or invalid signature."""


# ── Configuration ────────────────────────────────────────────────────────────


class ConfigurationError(HookRelayError):
    """Routing config or a required secret is missing or invalid."""


class RepositoryNotConfiguredError(ConfigurationError):
    """The repository has no routing rule."""


# ── Credentials ──────────────────────────────────────────────────────────────


class DecryptionError(HookRelayError):
    """The stored credential cannot be decrypted with the configured key."""


# ── External calls ───────────────────────────────────────────────────────────


class ExternalCallError(HookRelayError):
    """A call to GitHub or the messaging platform failed."""


class GitHubError(ExternalCallError):
    """Error communicating with the GitHub API."""


class GitHubAuthError(GitHubError):
    """Invalid or expired GitHub token."""


class GitHubRateLimitError(GitHubError):
    """GitHub API rate limit exhausted."""

    def __init__(self, reset_at: int | None = None) -> None:
        self.reset_at = reset_at
        super().__init__("GitHub API rate limit exceeded", detail=f"Resets at {reset_at}")


class GitHubNotFoundError(GitHubError):
    """The requested repository, commit, PR or issue is not accessible."""


class MessagingError(ExternalCallError):
    """The message could not be delivered to its destination."""


# ── Validation ───────────────────────────────────────────────────────────────


class ValidationError(HookRelayError):
    """Input validation failed."""


class MissingHeadersError(ValidationError):
    """A webhook delivery lacks one of the required headers."""


class InvalidPayloadError(ValidationError):
    """A webhook body is not JSON or does not match its event shape."""
