"""Domain models shared across all hookrelay modules.

These Pydantic models define the contract between services: webhook payload
shapes, the routing configuration snapshot, and the rendered message handed
to a sender.  Every module communicates through these types — never raw dicts.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hookrelay.core.constants import BRANCH_REF_PREFIX, PLACEHOLDER_DESTINATIONS
from hookrelay.core.logging import get_logger

logger = get_logger(__name__)


# ── Enums ────────────────────────────────────────────────────────────────────


class EventKind(StrEnum):
    PUSH = "push"
    PULL_REQUEST = "pull_request"
    ISSUES = "issues"
    RELEASE = "release"


class DispatchState(StrEnum):
    RECEIVED = "received"
    AUTHENTICATED = "authenticated"
    CLASSIFIED = "classified"
    IGNORED = "ignored"
    FILTERED_OUT = "filtered_out"
    ROUTED = "routed"
    SENT = "sent"
    FAILED = "failed"


def branch_from_ref(ref: str) -> str:
    """Strip the ``refs/heads/`` prefix from a git ref.

    Refs outside ``refs/heads/`` (tags, notes) are returned unchanged.
    """
    if ref.startswith(BRANCH_REF_PREFIX):
        return ref[len(BRANCH_REF_PREFIX):]
    return ref


# ── Inbound delivery ────────────────────────────────────────────────────────


class Delivery(BaseModel):
    """A single webhook delivery as received, before authentication."""

    model_config = ConfigDict(frozen=True)

    event_kind: str
    delivery_id: str
    signature_header: str
    raw_body: bytes


# ── Webhook payload models ──────────────────────────────────────────────────


class Account(BaseModel):
    login: str = "Unknown"
    avatar_url: str = ""


class Repository(BaseModel):
    name: str = ""
    full_name: str
    html_url: str = ""
    private: bool = False
    owner: Account = Field(default_factory=Account)


class CommitAuthor(BaseModel):
    name: str = ""
    email: str = ""
    username: str = ""


class CommitStats(BaseModel):
    additions: int = 0
    deletions: int = 0
    total: int = 0


class PushCommit(BaseModel):
    id: str
    message: str = ""
    url: str = ""
    author: CommitAuthor = Field(default_factory=CommitAuthor)
    stats: CommitStats | None = None


class Pusher(BaseModel):
    name: str = ""


class PushEvent(BaseModel):
    ref: str
    repository: Repository
    commits: list[PushCommit] = Field(default_factory=list)
    head_commit: PushCommit | None = None
    pusher: Pusher = Field(default_factory=Pusher)
    sender: Account | None = None

    @property
    def kind(self) -> EventKind:
        return EventKind.PUSH

    @property
    def action(self) -> str | None:
        return None

    @property
    def branch(self) -> str | None:
        return branch_from_ref(self.ref)


class GitRef(BaseModel):
    ref: str
    sha: str = ""


class PullRequest(BaseModel):
    number: int
    title: str = ""
    body: str | None = None
    html_url: str = ""
    state: str = "open"
    merged: bool = False
    merged_at: datetime | None = None
    user: Account = Field(default_factory=Account)
    head: GitRef
    base: GitRef


class PullRequestEvent(BaseModel):
    action: str
    pull_request: PullRequest
    repository: Repository
    sender: Account | None = None

    @property
    def kind(self) -> EventKind:
        return EventKind.PULL_REQUEST

    @property
    def branch(self) -> str | None:
        return self.pull_request.head.ref


class Issue(BaseModel):
    number: int
    title: str = ""
    body: str | None = None
    html_url: str = ""
    state: str = "open"
    user: Account = Field(default_factory=Account)


class IssueEvent(BaseModel):
    action: str
    issue: Issue
    repository: Repository
    sender: Account | None = None

    @property
    def kind(self) -> EventKind:
        return EventKind.ISSUES

    @property
    def branch(self) -> str | None:
        return None


class Release(BaseModel):
    tag_name: str
    name: str | None = None
    body: str | None = None
    html_url: str = ""
    author: Account = Field(default_factory=Account)
    published_at: datetime | None = None


class ReleaseEvent(BaseModel):
    action: str
    release: Release
    repository: Repository
    sender: Account | None = None

    @property
    def kind(self) -> EventKind:
        return EventKind.RELEASE

    @property
    def branch(self) -> str | None:
        return None


WebhookEvent = PushEvent | PullRequestEvent | IssueEvent | ReleaseEvent

EVENT_MODELS: dict[EventKind, type[WebhookEvent]] = {
    EventKind.PUSH: PushEvent,
    EventKind.PULL_REQUEST: PullRequestEvent,
    EventKind.ISSUES: IssueEvent,
    EventKind.RELEASE: ReleaseEvent,
}


# ── Routing configuration ───────────────────────────────────────────────────


class RepositoryRule(BaseModel):
    """Which events and branches of one repository produce notifications.

    Field aliases match the keys of the ``config.json`` file
    (``name``, ``events``, ``branches``, ``excludeBranches``, ``channel``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    repository_full_name: str = Field(alias="name", min_length=1)
    allowed_event_kinds: frozenset[EventKind] = Field(alias="events", min_length=1)
    allowed_branch_patterns: tuple[str, ...] = Field(alias="branches", min_length=1)
    excluded_branch_patterns: tuple[str, ...] = Field(default=(), alias="excludeBranches")
    destination_override: str | None = Field(default=None, alias="channel")

    @field_validator("allowed_branch_patterns", "excluded_branch_patterns")
    @classmethod
    def _patterns_not_blank(cls, patterns: tuple[str, ...]) -> tuple[str, ...]:
        if any(not p.strip() for p in patterns):
            raise ValueError("branch patterns must be non-empty strings")
        return patterns

    @field_validator("destination_override", mode="before")
    @classmethod
    def _coerce_placeholder_override(cls, value: object) -> object:
        """Treat boolean-looking overrides as absent."""
        if isinstance(value, bool):
            logger.warning("ignored_boolean_destination_override", value=value)
            return None
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return None
            if stripped.lower() in PLACEHOLDER_DESTINATIONS:
                logger.warning("ignored_boolean_destination_override", value=stripped)
                return None
            return stripped
        return value


class RoutingConfig(BaseModel):
    """Root of the routing configuration snapshot."""

    model_config = ConfigDict(frozen=True)

    default_destination: str = Field(min_length=1)
    repository_destinations: dict[str, str] = Field(default_factory=dict)
    repositories: tuple[RepositoryRule, ...]

    @model_validator(mode="before")
    @classmethod
    def _flatten_discord_channels(cls, data: object) -> object:
        # {"discord": {"channels": {"default": ..., "repositories": {...}}}, "repositories": [...]}
        if isinstance(data, dict) and "discord" in data:
            discord = data.get("discord") or {}
            if not isinstance(discord, dict):
                raise ValueError("discord must be an object")
            channels = discord.get("channels") or {}
            if not isinstance(channels, dict):
                raise ValueError("discord.channels must be an object")
            data = {
                "default_destination": channels.get("default"),
                "repository_destinations": channels.get("repositories") or {},
                "repositories": data.get("repositories"),
            }
        return data

    @model_validator(mode="after")
    def _reject_duplicate_rules(self) -> RoutingConfig:
        seen: set[str] = set()
        for rule in self.repositories:
            if rule.repository_full_name in seen:
                raise ValueError(f"duplicate repository rule: {rule.repository_full_name}")
            seen.add(rule.repository_full_name)
        return self

    def rule_for(self, repository: str) -> RepositoryRule | None:
        for rule in self.repositories:
            if rule.repository_full_name == repository:
                return rule
        return None

    @property
    def repository_names(self) -> list[str]:
        return [rule.repository_full_name for rule in self.repositories]


class RouteDecision(BaseModel):
    """Outcome of a routing lookup."""

    should_notify: bool
    destination: str
    reason: str = ""


# ── Manual replay ───────────────────────────────────────────────────────────


class BranchCandidate(BaseModel):
    """A branch found to contain the commit being replayed."""

    model_config = ConfigDict(frozen=True)

    branch_name: str
    is_head: bool
    distance_from_head: int = Field(ge=0)


class ReplayResult(BaseModel):
    kind: EventKind
    repository: str
    reference: str
    destination: str
    branch: str | None = None


# ── Outbound message ────────────────────────────────────────────────────────


class MessageField(BaseModel):
    name: str
    value: str
    inline: bool = True


class Message(BaseModel):
    """Platform-neutral rendering of an event, converted by a sender."""

    title: str
    description: str | None = None
    url: str | None = None
    color: int | None = None
    author_name: str | None = None
    author_url: str | None = None
    author_icon_url: str | None = None
    thumbnail_url: str | None = None
    fields: list[MessageField] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# ── Dispatch outcome ────────────────────────────────────────────────────────


class DispatchResult(BaseModel):
    """Terminal state of a delivery that did not raise."""

    delivery_id: str
    event_kind: str
    state: DispatchState
    reason: str = ""
    destination: str | None = None
