"""Renders webhook events into platform-neutral messages."""

from __future__ import annotations

from hookrelay.core.constants import (
    BODY_PREVIEW_CHARS,
    COLOR_CLOSED,
    COLOR_MERGED,
    COLOR_OPENED,
    COLOR_PUSH,
    COLOR_RELEASE,
    COLOR_UPDATED,
    MAX_LISTED_COMMITS,
    RELEASE_NOTES_PREVIEW_CHARS,
    SHORT_SHA_LENGTH,
)
from hookrelay.core.models import (
    IssueEvent,
    Message,
    MessageField,
    PullRequestEvent,
    PushCommit,
    PushEvent,
    ReleaseEvent,
    Repository,
    WebhookEvent,
)

_BLANK = "\u200b"  # zero-width space: keeps Discord's 3-per-row inline grid aligned


def _preview(text: str | None, limit: int, empty: str) -> str:
    if not text:
        return empty
    return text[:limit] + ("..." if len(text) > limit else "")


def _repo_label(repository: Repository) -> str:
    icon = "🔒" if repository.private else "🔓"
    return f"{icon} {repository.full_name}"


def _with_repo_author(message: Message, repository: Repository) -> Message:
    return message.model_copy(
        update={
            "author_name": _repo_label(repository),
            "author_url": repository.html_url or None,
            "author_icon_url": repository.owner.avatar_url or None,
        }
    )


def _push_stats(event: PushEvent) -> tuple[int, int] | None:
    """Sum line stats over the pushed commits, or use the head commit's."""
    commits_with_stats = [c.stats for c in event.commits if c.stats is not None]
    if commits_with_stats:
        return (
            sum(s.additions for s in commits_with_stats),
            sum(s.deletions for s in commits_with_stats),
        )
    if event.head_commit is not None and event.head_commit.stats is not None:
        return event.head_commit.stats.additions, event.head_commit.stats.deletions
    return None


def _commit_line(commit: PushCommit) -> str:
    first_line = commit.message.split("\n", 1)[0]
    return f"[`{commit.id[:SHORT_SHA_LENGTH]}`]({commit.url}) {first_line}"


def format_push_event(event: PushEvent) -> Message:
    branch = event.branch
    count = len(event.commits)
    head = event.head_commit or (event.commits[-1] if event.commits else None)

    author = "Unknown"
    if head is not None:
        author = head.author.name or head.author.username or author

    fields = [
        MessageField(name="👤 Author", value=author),
        MessageField(name="🌿 Branch", value=branch or event.ref),
        MessageField(name=_BLANK, value=_BLANK),
    ]

    stats = _push_stats(event)
    if stats is not None:
        additions, deletions = stats
        fields.extend([
            MessageField(name="✅ Lines Added", value=f"`+{additions}`"),
            MessageField(name="❌ Lines Removed", value=f"`-{deletions}`"),
            MessageField(name=_BLANK, value=_BLANK),
        ])

    commit_list = "\n".join(_commit_line(c) for c in event.commits[:MAX_LISTED_COMMITS])
    if commit_list:
        fields.append(MessageField(name="📋 Commits", value=commit_list, inline=False))

    thumbnail = (event.sender.avatar_url if event.sender else "") or event.repository.owner.avatar_url

    message = Message(
        title=f"📝 {count} new commit{'s' if count != 1 else ''} to {branch}",
        url=f"{event.repository.html_url}/commits/{branch}",
        color=COLOR_PUSH,
        thumbnail_url=thumbnail or None,
        fields=fields,
    )
    return _with_repo_author(message, event.repository)


def format_pull_request_event(event: PullRequestEvent) -> Message:
    pr = event.pull_request

    if event.action == "closed" and pr.merged:
        color = COLOR_MERGED
        title = f"✅ Pull Request Merged: #{pr.number} {pr.title}"
        description = f"Merged `{pr.head.ref}` into `{pr.base.ref}`"
    elif event.action == "opened":
        color = COLOR_OPENED
        title = f"🆕 Pull Request Opened: #{pr.number} {pr.title}"
        description = _preview(pr.body, BODY_PREVIEW_CHARS, "No description")
    elif event.action == "closed":
        color = COLOR_CLOSED
        title = f"❌ Pull Request Closed: #{pr.number} {pr.title}"
        description = "Closed without merging"
    else:
        color = COLOR_UPDATED
        title = f"🔄 Pull Request Updated: #{pr.number} {pr.title}"
        description = f"New commits added to `{pr.head.ref}`"

    message = Message(
        title=title,
        description=description,
        url=pr.html_url or None,
        color=color,
        thumbnail_url=pr.user.avatar_url or None,
        fields=[
            MessageField(name="👤 Author", value=pr.user.login),
            MessageField(name="🌿 Branch", value=f"{pr.head.ref} → {pr.base.ref}"),
            MessageField(name="🔗 Link", value=f"[View on GitHub]({pr.html_url})"),
        ],
    )
    if pr.merged_at is not None:
        message = message.model_copy(update={"timestamp": pr.merged_at})
    return _with_repo_author(message, event.repository)


def format_issue_event(event: IssueEvent) -> Message:
    issue = event.issue
    colors = {"opened": (COLOR_OPENED, "🆕"), "closed": (COLOR_CLOSED, "✅")}
    color, emoji = colors.get(event.action, (COLOR_UPDATED, "🔄"))

    message = Message(
        title=f"{emoji} Issue {event.action.capitalize()}: #{issue.number} {issue.title}",
        description=_preview(issue.body, BODY_PREVIEW_CHARS, "No description"),
        url=issue.html_url or None,
        color=color,
        thumbnail_url=issue.user.avatar_url or None,
        fields=[
            MessageField(name="👤 Author", value=issue.user.login),
            MessageField(name="📊 State", value=issue.state),
            MessageField(name="🔗 Link", value=f"[View on GitHub]({issue.html_url})"),
        ],
    )
    return _with_repo_author(message, event.repository)


def format_release_event(event: ReleaseEvent) -> Message:
    release = event.release

    message = Message(
        title=f"🚀 Release Published: {release.tag_name}",
        description=_preview(release.body, RELEASE_NOTES_PREVIEW_CHARS, "No release notes"),
        url=release.html_url or None,
        color=COLOR_RELEASE,
        thumbnail_url=release.author.avatar_url or None,
        fields=[
            MessageField(name="🏷️ Tag", value=release.tag_name),
            MessageField(name="👤 Author", value=release.author.login),
            MessageField(name="🔗 Link", value=f"[View on GitHub]({release.html_url})"),
        ],
    )
    if release.published_at is not None:
        message = message.model_copy(update={"timestamp": release.published_at})
    return _with_repo_author(message, event.repository)


def format_event(event: WebhookEvent) -> Message:
    """Render any supported event."""
    if isinstance(event, PushEvent):
        return format_push_event(event)
    if isinstance(event, PullRequestEvent):
        return format_pull_request_event(event)
    if isinstance(event, IssueEvent):
        return format_issue_event(event)
    if isinstance(event, ReleaseEvent):
        return format_release_event(event)
    raise TypeError(f"Unsupported event type: {type(event).__name__}")
