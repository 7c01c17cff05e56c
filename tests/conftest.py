"""Shared test fixtures for all hookrelay tests."""

from __future__ import annotations

import hashlib
import hmac
import json

import pytest
from pydantic import SecretStr

from hookrelay.core.config import Settings
from hookrelay.core.models import Delivery, Message, RoutingConfig
from hookrelay.messaging.base import MessageSender
from hookrelay.routing.config_store import RoutingConfigStore

WEBHOOK_SECRET = "test_webhook_secret_123"
ENCRYPTION_KEY = "k" * 32


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def make_delivery(
    payload: dict,
    event: str = "push",
    delivery_id: str = "d-1",
    secret: str = WEBHOOK_SECRET,
) -> Delivery:
    body = json.dumps(payload).encode()
    return Delivery(
        event_kind=event,
        delivery_id=delivery_id,
        signature_header=sign(body, secret),
        raw_body=body,
    )


def repository_payload(full_name: str = "org/app", private: bool = False) -> dict:
    owner, name = full_name.split("/")
    return {
        "name": name,
        "full_name": full_name,
        "html_url": f"https://github.com/{full_name}",
        "private": private,
        "owner": {"login": owner, "avatar_url": f"https://avatars.example/{owner}.png"},
    }


def push_payload(ref: str = "refs/heads/main", full_name: str = "org/app") -> dict:
    commit = {
        "id": "a1b2c3d4e5f60718293a4b5c6d7e8f9012345678",
        "message": "Fix login redirect\n\nLonger body",
        "url": f"https://github.com/{full_name}/commit/a1b2c3d",
        "author": {"name": "Octo Cat", "email": "octo@example.com", "username": "octocat"},
    }
    return {
        "ref": ref,
        "repository": repository_payload(full_name),
        "commits": [commit],
        "head_commit": commit,
        "pusher": {"name": "octocat"},
        "sender": {"login": "octocat", "avatar_url": "https://avatars.example/octocat.png"},
    }


def pull_request_payload(
    action: str = "opened",
    full_name: str = "org/app",
    head: str = "feature/login",
    merged: bool = False,
) -> dict:
    return {
        "action": action,
        "pull_request": {
            "number": 42,
            "title": "Add login page",
            "body": "Implements the login page.",
            "html_url": f"https://github.com/{full_name}/pull/42",
            "state": "closed" if action == "closed" else "open",
            "merged": merged,
            "user": {"login": "octocat", "avatar_url": ""},
            "head": {"ref": head, "sha": "abc123"},
            "base": {"ref": "main", "sha": "def456"},
        },
        "repository": repository_payload(full_name),
    }


def issue_payload(action: str = "opened", full_name: str = "org/app") -> dict:
    return {
        "action": action,
        "issue": {
            "number": 7,
            "title": "Crash on startup",
            "body": "Stack trace attached.",
            "html_url": f"https://github.com/{full_name}/issues/7",
            "state": "closed" if action == "closed" else "open",
            "user": {"login": "reporter"},
        },
        "repository": repository_payload(full_name),
    }


def release_payload(action: str = "published", full_name: str = "org/app") -> dict:
    return {
        "action": action,
        "release": {
            "tag_name": "v1.2.0",
            "name": "v1.2.0",
            "body": "Bug fixes.",
            "html_url": f"https://github.com/{full_name}/releases/tag/v1.2.0",
            "author": {"login": "octocat"},
            "published_at": "2024-05-01T12:00:00Z",
        },
        "repository": repository_payload(full_name),
    }


class RecordingSender(MessageSender):
    """Captures messages instead of posting them."""

    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[tuple[str, Message]] = []
        self.error = error
        self.closed = False

    async def send(self, destination: str, message: Message) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((destination, message))

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def routing_config() -> RoutingConfig:
    return RoutingConfig.model_validate(
        {
            "discord": {
                "channels": {
                    "default": "100",
                    "repositories": {"org/lib": "200"},
                }
            },
            "repositories": [
                {"name": "org/app", "events": ["push"], "branches": ["main"]},
                {
                    "name": "org/lib",
                    "events": ["push", "pull_request", "issues", "release"],
                    "branches": ["*"],
                    "excludeBranches": ["release/*"],
                },
                {
                    "name": "org/web",
                    "events": ["push", "pull_request"],
                    "branches": ["main", "feature/*"],
                    "channel": "300",
                },
            ],
        }
    )


@pytest.fixture
def config_store(routing_config: RoutingConfig) -> RoutingConfigStore:
    return RoutingConfigStore.from_config(routing_config)


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        github_webhook_secret=SecretStr(WEBHOOK_SECRET),
        encryption_key=SecretStr(ENCRYPTION_KEY),
        discord_bot_token=SecretStr("discord-bot-token"),
        token_file_path=tmp_path / ".github_token",
        routing_config_path=tmp_path / "config.json",
    )
