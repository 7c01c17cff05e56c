"""Dependency injection — the owned service container and configuration."""

from __future__ import annotations

import functools
from dataclasses import dataclass

from fastapi import Request

from hookrelay.core.config import Settings, get_settings
from hookrelay.dispatch.dispatcher import EventDispatcher
from hookrelay.github.branch_resolver import BranchResolver
from hookrelay.github.client import GitHubClient
from hookrelay.github.replay import ReplayService
from hookrelay.messaging.base import MessageSender
from hookrelay.messaging.discord import DiscordSender
from hookrelay.routing.config_store import RoutingConfigStore
from hookrelay.security.token_store import FileTokenStore, TokenStore
from hookrelay.security.vault import CredentialVault


@functools.lru_cache
def get_app_settings() -> Settings:
    """Cached application settings (singleton)."""
    return get_settings()


@dataclass
class Services:
    """Everything a request handler needs, created once per app."""

    settings: Settings
    config_store: RoutingConfigStore
    vault: CredentialVault
    github: GitHubClient
    sender: MessageSender
    dispatcher: EventDispatcher
    replay: ReplayService

    async def aclose(self) -> None:
        await self.github.close()
        await self.sender.close()


def build_services(
    settings: Settings,
    *,
    config_store: RoutingConfigStore | None = None,
    sender: MessageSender | None = None,
    github: GitHubClient | None = None,
    token_store: TokenStore | None = None,
) -> Services:
    """Wire the service graph from settings.

    Collaborators can be passed in to replace the network-facing defaults.
    """
    store = config_store or RoutingConfigStore(settings.routing_config_path)
    vault = CredentialVault(
        settings.encryption_key.get_secret_value(),
        token_store or FileTokenStore(settings.token_file_path),
    )
    github = github or GitHubClient(
        token_provider=vault.require_token,
        base_url=settings.github_api_base,
        timeout=settings.github_timeout_seconds,
    )
    sender = sender or DiscordSender(
        bot_token=settings.discord_bot_token.get_secret_value(),
        api_base=settings.discord_api_base,
    )
    resolver = BranchResolver(
        github,
        default_branch=settings.replay_default_branch,
        max_branches=settings.replay_max_branches,
        history_depth=settings.replay_history_depth,
        call_timeout=settings.github_timeout_seconds,
    )

    return Services(
        settings=settings,
        config_store=store,
        vault=vault,
        github=github,
        sender=sender,
        dispatcher=EventDispatcher(
            settings.github_webhook_secret.get_secret_value(), store, sender
        ),
        replay=ReplayService(store, github, resolver, sender),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
