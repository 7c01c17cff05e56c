"""Discord REST sender — posts messages as embeds through a bot token."""

from __future__ import annotations

from typing import Any

import httpx

from hookrelay.core.exceptions import MessagingError
from hookrelay.core.logging import get_logger
from hookrelay.core.models import Message
from hookrelay.messaging.base import MessageSender

logger = get_logger(__name__)


def to_embed(message: Message) -> dict[str, Any]:
    """Convert a Message into a Discord embed object."""
    embed: dict[str, Any] = {
        "title": message.title[:256],
        "timestamp": message.timestamp.isoformat(),
    }
    if message.description:
        embed["description"] = message.description
    if message.url:
        embed["url"] = message.url
    if message.color is not None:
        embed["color"] = message.color
    if message.author_name:
        author: dict[str, str] = {"name": message.author_name}
        if message.author_url:
            author["url"] = message.author_url
        if message.author_icon_url:
            author["icon_url"] = message.author_icon_url
        embed["author"] = author
    if message.thumbnail_url:
        embed["thumbnail"] = {"url": message.thumbnail_url}
    if message.fields:
        embed["fields"] = [f.model_dump() for f in message.fields]
    return embed


class DiscordSender(MessageSender):
    """Sends messages to Discord channels over the bot REST API."""

    def __init__(
        self,
        bot_token: str,
        api_base: str = "https://discord.com/api/v10",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bot_token = bot_token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._api_base,
                headers={"Authorization": f"Bot {self._bot_token}"},
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def send(self, destination: str, message: Message) -> None:
        if not destination or not destination.strip():
            raise MessagingError("Destination channel is empty")

        client = self._get_client()
        path = f"/channels/{destination}/messages"

        try:
            response = await client.post(path, json={"embeds": [to_embed(message)]})
        except httpx.HTTPError as e:
            raise MessagingError(f"Failed to reach Discord: {e}") from e

        if response.status_code == 404:
            raise MessagingError(f"Channel {destination} not found")
        if response.status_code in (401, 403):
            raise MessagingError(
                f"Bot is not allowed to post to channel {destination}",
                detail=f"HTTP {response.status_code}",
            )
        if not response.is_success:
            raise MessagingError(
                f"Discord rejected the message for channel {destination}",
                detail=f"HTTP {response.status_code}: {response.text[:200]}",
            )

        logger.debug("message_sent", channel=destination)

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
