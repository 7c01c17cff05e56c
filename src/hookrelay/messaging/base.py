"""Abstract message sender interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from hookrelay.core.models import Message


class MessageSender(ABC):
    """Abstract base for chat platform adapters.

    Senders deliver a rendered ``Message`` to a destination identifier
    (a channel ID for Discord).  Delivery is attempted once; failures raise
    ``MessagingError`` so the webhook caller can signal GitHub to redeliver.
    """

    @abstractmethod
    async def send(self, destination: str, message: Message) -> None:
        """Deliver one message.

        Raises:
            MessagingError: If the destination rejects or cannot be reached.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release any held resources."""
        ...
