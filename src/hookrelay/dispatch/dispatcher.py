"""Event dispatcher — authenticates, classifies, filters and forwards deliveries.

State flow per delivery::

    RECEIVED → AUTHENTICATED → CLASSIFIED → FILTERED_OUT
                                          → ROUTED → SENT | FAILED
                             → IGNORED (unhandled event kind)

Missing headers and bad signatures raise before the body is parsed.
Sending is attempted once; failures propagate unchanged so the HTTP layer
answers non-2xx and GitHub redelivers.
"""

from __future__ import annotations

from hookrelay.core.constants import FORWARDED_ACTIONS
from hookrelay.core.exceptions import AuthenticationError, MissingHeadersError
from hookrelay.core.logging import bind_delivery, clear_delivery, get_logger
from hookrelay.core.models import (
    Delivery,
    DispatchResult,
    DispatchState,
    WebhookEvent,
)
from hookrelay.github.webhook import parse_event_kind, parse_webhook_event, verify_signature
from hookrelay.messaging.base import MessageSender
from hookrelay.messaging.formatter import format_event
from hookrelay.routing.config_store import RoutingConfigStore
from hookrelay.routing.policy import RoutingPolicy

logger = get_logger(__name__)


def action_filter_reason(event: WebhookEvent) -> str | None:
    """Return why an event's action is not forwarded, or None if it is."""
    allowed = FORWARDED_ACTIONS.get(event.kind.value)
    if allowed is None or event.action in allowed:
        return None
    return f"action {event.action} not forwarded for {event.kind.value}"


class EventDispatcher:
    """Processes one webhook delivery end to end."""

    def __init__(
        self,
        secret: str | bytes,
        config_store: RoutingConfigStore,
        sender: MessageSender,
    ) -> None:
        self._secret = secret
        self._config_store = config_store
        self._sender = sender

    def authenticate(self, delivery: Delivery) -> None:
        """RECEIVED → AUTHENTICATED.

        Raises:
            MissingHeadersError: If a required header is empty.
            AuthenticationError: If the signature does not verify.
        """
        missing = [
            name
            for name, value in (
                ("signature", delivery.signature_header),
                ("event", delivery.event_kind),
                ("delivery id", delivery.delivery_id),
            )
            if not value
        ]
        if missing:
            raise MissingHeadersError(
                "Missing required headers",
                detail=f"missing: {', '.join(missing)}",
            )

        if not verify_signature(delivery.raw_body, delivery.signature_header, self._secret):
            logger.warning("webhook_signature_invalid")
            raise AuthenticationError("Invalid webhook signature")

    async def dispatch(self, delivery: Delivery) -> DispatchResult:
        """Run a delivery through the full pipeline.

        Returns:
            A result in state SENT, FILTERED_OUT or IGNORED.

        Raises:
            MissingHeadersError, AuthenticationError, InvalidPayloadError,
            ConfigurationError, ExternalCallError: propagated unchanged.
        """
        bind_delivery(delivery.delivery_id, delivery.event_kind)
        try:
            return await self._dispatch(delivery)
        finally:
            clear_delivery()

    async def _dispatch(self, delivery: Delivery) -> DispatchResult:
        logger.debug("dispatch_state", state=DispatchState.RECEIVED.value)

        self.authenticate(delivery)
        logger.debug("dispatch_state", state=DispatchState.AUTHENTICATED.value)

        kind = parse_event_kind(delivery.event_kind)
        if kind is None:
            logger.debug("webhook_ignored", reason="unhandled event kind")
            return self._result(delivery, DispatchState.IGNORED, reason="unhandled event kind")

        event = parse_webhook_event(kind, delivery.raw_body)
        logger.debug("dispatch_state", state=DispatchState.CLASSIFIED.value)
        repository = event.repository.full_name

        reason = action_filter_reason(event)
        if reason is not None:
            logger.debug("webhook_filtered", repo=repository, reason=reason)
            return self._result(delivery, DispatchState.FILTERED_OUT, reason=reason)

        decision = RoutingPolicy(self._config_store.get()).route(repository, kind, event.branch)
        if not decision.should_notify:
            logger.debug("webhook_filtered", repo=repository, reason=decision.reason)
            return self._result(delivery, DispatchState.FILTERED_OUT, reason=decision.reason)

        logger.debug("dispatch_state", state=DispatchState.ROUTED.value)
        try:
            await self._sender.send(decision.destination, format_event(event))
        except Exception:
            logger.exception(
                "notification_failed",
                repo=repository,
                destination=decision.destination,
                state=DispatchState.FAILED.value,
            )
            raise

        logger.info(
            "notification_sent",
            repo=repository,
            action=event.action,
            branch=event.branch,
            destination=decision.destination,
        )
        return self._result(delivery, DispatchState.SENT, destination=decision.destination)

    @staticmethod
    def _result(
        delivery: Delivery,
        state: DispatchState,
        reason: str = "",
        destination: str | None = None,
    ) -> DispatchResult:
        return DispatchResult(
            delivery_id=delivery.delivery_id,
            event_kind=delivery.event_kind,
            state=state,
            reason=reason,
            destination=destination,
        )
