"""GitHub webhook handling: HMAC-SHA256 signature verification and payload parsing."""

from __future__ import annotations

import hashlib
import hmac
import json

import pydantic

from hookrelay.core.constants import SIGNATURE_PREFIX
from hookrelay.core.exceptions import ConfigurationError, InvalidPayloadError
from hookrelay.core.logging import get_logger
from hookrelay.core.models import EVENT_MODELS, EventKind, WebhookEvent

logger = get_logger(__name__)


def verify_signature(payload: bytes, signature: str, secret: str | bytes) -> bool:
    """Verify GitHub webhook HMAC-SHA256 signature.

    Args:
        payload: Raw request body bytes.
        signature: Value of X-Hub-Signature-256 header (e.g. 'sha256=abc...').
        secret: Webhook secret configured in GitHub.

    Returns:
        True if signature is valid, False otherwise.

    Raises:
        ConfigurationError: If the secret is empty.
    """
    if not secret:
        raise ConfigurationError("Webhook secret is not configured")

    if not signature or not signature.startswith(SIGNATURE_PREFIX):
        return False

    received = signature[len(SIGNATURE_PREFIX):]
    if not received:
        return False

    key = secret.encode("utf-8") if isinstance(secret, str) else secret
    expected = hmac.new(key=key, msg=payload, digestmod=hashlib.sha256).hexdigest()

    return hmac.compare_digest(expected.encode("ascii"), received.encode("utf-8"))


def parse_event_kind(event_header: str) -> EventKind | None:
    """Map the X-GitHub-Event header to a handled kind, or None."""
    try:
        return EventKind(event_header)
    except ValueError:
        return None


def parse_webhook_event(kind: EventKind, body: bytes) -> WebhookEvent:
    """Parse an authenticated body into the payload model for ``kind``.

    Raises:
        InvalidPayloadError: If the body is not JSON or misses required fields.
    """
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidPayloadError("Invalid JSON payload") from e

    if not isinstance(payload, dict):
        raise InvalidPayloadError("Webhook payload must be a JSON object")

    try:
        return EVENT_MODELS[kind].model_validate(payload)
    except pydantic.ValidationError as e:
        logger.warning("webhook_payload_invalid", event_kind=kind.value, errors=e.error_count())
        raise InvalidPayloadError(
            f"Payload does not match the {kind.value} event shape",
            detail=str(e),
        ) from e
