"""Webhook endpoint — receives GitHub events."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from hookrelay.api.dependencies import Services, get_services
from hookrelay.api.schemas import WebhookResponse
from hookrelay.core.constants import DELIVERY_HEADER, EVENT_HEADER, SIGNATURE_HEADER
from hookrelay.core.models import Delivery

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/github", response_model=WebhookResponse, status_code=200)
async def github_webhook(
    request: Request,
    services: Services = Depends(get_services),
) -> WebhookResponse:
    """Verify, filter and forward one GitHub delivery.

    Filtered and ignored deliveries still answer 200 so GitHub does not
    retry them; authentication, payload and send failures answer non-2xx.
    """
    delivery = Delivery(
        event_kind=request.headers.get(EVENT_HEADER, ""),
        delivery_id=request.headers.get(DELIVERY_HEADER, ""),
        signature_header=request.headers.get(SIGNATURE_HEADER, ""),
        raw_body=await request.body(),
    )

    result = await services.dispatcher.dispatch(delivery)

    return WebhookResponse(
        status=result.state.value,
        delivery_id=result.delivery_id,
        event=result.event_kind,
        destination=result.destination,
        reason=result.reason,
    )
