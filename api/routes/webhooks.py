"""
PayPal webhook receiver
"""

from http import HTTPStatus

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from core.dependencies import get_webhook_dispatcher
from payments.webhooks import WebhookDispatcher

router = APIRouter(tags=["Webhooks"])

_BODIES = {400: "Webhook verification failed"}


@router.post("/paypal-webhook", response_class=PlainTextResponse)
async def paypal_webhook(
    request: Request,
    dispatcher: WebhookDispatcher = Depends(get_webhook_dispatcher),
):
    # Signature verification needs the exact bytes PayPal sent
    raw_body = await request.body()
    status_code = await dispatcher.handle(request.headers, raw_body)
    body = _BODIES.get(status_code, HTTPStatus(status_code).phrase)
    return PlainTextResponse(body, status_code=status_code)
