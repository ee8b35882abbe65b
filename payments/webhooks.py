"""
PayPal webhook dispatcher.

Turns one inbound webhook delivery into an HTTP status code:

- 400 when the body is not JSON or PayPal does not vouch for the signature
- 200 once a verified event has been dispatched, even if the capture or the
  database write it triggered failed (those failures are only logged)
- 500 when dispatching itself blows up, e.g. on a malformed resource

Nothing is retried here. PayPal redelivers on non-2xx responses.
"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

import structlog
from opentelemetry import trace
from starlette.concurrency import run_in_threadpool

from core.logging import BusinessEvents
from core.metrics import payments_saved, record_webhook
from db.models import PaymentRecord
from db.store import PaymentRecordStore, PersistenceError
from payments.paypal_client import PayPalClient, ProviderError, VerificationStatus

log = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

ORDER_APPROVED = "CHECKOUT.ORDER.APPROVED"
CAPTURE_COMPLETED = "PAYMENT.CAPTURE.COMPLETED"


class VerificationFailure(Exception):
    pass


class DispatchError(Exception):
    pass


def parse_provider_time(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def build_payment_record(resource: Mapping[str, Any]) -> PaymentRecord:
    """Map a PAYMENT.CAPTURE.COMPLETED resource onto a PaymentRecord.

    ``id`` and ``amount.value``/``amount.currency_code`` are required and a
    KeyError propagates when they are missing. Payer details and timestamps
    are optional.
    """
    amount = resource["amount"]
    payer = resource.get("payer") or {}
    return PaymentRecord(
        order_id=resource["id"],
        status=resource.get("status"),
        amount=Decimal(str(amount["value"])),
        currency=amount["currency_code"],
        payer_id=payer.get("payer_id"),
        payer_email=payer.get("email_address"),
        create_time=parse_provider_time(resource.get("create_time")),
        update_time=parse_provider_time(resource.get("update_time")),
    )


class WebhookDispatcher:
    def __init__(
        self, paypal: PayPalClient, store: PaymentRecordStore, webhook_id: str
    ):
        self.paypal = paypal
        self.store = store
        self.webhook_id = webhook_id
        self._handlers = {
            ORDER_APPROVED: self._on_order_approved,
            CAPTURE_COMPLETED: self._on_capture_completed,
        }

    async def handle(self, headers: Mapping[str, str], raw_body: bytes) -> int:
        """Process one delivery and return the HTTP status to answer with."""
        log.info(BusinessEvents.WEBHOOK_RECEIVED, webhook_id=self.webhook_id)

        try:
            event = json.loads(raw_body)
        except ValueError as e:
            log.warning(
                BusinessEvents.WEBHOOK_VERIFICATION_FAILED,
                reason="invalid body",
                error=str(e),
            )
            record_webhook(None, "rejected")
            return 400
        if not isinstance(event, dict):
            log.warning(
                BusinessEvents.WEBHOOK_VERIFICATION_FAILED,
                reason="body is not an object",
            )
            record_webhook(None, "rejected")
            return 400

        event_type = event.get("event_type")

        try:
            await self.verify(headers, raw_body)
        except VerificationFailure as e:
            log.warning(
                BusinessEvents.WEBHOOK_VERIFICATION_FAILED,
                event_type=event_type,
                error=str(e),
            )
            record_webhook(event_type, "rejected")
            return 400

        try:
            await self.dispatch(event)
        except DispatchError as e:
            log.error(
                BusinessEvents.WEBHOOK_DISPATCH_ERROR,
                event_type=event_type,
                error=str(e),
                exc_info=e,
            )
            record_webhook(event_type, "error")
            return 500

        record_webhook(event_type, "accepted")
        return 200

    async def verify(self, headers: Mapping[str, str], raw_body: bytes) -> None:
        """Raise VerificationFailure unless PayPal confirms the signature."""
        with tracer.start_as_current_span("paypal.webhook.verify"):
            try:
                status = await run_in_threadpool(
                    self.paypal.verify_webhook, headers, raw_body, self.webhook_id
                )
            except ProviderError as e:
                raise VerificationFailure(f"verification call failed: {e}") from e

        if status != VerificationStatus.SUCCESS:
            raise VerificationFailure(f"verification_status {status}")
        log.info(BusinessEvents.WEBHOOK_VERIFIED)

    async def dispatch(self, event: Mapping[str, Any]) -> None:
        """Route a verified event to its handler.

        Capture and persistence failures are contained inside the handlers;
        anything else escaping a handler becomes DispatchError.
        """
        event_type = event.get("event_type")
        with tracer.start_as_current_span(
            "paypal.webhook.dispatch", attributes={"paypal.event_type": str(event_type)}
        ):
            try:
                handler = self._handlers.get(event_type)
                if handler is None:
                    log.info(BusinessEvents.WEBHOOK_UNHANDLED, event_type=event_type)
                    return
                await handler(event["resource"])
            except Exception as e:
                raise DispatchError(f"failed to process {event_type}: {e!r}") from e

    async def _on_order_approved(self, resource: Mapping[str, Any]) -> None:
        order_id = resource["id"]
        log.info(BusinessEvents.ORDER_APPROVED, order_id=order_id)
        try:
            result = await run_in_threadpool(self.paypal.capture_order, order_id)
            log.info(
                BusinessEvents.CAPTURE_SUCCEEDED,
                order_id=order_id,
                capture_status=result.get("status"),
                response=result,
            )
        except Exception as e:
            # The delivery is acknowledged whatever happened to the capture
            # TODO: record failed captures in a dead-letter table for replay
            log.error(
                BusinessEvents.CAPTURE_FAILED,
                order_id=order_id,
                error=str(e),
                exc_info=e,
            )

    async def _on_capture_completed(self, resource: Mapping[str, Any]) -> None:
        record = build_payment_record(resource)
        try:
            await run_in_threadpool(self.store.save, record)
        except PersistenceError as e:
            payments_saved.labels(outcome="failed").inc()
            log.error(
                BusinessEvents.PAYMENT_SAVE_FAILED,
                order_id=record.order_id,
                error=str(e),
            )
            return
        payments_saved.labels(outcome="saved").inc()
        log.info(
            BusinessEvents.PAYMENT_SAVED, order_id=record.order_id, record_id=record.id
        )
