"""Checkout link creation."""

from typing import Any

import structlog
from starlette.concurrency import run_in_threadpool

from core.logging import BusinessEvents
from core.metrics import payment_links
from payments.paypal_client import PayPalClient, ProviderError

log = structlog.get_logger(__name__)

DEFAULT_AMOUNT = "10.00"
DEFAULT_CURRENCY = "USD"


class PaymentLinkService:
    def __init__(self, paypal: PayPalClient, return_url: str, cancel_url: str):
        self.paypal = paypal
        self.return_url = return_url
        self.cancel_url = cancel_url

    async def create_link(
        self, amount: str = DEFAULT_AMOUNT, currency: str = DEFAULT_CURRENCY
    ) -> dict[str, Any]:
        """
        Create a PayPal order the payer can approve.

        Amount and currency go to PayPal exactly as given; PayPal rejects
        malformed values and that rejection surfaces as ProviderError.

        Returns:
            The full PayPal order object.
        """
        try:
            link = await run_in_threadpool(
                self.paypal.create_order,
                amount,
                currency,
                self.return_url,
                self.cancel_url,
            )
        except ProviderError as e:
            payment_links.labels(outcome="failed").inc()
            log.error(
                BusinessEvents.PAYMENT_LINK_FAILED,
                amount=amount,
                currency=currency,
                error=str(e),
            )
            raise

        payment_links.labels(outcome="created").inc()
        log.info(
            BusinessEvents.PAYMENT_LINK_CREATED,
            amount=amount,
            currency=currency,
            order_id=link.order_id,
            approval_url=link.approval_url,
        )
        return link.order
