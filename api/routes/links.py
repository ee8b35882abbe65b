"""
Checkout link routes
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.schemas import ErrorResponse, PaymentLinkResponse
from core.dependencies import get_link_service
from payments.links import DEFAULT_AMOUNT, DEFAULT_CURRENCY, PaymentLinkService
from payments.paypal_client import ProviderError

log = structlog.get_logger(__name__)

router = APIRouter(tags=["Payment links"])


@router.get(
    "/create-payment-link",
    response_model=PaymentLinkResponse,
    responses={500: {"model": ErrorResponse}},
)
async def create_payment_link(
    amount: str = DEFAULT_AMOUNT,
    currency: str = DEFAULT_CURRENCY,
    links: PaymentLinkService = Depends(get_link_service),
):
    """Create a PayPal order and return it, approval link included."""
    try:
        order = await links.create_link(amount=amount, currency=currency)
    except ProviderError:
        return JSONResponse(
            status_code=500,
            content={"error": "An error occurred while creating the payment link"},
        )
    return PaymentLinkResponse(response=order)
