"""
Prometheus metrics for the PayPal relay.

HTTP request metrics come from the FastAPI instrumentator and are exposed at
``/metrics`` together with the webhook and payment counters defined here.
"""

from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator

# Event types that get their own label value; anything else is "other"
KNOWN_EVENT_TYPES = frozenset(
    {"CHECKOUT.ORDER.APPROVED", "PAYMENT.CAPTURE.COMPLETED"}
)

webhook_events = Counter(
    "paypal_relay_webhook_events_total",
    "Webhook deliveries by event type and outcome",
    ["event_type", "outcome"],
)

payment_links = Counter(
    "paypal_relay_payment_links_total",
    "Payment link creation attempts",
    ["outcome"],
)

payments_saved = Counter(
    "paypal_relay_payments_saved_total",
    "Completed captures written to the payment store",
    ["outcome"],
)


def event_type_label(event_type) -> str:
    """Bound label cardinality for provider-controlled event names."""
    if isinstance(event_type, str) and event_type in KNOWN_EVENT_TYPES:
        return event_type
    return "other"


def record_webhook(event_type, outcome: str) -> None:
    webhook_events.labels(
        event_type=event_type_label(event_type), outcome=outcome
    ).inc()


def init_metrics(app):
    """
    Initialize Prometheus metrics instrumentation for the FastAPI app.

    Args:
        app: FastAPI application instance

    Returns:
        Instrumentator instance
    """
    inst = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        excluded_handlers=["/metrics"],
    )
    inst.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
    return inst
