import logging
import sys
import structlog
import os
from opentelemetry.instrumentation.logging import LoggingInstrumentor


def get_log_level():
    """Get log level from environment or default to INFO"""
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_renderer():
    """Get log renderer based on environment"""
    env = os.getenv("ENVIRONMENT", "development")
    # JSON lines for tests and production, colours for local work
    if env in ["test", "production"]:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True, sort_keys=False)


def configure_logging():
    """Set up structlog + OTEL context injection."""
    shared_processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer = get_log_renderer()
    if isinstance(renderer, structlog.processors.JSONRenderer):
        # ConsoleRenderer formats tracebacks itself
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    env = os.getenv("ENVIRONMENT", "development")
    if env == "test":
        # stdout is easier to capture under pytest
        handler = logging.StreamHandler(sys.stdout)
    else:
        handler = logging.StreamHandler()

    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(get_log_level())

    # Keep uvicorn from double-printing; access logs go through api.middleware
    logging.getLogger("uvicorn.error").handlers.clear()
    logging.getLogger("uvicorn.access").handlers.clear()
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    # Must run after the handlers above are in place
    LoggingInstrumentor().instrument(set_logging_format=False)


# Business Event Log Names
class BusinessEvents:
    """Standard names for business event logs"""

    API_ENTRY = "api.request"
    WEBHOOK_RECEIVED = "webhook.received"
    WEBHOOK_VERIFIED = "webhook.verified"
    WEBHOOK_VERIFICATION_FAILED = "webhook.verification_failed"
    WEBHOOK_UNHANDLED = "webhook.unhandled"
    WEBHOOK_DISPATCH_ERROR = "webhook.dispatch_error"
    ORDER_APPROVED = "order.approved"
    CAPTURE_SUCCEEDED = "capture.succeeded"
    CAPTURE_FAILED = "capture.failed"
    PAYMENT_SAVED = "payment.saved"
    PAYMENT_SAVE_FAILED = "payment.save_failed"
    PAYMENT_LIST_FAILED = "payment.list_failed"
    PAYMENT_LINK_CREATED = "payment_link.created"
    PAYMENT_LINK_FAILED = "payment_link.failed"
    UNHANDLED_ERROR = "app.unhandled_error"


# Configure logging when module is imported
configure_logging()
