"""
PayPal Relay - Main Application Entry Point

Creates PayPal checkout links, receives and verifies PayPal webhooks,
captures approved orders and stores completed captures.
"""

import structlog
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from api import routes
from api.middleware import log_api_entry
from core.dependencies import clear_settings, get_settings, init_settings
from core.logging import BusinessEvents, configure_logging
from core.metrics import init_metrics
from core.settings import Settings
from core.tracing import init_tracer
from db.session import init_db, make_session_factory, reset_engine
from db.store import PaymentRecordStore
from payments.links import PaymentLinkService
from payments.paypal_client import PayPalClient
from payments.webhooks import WebhookDispatcher

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build every collaborator once, before the first request."""
    settings = init_settings()
    init_tracer(settings)

    engine = init_db(settings)
    paypal = PayPalClient.from_settings(settings)
    store = PaymentRecordStore(make_session_factory(engine))

    app.state.paypal = paypal
    app.state.payment_store = store
    app.state.link_service = PaymentLinkService(
        paypal,
        return_url=settings.PAYPAL_RETURN_URL,
        cancel_url=settings.PAYPAL_CANCEL_URL,
    )
    app.state.webhook_dispatcher = WebhookDispatcher(
        paypal, store, webhook_id=settings.PAYPAL_WEBHOOK_ID
    )

    log.info(
        "app.started",
        environment=settings.ENVIRONMENT,
        paypal_mode="sandbox" if settings.is_sandbox else "live",
        webhook_id=settings.PAYPAL_WEBHOOK_ID,
    )
    yield
    # Shutdown
    reset_engine()
    clear_settings()


app = FastAPI(
    title="PayPal Relay",
    description="""
    Relay between a storefront and PayPal.

    - `GET /create-payment-link` creates a PayPal order carrying its approval link
    - `POST /paypal-webhook` verifies PayPal webhook deliveries, captures approved
      orders and records completed captures
    - `GET /payments` lists recorded captures
    """,
    version="1.0.0",
    lifespan=lifespan,
)

FastAPIInstrumentor.instrument_app(app)

init_metrics(app)

app.middleware("http")(log_api_entry)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log.error(
        BusinessEvents.UNHANDLED_ERROR,
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    return PlainTextResponse("Something broke!", status_code=500)


@app.get("/health")
async def health(settings: Settings = Depends(get_settings)):
    """Health check endpoint alias."""
    return await health_check(settings)


@app.get("/healthz")
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint to verify API status."""
    db_type = (
        "PostgreSQL" if settings.DATABASE_URL.startswith("postgresql") else "SQLite"
    )
    return {
        "status": "ok",
        "app_name": settings.APP_NAME,
        "database": db_type,
        "environment": settings.ENVIRONMENT,
        "paypal_mode": "sandbox" if settings.is_sandbox else "live",
    }


app.include_router(routes.router)


def main():
    import uvicorn

    configure_logging()
    settings = Settings()
    log.info("server.starting", url=f"http://localhost:{settings.PORT}")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    main()
