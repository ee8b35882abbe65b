from fastapi import Request

from core.settings import Settings
from db.store import PaymentRecordStore
from payments.links import PaymentLinkService
from payments.webhooks import WebhookDispatcher

# Settings singleton
_settings = None


def get_settings() -> Settings:
    """Dependency that provides application settings."""
    assert (
        _settings is not None
    ), "Settings not initialized. Make sure startup() was called."
    return _settings


def init_settings() -> Settings:
    """Initialize settings singleton."""
    global _settings
    _settings = Settings()
    return _settings


def clear_settings():
    """Clear settings singleton."""
    global _settings
    _settings = None


# Collaborators are built once in the app lifespan and parked on app.state


def get_payment_store(request: Request) -> PaymentRecordStore:
    return request.app.state.payment_store


def get_link_service(request: Request) -> PaymentLinkService:
    return request.app.state.link_service


def get_webhook_dispatcher(request: Request) -> WebhookDispatcher:
    return request.app.state.webhook_dispatcher
