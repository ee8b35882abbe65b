"""Test configuration and fixtures."""

import os
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from core.dependencies import (
    get_link_service,
    get_payment_store,
    get_webhook_dispatcher,
)
from core.settings import Settings
from db.models import Base
from db.session import make_session_factory
from db.store import PaymentRecordStore
from main import app
from payments.links import PaymentLinkService
from payments.paypal_client import OrderLink, VerificationStatus
from payments.webhooks import WebhookDispatcher
from tests.payloads import APPROVED_ORDER, WEBHOOK_ID


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Setup test environment variables before each test."""
    original_env = dict(os.environ)

    os.environ.update(
        {
            "DATABASE_URL": "sqlite:///:memory:",
            "PAYPAL_CLIENT_ID": "test_client_id",
            "PAYPAL_CLIENT_SECRET": "test_secret",
            "PAYPAL_WEBHOOK_ID": WEBHOOK_ID,
            "APP_NAME": "Test Relay",
            "ENVIRONMENT": "development",
            "DISABLE_TRACING": "true",
        }
    )

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_settings():
    return Settings(
        DATABASE_URL="sqlite:///:memory:",
        PAYPAL_CLIENT_ID="test_client_id",
        PAYPAL_CLIENT_SECRET="test_secret",
        PAYPAL_WEBHOOK_ID=WEBHOOK_ID,
        APP_NAME="Test Relay",
        ENVIRONMENT="development",
        DISABLE_TRACING=True,
    )


@pytest.fixture
def test_db_engine():
    """In-memory SQLite shared by every session of a test."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def test_db_session(test_db_engine):
    SessionLocal = make_session_factory(test_db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(test_db_engine):
    return PaymentRecordStore(make_session_factory(test_db_engine))


@pytest.fixture
def paypal():
    """PayPal client double that verifies everything and captures cleanly."""
    client = MagicMock()
    client.verify_webhook.return_value = VerificationStatus.SUCCESS
    client.capture_order.return_value = {"id": "O1", "status": "COMPLETED"}
    client.create_order.return_value = OrderLink(
        order_id=APPROVED_ORDER["id"],
        approval_url=APPROVED_ORDER["links"][1]["href"],
        order=APPROVED_ORDER,
    )
    return client


@pytest.fixture
def dispatcher(paypal, store):
    return WebhookDispatcher(paypal, store, webhook_id=WEBHOOK_ID)


@pytest.fixture
def link_service(paypal):
    return PaymentLinkService(
        paypal,
        return_url="https://example.com/success",
        cancel_url="https://example.com/cancel",
    )


@pytest.fixture
def client(store, dispatcher, link_service):
    """Test client wired to the in-memory store and the PayPal double."""
    app.dependency_overrides[get_payment_store] = lambda: store
    app.dependency_overrides[get_webhook_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_link_service] = lambda: link_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
