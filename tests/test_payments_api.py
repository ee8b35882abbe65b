"""
GET /payments tests.
"""

from unittest.mock import MagicMock

from core.dependencies import get_payment_store
from db.store import PersistenceError
from main import app
from payments.webhooks import build_payment_record
from tests.payloads import CAPTURE_RESOURCE


def test_list_payments_empty(client):
    response = client.get("/payments")

    assert response.status_code == 200
    assert response.json() == []


def test_list_payments_returns_camel_case_records(client, store):
    store.save(build_payment_record(CAPTURE_RESOURCE))

    response = client.get("/payments")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    record = data[0]
    assert record["orderId"] == "O1"
    assert record["status"] == "COMPLETED"
    assert record["amount"] == 9.99
    assert record["currency"] == "USD"
    assert record["payerId"] == "P1"
    assert record["payerEmail"] == "a@b.com"
    assert record["createTime"].startswith("2024-01-01T00:00:00")
    assert record["updateTime"].startswith("2024-01-01T00:05:00")
    assert "id" in record


def test_list_payments_without_payer(client, store):
    resource = {k: v for k, v in CAPTURE_RESOURCE.items() if k != "payer"}
    store.save(build_payment_record(resource))

    record = client.get("/payments").json()[0]
    assert record["payerId"] is None
    assert record["payerEmail"] is None


def test_list_payments_store_failure(client):
    broken = MagicMock()
    broken.list_all.side_effect = PersistenceError("connection refused")
    app.dependency_overrides[get_payment_store] = lambda: broken

    response = client.get("/payments")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch payments"}
