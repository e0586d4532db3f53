import os

# The module-level app in main.py is built on import; keep it off the collector
os.environ.setdefault("TRACING_ENABLED", "false")
os.environ.setdefault("METRICS_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from main import create_app
from services.context import AppContext
from shared.config.settings import DatabaseSettings, GatewaySettings, MailSettings, Settings
from shared.security import compute_signature, limiter

from tests.fakes import FakeGateway, FakeMailer, InMemoryOrderStore

SERVER_KEY = "SB-Mid-server-test-key"
CLIENT_KEY = "SB-Mid-client-test-key"


def signed_notification(
    order_id: str,
    transaction_status: str = "settlement",
    fraud_status: str | None = "accept",
    status_code: str = "200",
    gross_amount: str = "150.00",
    server_key: str = SERVER_KEY,
) -> dict:
    body = {
        "transaction_time": "2026-10-19 10:00:00",
        "transaction_status": transaction_status,
        "transaction_id": "5f1c2a5e-0f3b-4c6e-9a2b-0c6d1b7a9e11",
        "status_message": "midtrans payment notification",
        "status_code": status_code,
        "signature_key": compute_signature(order_id, status_code, gross_amount, server_key),
        "payment_type": "bank_transfer",
        "order_id": order_id,
        "merchant_id": "G000000000",
        "gross_amount": gross_amount,
        "currency": "IDR",
    }
    if fraud_status is not None:
        body["fraud_status"] = fraud_status
    return body


@pytest.fixture
def settings():
    return Settings(
        gateway=GatewaySettings(server_key=SERVER_KEY, client_key=CLIENT_KEY),
        database=DatabaseSettings(url="sqlite+aiosqlite://"),
        mail=MailSettings(user="shop@example.com", password="app-password"),
        tracing_enabled=False,
        metrics_enabled=False,
    )


@pytest.fixture
def store():
    store = InMemoryOrderStore()
    store.add_product("A", stock=10)
    store.add_product("SHIPPING_COST", stock=0)
    store.stats = {"total_revenue": 1000, "total_stock": 50, "total_orders": 4}
    store.add_order(
        "ORDER-1",
        items=[{"id": "A", "quantity": 2, "name": "Leather Wallet"}, {"id": "SHIPPING_COST", "quantity": 1}],
        total_amount=150,
    )
    return store


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def context(settings, store, gateway, mailer):
    return AppContext(settings=settings, gateway=gateway, store=store, mailer=mailer)


@pytest.fixture
def client(context):
    return TestClient(create_app(context=context))


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()
