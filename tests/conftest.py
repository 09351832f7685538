# Storefront/tests/conftest.py
# @ai-rules:
# 1. [Pattern]: Centralizes sys.path setup so individual test files don't need it.
# 2. [Pattern]: FakeUpstream serves canned responses through httpx.MockTransport -- no network, no respx.
# 3. [Gotcha]: upstream_env is autouse. Tests that need a missing base URL must delenv explicitly.

import asyncio
import sys
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from storefront.storefront_client import StorefrontClient  # noqa: E402

LIVE_API_URL = "https://live.api.example.com"
TEST_API_URL = "https://test.api.example.com"

BUSINESS = {"business_id": "b1", "name": "Acme", "logo": "l.png", "banner": "b.png"}

ONE_TIME_ITEM = {
    "product_id": "p1",
    "name": "Mug",
    "image": "mug.png",
    "price": 1500,
    "currency": "USD",
    "description": "A mug",
    "price_detail": {"pay_what_you_want": True},
}

RECURRING_ITEM = {
    "product_id": "s1",
    "name": "Coffee Club",
    "image": None,
    "price": 900,
    "currency": "USD",
    "description": None,
    "price_detail": {
        "payment_frequency_count": 1,
        "payment_frequency_interval": "Month",
        "trial_period_days": 14,
    },
}


def raise_timeout(request: httpx.Request):
    raise httpx.ReadTimeout("timed out", request=request)


def raise_connect_error(request: httpx.Request):
    raise httpx.ConnectError("connection refused", request=request)


class FakeUpstream:
    """
    Canned upstream API keyed by endpoint.

    Each response is either (status, body) or a callable taking the request,
    which lets a test raise transport errors from inside the transport.
    """

    def __init__(self, business=(200, BUSINESS), products=(200, {"items": []}), subscriptions=(200, {"items": []})):
        self.responses = {"business": business, "products": products, "subscriptions": subscriptions}
        self.requests: list[httpx.Request] = []
        self.http_clients: list[httpx.AsyncClient] = []

    def _key(self, request: httpx.Request) -> str:
        if request.url.path.endswith("/products"):
            return "subscriptions" if request.url.params.get("recurring") == "true" else "products"
        return "business"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses[self._key(request)]
        if callable(response):
            return response(request)
        status, body = response
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    def client(self) -> StorefrontClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        self.http_clients.append(http)
        return StorefrontClient(http_client=http)

    def close(self) -> None:
        """Close every AsyncClient handed out; StorefrontClient leaves injected ones open."""
        for http in self.http_clients:
            if not http.is_closed:
                asyncio.run(http.aclose())


@pytest.fixture(autouse=True)
def upstream_env(monkeypatch):
    monkeypatch.setenv("DODO_LIVE_API_URL", LIVE_API_URL + "/")
    monkeypatch.setenv("DODO_TEST_API_URL", TEST_API_URL)
    monkeypatch.setenv("STOREFRONT_TEST_HOSTS", "localhost,127.0.0.1")
    monkeypatch.delenv("DODO_LIVE_CHECKOUT_URL", raising=False)
    monkeypatch.delenv("DODO_TEST_CHECKOUT_URL", raising=False)


@pytest.fixture
def upstream():
    fake = FakeUpstream()
    yield fake
    fake.close()
