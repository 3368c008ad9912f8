"""Shared pytest fixtures for cart service tests."""

from __future__ import annotations

import json
import uuid
from decimal import Decimal

import httpx
import jwt
import pytest

from cart_service.database.carts import InMemoryCartStore
from cart_service.models.cart import LineItem
from cart_service.models.flags import FlagSet
from cart_service.services.cart_engine import CartEngine
from cart_service.services.order_client import OrderServiceClient
from cart_service.services.order_submitter import OrderSubmitter

ORDER_SERVICE_URL = "http://order-service:8096"
IMAGE_BASE_URL = "http://localhost:5000"
TEST_TOKEN = "Bearer test-token-123"


class PinnedChoice:
    """Random source stand-in: choice() returns `pick` when offered, else seq[index]."""

    def __init__(self, pick=None, index: int = 0) -> None:
        self.pick = pick
        self.index = index

    def choice(self, seq):
        seq = list(seq)
        if self.pick in seq:
            return self.pick
        return seq[self.index]


class FakeOrderService:
    """Plays the downstream order service behind httpx.MockTransport.

    Only http://order-service:8096 resolves; anything else fails to connect.
    """

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = request.url
        if url.scheme != "http" or url.host != "order-service" or url.port != 8096:
            raise httpx.ConnectError("Name or service not known", request=request)
        if request.method != "POST" or url.path != "/order/create":
            return httpx.Response(404, json={"error": "Not found"})
        if request.headers.get("content-type") != "application/json":
            return httpx.Response(415, json={"error": "Unsupported media type"})
        try:
            body = json.loads(request.content)
            uuid.UUID(body["userId"])
            assert isinstance(body["items"], list)
        except (ValueError, KeyError, TypeError, AssertionError):
            return httpx.Response(400, json={"error": "Invalid order"})
        return httpx.Response(
            self.status_code,
            json={"success": self.status_code < 400, "orderId": "test-order-123"},
        )

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


def make_token(**claims) -> str:
    return jwt.encode(claims, "cart-service-test-secret-0123456789", algorithm="HS256")


@pytest.fixture
def store() -> InMemoryCartStore:
    return InMemoryCartStore()


@pytest.fixture
def order_service() -> FakeOrderService:
    return FakeOrderService()


@pytest.fixture
def make_order_client(order_service):
    def _make(index: int = 0) -> OrderServiceClient:
        return OrderServiceClient(
            base_url=ORDER_SERVICE_URL,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(order_service)),
            watchdog_seconds=0.05,
            simulated_delay=0,
            rng=PinnedChoice(index=index),
        )

    return _make


@pytest.fixture
def order_client(make_order_client) -> OrderServiceClient:
    return make_order_client()


@pytest.fixture
def make_engine(store):
    def _make(**flags) -> CartEngine:
        return CartEngine(
            store=store,
            flags=FlagSet(order_service_url=ORDER_SERVICE_URL, **flags),
            image_base_url=IMAGE_BASE_URL,
        )

    return _make


@pytest.fixture
def make_submitter(make_engine, order_client):
    def _make(pick=None, **flags) -> OrderSubmitter:
        return OrderSubmitter(
            engine=make_engine(**flags),
            client=order_client,
            rng=PinnedChoice(pick=pick),
        )

    return _make


@pytest.fixture
def add_test_item(store):
    async def _add(
        basket_id: str,
        dish_id: uuid.UUID | None = None,
        price: str = "100",
        quantity: int = 2,
        image_url: str = "",
    ) -> LineItem:
        item = LineItem(
            basket_id=basket_id,
            dish_id=dish_id or uuid.uuid4(),
            name="Test Dish",
            unit_price=Decimal(price),
            image_url=image_url,
            quantity=quantity,
        )
        await store.upsert(item)
        return item

    return _add
