import logging
import uuid

import pytest

from cart_service.errors import OrderServiceUnavailableError
from cart_service.models.order import DownstreamOrder, DownstreamOrderItem
from cart_service.services.defects import OrderFailureMode
from cart_service.services.order_client import POISON_HEADER, normalize_bearer

from ..conftest import TEST_TOKEN


def sample_order() -> DownstreamOrder:
    return DownstreamOrder(
        user_id=uuid.uuid4(),
        item_count=1,
        total=500.0,
        items=[
            DownstreamOrderItem(
                id=uuid.uuid4(),
                name="Borscht",
                price=250.0,
                image_url=["http://localhost:5000/images/borscht.jpg"],
                quantity=2,
            )
        ],
        is_empty=False,
        has_items=True,
        phone_number="+7 (999) 123-45-67",
        address="Lenina 1",
        payment_method="CARD_ONLINE",
    )


def test_normalize_bearer() -> None:
    assert normalize_bearer("abc") == "Bearer abc"
    assert normalize_bearer("Bearer abc") == "Bearer abc"
    assert normalize_bearer("  ") is None
    assert normalize_bearer(None) is None


async def test_nominal_submit_posts_camel_case_json(order_client, order_service) -> None:
    order = sample_order()

    accepted = await order_client.submit_order(order, TEST_TOKEN)

    assert accepted
    request = order_service.requests[-1]
    assert request.method == "POST"
    assert str(request.url) == "http://order-service:8096/order/create"
    assert request.headers["authorization"] == TEST_TOKEN
    assert request.headers["content-type"] == "application/json"
    body = order_service.last_body
    assert body["userId"] == str(order.user_id)
    assert body["itemCount"] == 1
    assert body["paymentMethod"] == "CARD_ONLINE"
    assert body["items"][0]["imageUrl"] == ["http://localhost:5000/images/borscht.jpg"]


async def test_bearer_prefix_added(order_client, order_service) -> None:
    await order_client.submit_order(sample_order(), "raw-token")
    assert order_service.requests[-1].headers["authorization"] == "Bearer raw-token"


async def test_missing_authorization_sends_nothing(order_client, order_service) -> None:
    assert not await order_client.submit_order(sample_order(), None)
    assert order_service.requests == []


async def test_downstream_error_status(order_client, order_service, caplog) -> None:
    order_service.status_code = 500

    with caplog.at_level(logging.ERROR):
        accepted = await order_client.submit_order(sample_order(), TEST_TOKEN)

    assert not accepted
    assert "500" in caplog.text


async def test_base_url_override(order_client, order_service) -> None:
    accepted = await order_client.submit_order(
        sample_order(), TEST_TOKEN, base_url="http://elsewhere:8096"
    )

    assert not accepted
    assert order_service.requests[-1].url.host == "elsewhere"


# ==================== failure modes ====================


async def test_return_false_immediately(order_client, order_service) -> None:
    accepted = await order_client.submit_order(
        sample_order(), TEST_TOKEN, failure_mode=OrderFailureMode.RETURN_FALSE_IMMEDIATELY
    )

    assert not accepted
    assert order_service.requests == []


async def test_throw_exception(order_client) -> None:
    with pytest.raises(OrderServiceUnavailableError):
        await order_client.submit_order(
            sample_order(), TEST_TOKEN, failure_mode=OrderFailureMode.THROW_EXCEPTION
        )


async def test_infinite_timeout_is_bounded_by_watchdog(order_client, order_service) -> None:
    accepted = await order_client.submit_order(
        sample_order(), TEST_TOKEN, failure_mode=OrderFailureMode.INFINITE_TIMEOUT
    )

    assert not accepted
    assert order_service.requests == []


@pytest.mark.parametrize(
    "index, check",
    [
        (0, lambda url: url.host == "non-existent-order-service"),
        (1, lambda url: url.port == 9999),
        (2, lambda url: url.path == "/wrong-endpoint"),
        (3, lambda url: url.scheme == "https"),
    ],
)
async def test_wrong_url_variants(make_order_client, order_service, index, check) -> None:
    client = make_order_client(index=index)

    accepted = await client.submit_order(
        sample_order(), TEST_TOKEN, failure_mode=OrderFailureMode.WRONG_URL
    )

    assert not accepted
    assert check(order_service.requests[-1].url)


async def test_invalid_data(order_client, order_service) -> None:
    accepted = await order_client.submit_order(
        sample_order(), TEST_TOKEN, failure_mode=OrderFailureMode.INVALID_DATA
    )

    assert not accepted
    assert order_service.last_body["userId"] == "not-a-uuid"


async def test_fake_success_sends_nothing(order_client, order_service) -> None:
    accepted = await order_client.submit_order(
        sample_order(), TEST_TOKEN, failure_mode=OrderFailureMode.FAKE_SUCCESS
    )

    assert accepted
    assert order_service.requests == []


async def test_wrong_http_method(order_client, order_service) -> None:
    accepted = await order_client.submit_order(
        sample_order(), TEST_TOKEN, failure_mode=OrderFailureMode.WRONG_HTTP_METHOD
    )

    assert not accepted
    assert order_service.requests[-1].method == "GET"


async def test_wrong_headers(order_client, order_service) -> None:
    accepted = await order_client.submit_order(
        sample_order(), TEST_TOKEN, failure_mode=OrderFailureMode.WRONG_HEADERS
    )

    assert not accepted
    request = order_service.requests[-1]
    assert request.headers["content-type"] == "text/plain"
    assert request.headers[POISON_HEADER] == "poison"


async def test_hide_errors_reports_false_without_logging(order_client, order_service, caplog) -> None:
    order_service.status_code = 500

    with caplog.at_level(logging.ERROR, logger="cart_service.services.order_client"):
        accepted = await order_client.submit_order(
            sample_order(), TEST_TOKEN, failure_mode=OrderFailureMode.HIDE_ERRORS
        )

    assert not accepted
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


async def test_hide_errors_still_succeeds_against_healthy_service(order_client) -> None:
    assert await order_client.submit_order(
        sample_order(), TEST_TOKEN, failure_mode=OrderFailureMode.HIDE_ERRORS
    )
