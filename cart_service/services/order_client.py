"""
Order Service Client

HTTP client for the downstream order service. Forwards the caller's bearer
credential and reports success as a boolean. When order creation is broken
on purpose, one of the OrderFailureMode behaviours replaces the nominal call.
"""

import asyncio
import json
import logging
import random
from typing import Optional

import httpx

from .defects import OrderFailureMode
from ..core.config import settings
from ..errors import OrderServiceUnavailableError
from ..models.order import DownstreamOrder

logger = logging.getLogger(__name__)

ORDER_CREATE_PATH = "/order/create"
WRONG_HOST = "non-existent-order-service"
WRONG_PORT = 9999
WRONG_PATH = "/wrong-endpoint"
POISON_HEADER = "X-Poison-Header"


def normalize_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the header value with a Bearer prefix, None when empty"""
    if not authorization or not authorization.strip():
        return None
    authorization = authorization.strip()
    if not authorization.lower().startswith("bearer "):
        authorization = f"Bearer {authorization}"
    return authorization


class OrderServiceClient:
    """
    Client for the order service's /order/create endpoint.

    submit_order() returns True only on a 2xx answer (or a faked one).
    The THROW_EXCEPTION failure mode raises OrderServiceUnavailableError
    instead of returning.
    """

    def __init__(
        self,
        base_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = settings.order_request_timeout,
        watchdog_seconds: float = settings.order_watchdog_seconds,
        simulated_delay: float = settings.simulated_delay_seconds,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize order service client.

        Args:
            base_url: Default base URL of the order service
            http_client: Pre-built client (tests pass one with a mock transport)
            timeout: Request timeout in seconds
            watchdog_seconds: Upper bound for the hanging failure mode
            simulated_delay: Delay before a faked answer
            rng: Random source for picking a broken URL
        """
        self.base_url = base_url.rstrip("/")
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self.watchdog_seconds = watchdog_seconds
        self.simulated_delay = simulated_delay
        self._rng = rng or random.Random()

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def _endpoint(self, base_url: Optional[str] = None) -> str:
        return f"{(base_url or self.base_url).rstrip('/')}{ORDER_CREATE_PATH}"

    def _generate_headers(self, authorization: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": authorization,
        }

    def wrong_url(self, endpoint: str) -> str:
        """Corrupt one part of the endpoint: host, port, path or scheme"""
        url = httpx.URL(endpoint)
        variants = [
            url.copy_with(host=WRONG_HOST),
            url.copy_with(port=WRONG_PORT),
            url.copy_with(path=WRONG_PATH),
            url.copy_with(scheme="https" if url.scheme == "http" else "http"),
        ]
        return str(self._rng.choice(variants))

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        content: Optional[str],
        hide_errors: bool = False,
    ) -> bool:
        """Issue one request, True on a 2xx answer"""
        try:
            response = await self._http_client.request(
                method=method,
                url=url,
                headers=headers,
                content=content,
            )
        except httpx.HTTPError as e:
            if not hide_errors:
                logger.error(f"Order service request {method} {url} failed: {e}")
            return False

        if response.is_success:
            logger.info(f"Order service accepted order: {response.status_code}")
            return True

        if not hide_errors:
            logger.error(f"Order service error: {response.status_code} - {response.text}")
        return False

    async def submit_order(
        self,
        order: DownstreamOrder,
        authorization: Optional[str],
        base_url: Optional[str] = None,
        failure_mode: Optional[OrderFailureMode] = None,
    ) -> bool:
        """
        Send an order to the order service.

        Args:
            order: Payload built from the basket
            authorization: Caller's Authorization header, forwarded as is
            base_url: Overrides the client's base URL for this call
            failure_mode: Broken behaviour to use instead of the real call

        Returns:
            True if the order service accepted the order
        """
        authorization = normalize_bearer(authorization)
        if authorization is None:
            logger.error("No authorization token found in current request")
            return False

        url = self._endpoint(base_url)
        headers = self._generate_headers(authorization)
        body = json.dumps(order.to_wire())

        if failure_mode is None:
            logger.debug(f"Sending order to {url}: {body}")
            return await self._send("POST", url, headers, body)

        logger.warning(f"Order submission is broken, mode={failure_mode.value}")

        if failure_mode == OrderFailureMode.RETURN_FALSE_IMMEDIATELY:
            await asyncio.sleep(self.simulated_delay)
            return False

        if failure_mode == OrderFailureMode.THROW_EXCEPTION:
            raise OrderServiceUnavailableError(f"Order service at {url} is unavailable")

        if failure_mode == OrderFailureMode.INFINITE_TIMEOUT:
            try:
                await asyncio.wait_for(asyncio.Event().wait(), timeout=self.watchdog_seconds)
            except asyncio.TimeoutError:
                logger.error(f"Order service call timed out after {self.watchdog_seconds}s")
            return False

        if failure_mode == OrderFailureMode.WRONG_URL:
            return await self._send("POST", self.wrong_url(url), headers, body)

        if failure_mode == OrderFailureMode.INVALID_DATA:
            invalid_body = json.dumps({
                "userId": "not-a-uuid",
                "itemCount": -1,
                "total": "free",
                "items": "none",
            })
            return await self._send("POST", url, headers, invalid_body)

        if failure_mode == OrderFailureMode.FAKE_SUCCESS:
            await asyncio.sleep(self.simulated_delay)
            return True

        if failure_mode == OrderFailureMode.WRONG_HTTP_METHOD:
            return await self._send("GET", url, headers, body)

        if failure_mode == OrderFailureMode.WRONG_HEADERS:
            headers.update({"Content-Type": "text/plain", POISON_HEADER: "poison"})
            return await self._send("POST", url, headers, body)

        if failure_mode == OrderFailureMode.HIDE_ERRORS:
            return await self._send("POST", url, headers, body, hide_errors=True)

        raise ValueError(f"Unknown failure mode: {failure_mode}")
