"""
Request logging middleware

Writes one line per request (method, path, status, user) to the
cart_service.requests logger. Logging handlers report their own I/O
failures, so a broken log sink never fails a request.
"""

import logging
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from ..core.flags import FlagRegistry
from ..security.credentials import inspect_credential

logger = logging.getLogger(__name__)
request_logger = logging.getLogger("cart_service.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request and flags order requests made while ordering is broken"""

    def __init__(self, app, flags: FlagRegistry):
        super().__init__(app)
        self.flags = flags

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        user_id = inspect_credential(request.headers.get("Authorization")).user_id or "anonymous"
        method = request.method
        path = request.url.path

        try:
            response = await call_next(request)
        except Exception:
            request_logger.info(f"{method} {path} 500 {user_id}")
            logger.exception(f"Error in {method} {path}")
            raise

        request_logger.info(f"{method} {path} {response.status_code} {user_id}")

        if "create-order" in path and self.flags.snapshot().break_order_creation:
            logger.warning("break_order_creation flag is active for order creation")

        return response
