"""
Defect injection points.

Every function takes the FlagSet snapshot of the running operation plus the
value the engine is about to use, and returns either that value unchanged
(flag off) or a deliberately wrong one (flag on). Nothing here touches the
cart store.
"""

import random
from decimal import Decimal
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

from ..models.cart import AddToCartRequest, CartSummaryResponse
from ..models.flags import FlagSet

RESPONSE_INFLATION = Decimal("1.1")
OVERFLOW_MULTIPLIER = 100


class OrderFailureMode(str, Enum):
    """Ways a broken order submission can misbehave"""
    RETURN_FALSE_IMMEDIATELY = "return_false_immediately"
    THROW_EXCEPTION = "throw_exception"
    INFINITE_TIMEOUT = "infinite_timeout"
    WRONG_URL = "wrong_url"
    INVALID_DATA = "invalid_data"
    FAKE_SUCCESS = "fake_success"
    WRONG_HTTP_METHOD = "wrong_http_method"
    WRONG_HEADERS = "wrong_headers"
    HIDE_ERRORS = "hide_errors"


def is_absolute_url(url: str) -> bool:
    parsed = urlparse(url)
    return bool(parsed.scheme and parsed.netloc)


def adjust_incoming_add(flags: FlagSet, request: AddToCartRequest) -> AddToCartRequest:
    """Calculation bug: unit price becomes price + quantity"""
    if not flags.enable_calculation_bug:
        return request
    return request.model_copy(update={"price": request.price + request.quantity})


def adjust_quantity_delta(flags: FlagSet, delta: int) -> int:
    """Overflow bug: quantity added to an existing line is multiplied by 100"""
    if not flags.enable_overflow_bug:
        return delta
    return delta * OVERFLOW_MULTIPLIER


def adjust_image_url(flags: FlagSet, image_url: str, base_url: str) -> str:
    """
    Resolve a dish image reference against the local base URL.

    Relative paths get the base URL prepended and absolute URLs are kept.
    With the image URL bug on the rule is inverted: absolute URLs get
    prefixed and relative paths are left broken.
    """
    if not image_url:
        return image_url

    needs_prefix = not is_absolute_url(image_url)
    if flags.enable_image_url_bug:
        needs_prefix = not needs_prefix

    if not needs_prefix:
        return image_url
    return f"{base_url.rstrip('/')}/{image_url.lstrip('/')}"


def adjust_summary_response(flags: FlagSet, response: CartSummaryResponse) -> CartSummaryResponse:
    """Response bug: reported total inflated by 10%, stored data untouched"""
    if not flags.enable_response_bug or not response.success:
        return response
    return response.model_copy(update={"total": response.total * RESPONSE_INFLATION})


def should_skip_validation(flags: FlagSet, dish_id) -> bool:
    """Validation bug: dishes whose id ends in 9 bypass the quantity limit"""
    if not flags.enable_validation_bug or not dish_id:
        return False
    return str(dish_id).endswith("9")


def should_suppress_quantity_change_on_add(flags: FlagSet) -> bool:
    return flags.no_quantity_change_on_add


def should_suppress_removal(flags: FlagSet) -> bool:
    return flags.no_quantity_change_on_remove


def should_suppress_cart_clear_after_order(flags: FlagSet) -> bool:
    return flags.no_cart_clear_after_order


def should_log_sensitive_info(flags: FlagSet) -> bool:
    """Info leak bug: logs carry dish ids, phone numbers and addresses"""
    return flags.enable_info_leak_bug


def choose_order_failure_mode(
    flags: FlagSet,
    rng: Optional[random.Random] = None,
) -> Optional[OrderFailureMode]:
    """
    Pick how order submission breaks this time.

    Returns None when order breaking is off. The pick is random on purpose;
    pass a seeded or stubbed rng to make it reproducible.
    """
    if not flags.break_order_creation:
        return None
    rng = rng or random.Random()
    return rng.choice(list(OrderFailureMode))
