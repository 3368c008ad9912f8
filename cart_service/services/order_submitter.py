"""
Order Submitter

Turns a basket into an order on the downstream order service. Validation is
fail-fast and never touches the cart store; the cart is cleared only after
the order service confirmed the order.
"""

import logging
import random
import uuid
from decimal import Decimal
from typing import Optional

from . import defects
from .cart_engine import CartEngine
from .order_client import OrderServiceClient
from ..errors import CartValidationError, OrderServiceError, StorageError
from ..models.cart import LineItem
from ..models.flags import FlagSet
from ..models.order import (
    CreateOrderRequest,
    DownstreamOrder,
    DownstreamOrderItem,
    OrderCreationResponse,
    PaymentMethod,
)

logger = logging.getLogger(__name__)

PHONE_STRIP_CHARS = "+-() "

ORDER_CREATED = "Order created successfully"
ORDER_FAILED = "Failed to create order in the order service"


def normalize_phone_number(phone_number: str) -> str:
    """Drop + - ( ) and spaces"""
    return phone_number.translate({ord(c): None for c in PHONE_STRIP_CHARS})


def is_valid_phone_number(phone_number: Optional[str]) -> bool:
    """11 ASCII digits starting with 7 or 8 once formatting is stripped"""
    if not phone_number or not phone_number.strip():
        return False
    cleaned = normalize_phone_number(phone_number)
    return len(cleaned) == 11 and cleaned.isascii() and cleaned.isdigit() and cleaned[0] in "78"


def validate_order_request(
    basket_id: Optional[str],
    user_id: Optional[str],
    request: CreateOrderRequest,
) -> PaymentMethod:
    """Run the input checks in order, raising on the first failure"""
    if not basket_id:
        raise CartValidationError("Basket ID is required")

    if not all([user_id, request.phone_number, request.address, request.payment_method]):
        raise CartValidationError("Not all required fields are filled in")

    if not is_valid_phone_number(request.phone_number):
        raise CartValidationError("Invalid phone number format")

    payment_method = PaymentMethod.parse(request.payment_method)
    if payment_method is None:
        raise CartValidationError("Invalid payment method")

    return payment_method


def build_downstream_order(
    user_id: str,
    request: CreateOrderRequest,
    payment_method: PaymentMethod,
    items: list[LineItem],
) -> DownstreamOrder:
    """Serialize a basket into the order service payload"""
    try:
        user_uuid = uuid.UUID(str(user_id))
    except ValueError:
        raise CartValidationError("Invalid user id")

    total = sum((item.subtotal for item in items), Decimal("0"))

    return DownstreamOrder(
        user_id=user_uuid,
        item_count=len(items),
        total=float(total),
        items=[
            DownstreamOrderItem(
                id=item.dish_id,
                name=item.name,
                price=float(item.unit_price),
                image_url=[item.image_url] if item.image_url else [],
                quantity=item.quantity,
            )
            for item in items
        ],
        is_empty=not items,
        has_items=bool(items),
        phone_number=request.phone_number,
        address=request.address,
        payment_method=payment_method.value,
        comment=request.comment,
    )


class OrderSubmitter:
    """Creates orders from baskets through the order service"""

    def __init__(
        self,
        engine: CartEngine,
        client: OrderServiceClient,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            engine: Cart engine, also the source of the store and flags
            client: Order service client
            rng: Random source for picking the failure mode
        """
        self.engine = engine
        self.client = client
        self._rng = rng or random.Random()

    async def submit(
        self,
        order: DownstreamOrder,
        authorization: Optional[str],
        flags: FlagSet,
    ) -> bool:
        """Send the order, folding a raised OrderServiceError into False"""
        failure_mode = defects.choose_order_failure_mode(flags, self._rng)
        try:
            return await self.client.submit_order(
                order,
                authorization,
                base_url=flags.order_service_url,
                failure_mode=failure_mode,
            )
        except OrderServiceError as e:
            logger.error(f"Order service call raised: {e}")
            return False

    async def create_order_from_cart(
        self,
        basket_id: str,
        user_id: str,
        request: CreateOrderRequest,
        authorization: Optional[str] = None,
    ) -> OrderCreationResponse:
        """
        Create an order from a basket.

        Args:
            basket_id: Basket to order
            user_id: Id of the authenticated user (a UUID)
            request: Contact and payment details
            authorization: Caller's Authorization header, forwarded downstream

        Returns:
            OrderCreationResponse, success only when the order service
            accepted the order
        """
        flags = self.engine.flags.snapshot()
        try:
            payment_method = validate_order_request(basket_id, user_id, request)

            items = await self.engine.store.list_items(basket_id)
            if not items:
                raise CartValidationError("Cart is empty")

            order = build_downstream_order(user_id, request, payment_method, items)

            if defects.should_log_sensitive_info(flags):
                logger.info(
                    f"New order for user {user_id}, basket {basket_id}: "
                    f"phone={request.phone_number}, address={request.address}, "
                    f"payment={payment_method.value}, comment={request.comment or 'none'}, "
                    f"lines={order.item_count}, total={order.total}"
                )
            else:
                logger.info(
                    f"New order for basket {basket_id}: "
                    f"lines={order.item_count}, total={order.total}"
                )

            accepted = await self.submit(order, authorization, flags)
        except CartValidationError as e:
            return OrderCreationResponse(success=False, error_message=str(e))
        except StorageError as e:
            logger.error(f"Storage error creating order for basket {basket_id}: {e}")
            return OrderCreationResponse(success=False, error_message="Cart storage error while creating order")
        except Exception:
            logger.exception(f"Error creating order for basket {basket_id}")
            return OrderCreationResponse(success=False, error_message="Unexpected error while creating order")

        if not accepted:
            return OrderCreationResponse(success=False, error_message=ORDER_FAILED)

        if defects.should_suppress_cart_clear_after_order(flags):
            logger.warning(f"Cart clear after order skipped for basket {basket_id}")
        else:
            cleared = await self.engine.clear_cart(basket_id)
            if not cleared.success:
                logger.error(f"Order placed but basket {basket_id} was not cleared: {cleared.error_message}")

        logger.info(f"Order created for basket {basket_id}")
        return OrderCreationResponse(success=True, message=ORDER_CREATED)
