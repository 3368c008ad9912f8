# Cart Service Models

from .flags import FlagSet
from .cart import (
    LineItem,
    AddToCartRequest,
    UpdateQuantityRequest,
    CartItemResponse,
    CartSummaryResponse,
    CartCheckResponse,
)
from .order import (
    PaymentMethod,
    CreateOrderRequest,
    OrderCreationResponse,
    DownstreamOrder,
    DownstreamOrderItem,
)

__all__ = [
    "FlagSet",
    "LineItem",
    "AddToCartRequest",
    "UpdateQuantityRequest",
    "CartItemResponse",
    "CartSummaryResponse",
    "CartCheckResponse",
    "PaymentMethod",
    "CreateOrderRequest",
    "OrderCreationResponse",
    "DownstreamOrder",
    "DownstreamOrderItem",
]
