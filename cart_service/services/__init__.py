# Services

from .cart_engine import CartEngine
from .defects import OrderFailureMode
from .order_client import OrderServiceClient
from .order_submitter import OrderSubmitter

__all__ = ["CartEngine", "OrderFailureMode", "OrderServiceClient", "OrderSubmitter"]
