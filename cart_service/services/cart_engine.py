"""
Cart Engine

Add, remove, update, clear and read line items of a basket. Each operation
is a short independent transaction against the cart store that reads one
FlagSet snapshot and consults the defect injection points on the way.
"""

import asyncio
import logging
import uuid
import weakref
from typing import Optional, Union

from . import defects
from ..core.config import settings
from ..core.flags import FlagRegistry
from ..database.carts import CartStore
from ..errors import CartValidationError, ItemNotFoundError, StorageError
from ..models.cart import AddToCartRequest, CartSummaryResponse, LineItem
from ..models.flags import FlagSet

logger = logging.getLogger(__name__)


def generate_basket_id() -> str:
    return f"basket_{uuid.uuid4().hex[:12]}"


def parse_dish_id(dish_id: Union[str, uuid.UUID, None]) -> uuid.UUID:
    """Parse a dish id, raising CartValidationError on a bad format"""
    if isinstance(dish_id, uuid.UUID):
        return dish_id
    try:
        return uuid.UUID(str(dish_id))
    except (TypeError, ValueError):
        raise CartValidationError("Invalid dish id format")


def require_basket_id(basket_id: Optional[str]) -> str:
    if not basket_id:
        raise CartValidationError("Basket ID is required")
    return basket_id


def require_quantity(quantity: int) -> int:
    if quantity < 1:
        raise CartValidationError("Quantity must be at least 1")
    return quantity


class CartEngine:
    """
    Orchestrates cart operations against a CartStore.

    Public operations never raise: validation problems, missing items and
    storage failures all come back as CartSummaryResponse(success=False).
    """

    def __init__(
        self,
        store: CartStore,
        flags: Union[FlagRegistry, FlagSet, None] = None,
        image_base_url: str = settings.image_base_url,
    ):
        """
        Args:
            store: Line item storage
            flags: Live flag registry, or a fixed FlagSet
            image_base_url: Prefix for relative dish image paths
        """
        self.store = store
        self.flags = flags if isinstance(flags, FlagRegistry) else FlagRegistry(flags)
        self.image_base_url = image_base_url
        self._key_locks: "weakref.WeakValueDictionary[tuple, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _key_lock(self, basket_id: str, dish_id: uuid.UUID) -> asyncio.Lock:
        """Lock serialising read-modify-write on one (basket, dish) row"""
        key = (basket_id, dish_id)
        lock = self._key_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._key_locks[key] = lock
        return lock

    async def _summarize(self, basket_id: str, include_items: bool = True) -> CartSummaryResponse:
        items = await self.store.list_items(basket_id)
        return CartSummaryResponse.from_items(basket_id, items, include_items=include_items)

    def _failure(
        self,
        exc: Exception,
        action: str,
        basket_id: Optional[str],
        detail: str = "",
    ) -> CartSummaryResponse:
        """Translate an exception raised inside an operation into a result"""
        if isinstance(exc, (CartValidationError, ItemNotFoundError)):
            return CartSummaryResponse.failure(str(exc))

        if isinstance(exc, StorageError):
            logger.error(f"Storage error {action} for basket {basket_id}{detail}: {exc}")
            return CartSummaryResponse.failure(f"Cart storage error while {action}")

        logger.exception(f"Error {action} for basket {basket_id}{detail}")
        return CartSummaryResponse.failure(f"Unexpected error while {action}")

    # ==================== Mutations ====================

    async def add_to_cart(self, basket_id: str, request: AddToCartRequest) -> CartSummaryResponse:
        """
        Add a dish to a basket.

        A dish already in the basket gets its quantity increased, clamped
        to the cart item limit; a new dish creates a line item.
        """
        flags = self.flags.snapshot()
        try:
            require_basket_id(basket_id)
            require_quantity(request.quantity)

            request = defects.adjust_incoming_add(flags, request)
            skip_validation = defects.should_skip_validation(flags, request.dish_id)
            if skip_validation:
                logger.warning(f"Validation skipped for dish {request.dish_id}")

            async with self._key_lock(basket_id, request.dish_id):
                item = await self.store.find_item(basket_id, request.dish_id)

                if item is not None:
                    if defects.should_suppress_quantity_change_on_add(flags):
                        item.touch()
                    else:
                        delta = defects.adjust_quantity_delta(flags, request.quantity)
                        limit = flags.cart_item_limit
                        if not skip_validation and item.quantity + delta > limit:
                            delta = max(1, limit - item.quantity)
                        item.quantity += delta
                        item.touch()
                else:
                    item = LineItem(
                        basket_id=basket_id,
                        dish_id=request.dish_id,
                        name=request.name,
                        unit_price=request.price,
                        image_url=defects.adjust_image_url(flags, request.image_url, self.image_base_url),
                        quantity=request.quantity,
                    )

                await self.store.upsert(item)

            response = await self._summarize(basket_id)
            return defects.adjust_summary_response(flags, response)
        except Exception as exc:
            detail = ""
            if defects.should_log_sensitive_info(flags):
                detail = f", dish {request.dish_id}, price {request.price}"
            return self._failure(exc, "adding item to cart", basket_id, detail)

    async def remove_from_cart(self, basket_id: str, dish_id: str) -> CartSummaryResponse:
        """Remove a dish from a basket"""
        flags = self.flags.snapshot()
        try:
            require_basket_id(basket_id)
            dish_uuid = parse_dish_id(dish_id)

            async with self._key_lock(basket_id, dish_uuid):
                item = await self.store.find_item(basket_id, dish_uuid)
                if item is None:
                    raise ItemNotFoundError("Item not found in cart")

                if defects.should_suppress_removal(flags):
                    item.touch()
                    await self.store.upsert(item)
                else:
                    await self.store.delete(item)

            return await self._summarize(basket_id)
        except Exception as exc:
            return self._failure(exc, "removing item from cart", basket_id)

    async def update_quantity(self, basket_id: str, dish_id: str, quantity: int) -> CartSummaryResponse:
        """Set the absolute quantity of a dish already in the basket"""
        try:
            require_basket_id(basket_id)
            require_quantity(quantity)
            dish_uuid = parse_dish_id(dish_id)

            async with self._key_lock(basket_id, dish_uuid):
                item = await self.store.find_item(basket_id, dish_uuid)
                if item is None:
                    raise ItemNotFoundError("Item not found in cart")

                item.quantity = quantity
                item.touch()
                await self.store.upsert(item)

            return await self._summarize(basket_id)
        except Exception as exc:
            return self._failure(exc, "updating quantity", basket_id)

    async def clear_cart(self, basket_id: str) -> CartSummaryResponse:
        """Delete every line item in a basket"""
        try:
            require_basket_id(basket_id)
            removed = await self.store.delete_all(basket_id)
            logger.debug(f"Cleared {removed} line items from basket {basket_id}")
            return CartSummaryResponse(success=True, basket_id=basket_id, items=[])
        except Exception as exc:
            return self._failure(exc, "clearing cart", basket_id)

    # ==================== Reads ====================

    async def get_cart(self, basket_id: Optional[str] = None) -> CartSummaryResponse:
        """
        Get a basket with its line items.

        Without a basket id a fresh one is generated and an empty cart is
        returned, so clients can start a basket from this call.
        """
        flags = self.flags.snapshot()
        try:
            if not basket_id:
                return CartSummaryResponse(success=True, basket_id=generate_basket_id(), items=[])

            response = await self._summarize(basket_id)
            return defects.adjust_summary_response(flags, response)
        except Exception as exc:
            return self._failure(exc, "getting cart", basket_id)

    async def get_cart_summary(self, basket_id: str) -> CartSummaryResponse:
        """Get item count and total of a basket, without the item list"""
        flags = self.flags.snapshot()
        try:
            require_basket_id(basket_id)
            response = await self._summarize(basket_id, include_items=False)
            return defects.adjust_summary_response(flags, response)
        except Exception as exc:
            return self._failure(exc, "getting cart summary", basket_id)

    async def is_in_cart(self, basket_id: str, dish_id: str) -> bool:
        """Check whether a dish is in a basket; any error counts as no"""
        try:
            if not basket_id:
                return False
            dish_uuid = parse_dish_id(dish_id)
            return await self.store.find_item(basket_id, dish_uuid) is not None
        except CartValidationError:
            return False
        except Exception:
            logger.exception(f"Error checking if item is in cart for basket {basket_id}")
            return False
