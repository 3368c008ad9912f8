"""Line item storage for the cart service"""

import asyncio
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from ..errors import StorageError
from ..models.cart import LineItem


class CartStore(ABC):
    """
    Keyed collection of line items.

    Rows are unique on (basket_id, dish_id). Implementations raise
    StorageError for constraint violations and lost connections; callers
    do not retry.
    """

    @abstractmethod
    async def find_item(self, basket_id: str, dish_id: uuid.UUID) -> Optional[LineItem]:
        ...

    @abstractmethod
    async def list_items(self, basket_id: str) -> list[LineItem]:
        ...

    @abstractmethod
    async def upsert(self, item: LineItem) -> None:
        ...

    @abstractmethod
    async def delete(self, item: LineItem) -> None:
        ...

    @abstractmethod
    async def delete_all(self, basket_id: str) -> int:
        ...


class InMemoryCartStore(CartStore):
    """In-memory line item storage"""

    def __init__(self):
        self.items: dict[tuple[str, uuid.UUID], LineItem] = {}
        self._lock = asyncio.Lock()

    async def find_item(self, basket_id: str, dish_id: uuid.UUID) -> Optional[LineItem]:
        """Get a copy of the row for (basket_id, dish_id)"""
        item = self.items.get((basket_id, dish_id))
        return item.model_copy() if item else None

    async def list_items(self, basket_id: str) -> list[LineItem]:
        """Get copies of every row in a basket"""
        return [
            item.model_copy()
            for (item_basket, _), item in self.items.items()
            if item_basket == basket_id
        ]

    async def upsert(self, item: LineItem) -> None:
        """Insert a new row or overwrite the row with the same id"""
        key = (item.basket_id, item.dish_id)
        async with self._lock:
            existing = self.items.get(key)
            if existing is not None and existing.id != item.id:
                raise StorageError(
                    f"Duplicate line item for basket {item.basket_id}, dish {item.dish_id}"
                )
            self.items[key] = item.model_copy()

    async def delete(self, item: LineItem) -> None:
        """Delete a row"""
        async with self._lock:
            self.items.pop((item.basket_id, item.dish_id), None)

    async def delete_all(self, basket_id: str) -> int:
        """Delete every row in a basket, returns the number removed"""
        async with self._lock:
            keys = [key for key in self.items if key[0] == basket_id]
            for key in keys:
                del self.items[key]
            return len(keys)


# Singleton instance
cart_store = InMemoryCartStore()
