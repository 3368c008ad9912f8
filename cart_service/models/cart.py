"""Cart models for the cart service"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, computed_field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LineItem(BaseModel):
    """One dish in one basket, as persisted by the cart store"""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    basket_id: str
    dish_id: uuid.UUID
    name: str
    unit_price: Decimal
    image_url: str = ""
    quantity: int = Field(ge=1)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    def touch(self) -> None:
        """Refresh the modification timestamp"""
        self.updated_at = utcnow()


class AddToCartRequest(BaseModel):
    """Request to add a dish to a basket"""
    dish_id: uuid.UUID
    name: str = ""
    price: Decimal = Decimal("0")
    image_url: str = ""
    quantity: int = 1


class UpdateQuantityRequest(BaseModel):
    """Request to set the absolute quantity of a dish"""
    dish_id: str
    quantity: int


class CartItemResponse(BaseModel):
    """Line item as shown to clients"""
    dish_id: str
    name: str
    price: Decimal
    image_url: str = ""
    quantity: int

    @computed_field
    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_line_item(cls, item: LineItem) -> "CartItemResponse":
        return cls(
            dish_id=str(item.dish_id),
            name=item.name,
            price=item.unit_price,
            image_url=item.image_url,
            quantity=item.quantity,
        )


class CartSummaryResponse(BaseModel):
    """Cart API response"""
    success: bool
    error_message: Optional[str] = None
    basket_id: str = ""
    item_count: int = 0
    total: Decimal = Decimal("0")
    items: Optional[list[CartItemResponse]] = None

    @computed_field
    @property
    def is_empty(self) -> bool:
        return self.item_count == 0

    @computed_field
    @property
    def has_items(self) -> bool:
        return self.item_count > 0

    @classmethod
    def failure(cls, message: str) -> "CartSummaryResponse":
        return cls(success=False, error_message=message)

    @classmethod
    def from_items(
        cls,
        basket_id: str,
        items: list[LineItem],
        include_items: bool = True,
    ) -> "CartSummaryResponse":
        """Build the derived basket view over a set of line items"""
        return cls(
            success=True,
            basket_id=basket_id,
            item_count=sum(item.quantity for item in items),
            total=sum((item.subtotal for item in items), Decimal("0")),
            items=[CartItemResponse.from_line_item(item) for item in items] if include_items else None,
        )


class CartCheckResponse(BaseModel):
    """Response for the is-in-cart check"""
    is_in_cart: bool
    message: Optional[str] = None
