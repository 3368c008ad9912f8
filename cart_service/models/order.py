"""Order models for the cart service"""

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PaymentMethod(str, Enum):
    CARD_ONLINE = "CARD_ONLINE"
    CARD_COURIER = "CARD_COURIER"
    CASH_COURIER = "CASH_COURIER"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["PaymentMethod"]:
        """Case-insensitive lookup, None when the value is not allowed"""
        if not value or not value.strip():
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class CreateOrderRequest(BaseModel):
    """Contact and payment details submitted with an order"""
    phone_number: str = ""
    address: str = ""
    payment_method: str = ""
    comment: Optional[str] = None


class OrderCreationResponse(BaseModel):
    """Response from order creation"""
    success: bool
    message: str = ""
    error_message: str = ""
    error_code: Optional[str] = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DownstreamOrderItem(_CamelModel):
    """Line item in the order service payload"""
    id: uuid.UUID
    name: str
    price: float
    image_url: list[str] = Field(default_factory=list)
    quantity: int


class DownstreamOrder(_CamelModel):
    """Body of POST /order/create on the order service"""
    success: bool = True
    error_message: Optional[str] = None
    user_id: uuid.UUID
    item_count: int
    total: float
    items: list[DownstreamOrderItem]
    is_empty: bool
    has_items: bool
    phone_number: str
    address: str
    payment_method: str
    comment: Optional[str] = None

    def to_wire(self) -> dict:
        """JSON-ready dict with the order service's camelCase keys"""
        return self.model_dump(mode="json", by_alias=True)
