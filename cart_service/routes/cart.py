"""Cart and order API routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..core.flags import flag_registry
from ..database.carts import cart_store
from ..models.cart import (
    AddToCartRequest,
    CartCheckResponse,
    CartSummaryResponse,
    UpdateQuantityRequest,
)
from ..models.order import CreateOrderRequest, OrderCreationResponse
from ..security.credentials import Credential, TokenStatus, require_user
from ..services.cart_engine import CartEngine
from ..services.order_client import OrderServiceClient
from ..services.order_submitter import OrderSubmitter

router = APIRouter(prefix="/api/cart", tags=["Cart"])

# Initialize services (overridden through app.dependency_overrides in tests)
order_client: Optional[OrderServiceClient] = None
cart_engine: Optional[CartEngine] = None


def get_order_client() -> OrderServiceClient:
    """Get or create order service client"""
    global order_client
    if order_client is None:
        order_client = OrderServiceClient(base_url=flag_registry.snapshot().order_service_url)
    return order_client


def get_cart_engine() -> CartEngine:
    """Get or create cart engine"""
    global cart_engine
    if cart_engine is None:
        cart_engine = CartEngine(store=cart_store, flags=flag_registry)
    return cart_engine


def get_order_submitter(
    engine: CartEngine = Depends(get_cart_engine),
    client: OrderServiceClient = Depends(get_order_client),
) -> OrderSubmitter:
    return OrderSubmitter(engine=engine, client=client)


def get_basket_id(basket_id: Optional[str] = Header(None, alias="basketId")) -> Optional[str]:
    """Extract basket ID from header"""
    return basket_id


def respond(result: BaseModel, success: bool, failure_status: int = 400):
    """Pass successful results through, wrap failures with an error status"""
    if success:
        return result
    return JSONResponse(status_code=failure_status, content=result.model_dump(mode="json"))


@router.get("", response_model=CartSummaryResponse)
async def get_cart(
    basket_id: Optional[str] = Query(None, alias="basketId"),
    engine: CartEngine = Depends(get_cart_engine),
):
    """Get cart by basket ID, or start a new basket when none is given"""
    result = await engine.get_cart(basket_id)
    return respond(result, result.success, failure_status=500)


@router.post("/add", response_model=CartSummaryResponse)
async def add_to_cart(
    request: AddToCartRequest,
    basket_id: Optional[str] = Depends(get_basket_id),
    engine: CartEngine = Depends(get_cart_engine),
):
    """Add an item to the cart"""
    result = await engine.add_to_cart(basket_id, request)
    return respond(result, result.success)


@router.put("/update", response_model=CartSummaryResponse)
async def update_quantity(
    request: UpdateQuantityRequest,
    basket_id: Optional[str] = Depends(get_basket_id),
    engine: CartEngine = Depends(get_cart_engine),
):
    """Set item quantity in cart"""
    result = await engine.update_quantity(basket_id, request.dish_id, request.quantity)
    return respond(result, result.success)


@router.delete("/remove/{dish_id}", response_model=CartSummaryResponse)
async def remove_from_cart(
    dish_id: str,
    basket_id: Optional[str] = Depends(get_basket_id),
    engine: CartEngine = Depends(get_cart_engine),
):
    """Remove an item from the cart"""
    result = await engine.remove_from_cart(basket_id, dish_id)
    return respond(result, result.success)


@router.delete("/clear", response_model=CartSummaryResponse)
async def clear_cart(
    basket_id: Optional[str] = Depends(get_basket_id),
    engine: CartEngine = Depends(get_cart_engine),
):
    """Clear all items from cart"""
    result = await engine.clear_cart(basket_id)
    return respond(result, result.success)


@router.get("/summary", response_model=CartSummaryResponse)
async def get_cart_summary(
    basket_id: Optional[str] = Depends(get_basket_id),
    engine: CartEngine = Depends(get_cart_engine),
):
    """Get item count and total without the item list"""
    result = await engine.get_cart_summary(basket_id)
    return respond(result, result.success)


@router.get("/check/{dish_id}", response_model=CartCheckResponse)
async def is_in_cart(
    dish_id: str,
    basket_id: Optional[str] = Depends(get_basket_id),
    engine: CartEngine = Depends(get_cart_engine),
):
    """Check whether a dish is in the cart"""
    if not basket_id:
        return respond(CartCheckResponse(is_in_cart=False, message="Basket ID is required"), False)
    return CartCheckResponse(is_in_cart=await engine.is_in_cart(basket_id, dish_id))


@router.post("/create-order", response_model=OrderCreationResponse)
async def create_order(
    request: CreateOrderRequest,
    basket_id: Optional[str] = Depends(get_basket_id),
    credential: Credential = Depends(require_user),
    submitter: OrderSubmitter = Depends(get_order_submitter),
):
    """
    Create an order from the cart.

    The caller's bearer token is forwarded to the order service. On
    success the cart is emptied.
    """
    if credential.status == TokenStatus.EXPIRED:
        expired = OrderCreationResponse(
            success=False,
            error_message="Token has expired. Please log in again.",
            error_code="TOKEN_EXPIRED",
        )
        return respond(expired, False, failure_status=401)

    result = await submitter.create_order_from_cart(
        basket_id,
        credential.user_id,
        request,
        authorization=credential.authorization,
    )
    return respond(result, result.success)
