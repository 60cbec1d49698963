"""Cart API routes"""

from typing import Optional
from fastapi import APIRouter, HTTPException, Depends

from ..core.errors import NotFoundError, ValidationError
from ..core.session import BrowsingSession
from ..core.session_middleware import optional_session
from ..models.cart import (
    AddToCartRequest,
    UpdateCartItemRequest,
    CartResponse,
)
from ..services.shopper import Shopper
from ..services.store import RanchStore
from .deps import get_store

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def _respond(shopper: Shopper, message: Optional[str] = None) -> CartResponse:
    cart = shopper.cart()
    return CartResponse(cart=cart, totals=shopper.totals(cart), message=message)


@router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str, store: RanchStore = Depends(get_store)):
    """Get cart and totals; an unknown id starts an empty cart"""
    return _respond(store.shopper(cart_id))


@router.post("/{cart_id}/items", response_model=CartResponse)
async def add_to_cart(
    cart_id: str,
    request: AddToCartRequest,
    session: BrowsingSession = Depends(optional_session),
    store: RanchStore = Depends(get_store),
):
    """Add a variant, locking the product's pending discount onto the line"""
    shopper = store.shopper(cart_id, session)
    try:
        _, item = shopper.add_to_cart(request.product_id, request.variant_id, request.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    message = f"Added {request.quantity}x {item.product_name} to cart"
    if item.earned_discount_percent:
        message += f" at {item.earned_discount_percent}% off"
    return _respond(shopper, message)


@router.put("/{cart_id}/items/{line_id}", response_model=CartResponse)
async def update_cart_item(
    cart_id: str,
    line_id: str,
    request: UpdateCartItemRequest,
    store: RanchStore = Depends(get_store),
):
    """Update line quantity"""
    shopper = store.shopper(cart_id)
    try:
        shopper.update_quantity(line_id, request.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _respond(shopper, "Cart updated")


@router.delete("/{cart_id}/items/{line_id}", response_model=CartResponse)
async def remove_from_cart(cart_id: str, line_id: str, store: RanchStore = Depends(get_store)):
    """Remove a line from the cart"""
    shopper = store.shopper(cart_id)
    try:
        shopper.remove_from_cart(line_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _respond(shopper, "Item removed")


@router.delete("/{cart_id}", response_model=CartResponse)
async def clear_cart(cart_id: str, store: RanchStore = Depends(get_store)):
    """Clear all items from cart"""
    shopper = store.shopper(cart_id)
    shopper.clear_cart()
    return _respond(shopper, "Cart cleared")
