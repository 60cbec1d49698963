"""Checkout API routes"""

from fastapi import APIRouter, HTTPException, Depends

from ..core.errors import NotFoundError, ValidationError
from ..models.checkout import CheckoutRequest, CheckoutResponse, Order
from ..services.store import RanchStore
from .deps import get_store

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutResponse)
async def checkout(request: CheckoutRequest, store: RanchStore = Depends(get_store)):
    """
    Hand the cart to order placement.

    The cart items and totals are snapshotted into an order and the cart
    is cleared. Payment happens outside this service.
    """
    try:
        order = store.checkout(request.cart_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CheckoutResponse(success=True, order=order)


@router.get("/orders/{order_id}", response_model=Order)
async def get_order(order_id: str, store: RanchStore = Depends(get_store)):
    """Get order details"""
    order = store.orders.get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("/orders", response_model=list[Order])
async def list_orders(limit: int = 50, store: RanchStore = Depends(get_store)):
    """List recent orders"""
    return store.orders.list_orders(limit=limit)
