"""Pending discount routes"""

from fastapi import APIRouter, Depends

from ..models.discount import DiscountListResponse, PendingDiscountResponse
from ..services.store import RanchStore
from .deps import get_store

router = APIRouter(prefix="/api/discounts", tags=["Discounts"])


@router.get("/{cart_id}", response_model=DiscountListResponse)
async def list_discounts(cart_id: str, store: RanchStore = Depends(get_store)):
    """All active pending discounts for a cart"""
    return DiscountListResponse(cart_id=cart_id, discounts=store.ledger(cart_id).active())


@router.get("/{cart_id}/{product_id}", response_model=PendingDiscountResponse)
async def peek_discount(cart_id: str, product_id: str, store: RanchStore = Depends(get_store)):
    """
    Pending discount banner data for a product.

    Missing and expired discounts both come back as discount=null.
    """
    return PendingDiscountResponse(
        product_id=product_id,
        discount=store.ledger(cart_id).peek(product_id),
    )
