"""Product API routes"""

from fastapi import APIRouter, HTTPException, Query, Depends

from ..models.product import Product, ProductListResponse
from ..services.store import RanchStore
from .deps import get_store

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    in_stock_only: bool = Query(False, description="Only show products with a variant in stock"),
    store: RanchStore = Depends(get_store),
):
    """List the catalog"""
    products = store.catalog.get_all_products(in_stock_only=in_stock_only)
    return ProductListResponse(products=products, total=len(products))


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, store: RanchStore = Depends(get_store)):
    """Get a product by ID"""
    product = store.catalog.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
