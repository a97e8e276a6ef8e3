from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Literal, Optional

from app.api.deps import get_admin_user
from app.services import product_service

router = APIRouter()


@router.get("/", response_model=List[dict])
def list_products(
    category: Optional[str] = None,
    brand: Optional[str] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    in_stock: Optional[bool] = None,
    featured: Optional[bool] = None,
    sort_by: Optional[Literal["price_asc", "price_desc", "newest", "rating"]] = None,
    limit: Optional[int] = Query(None, ge=1, le=200),
    offset: Optional[int] = Query(None, ge=0),
):
    return product_service.get_products(
        category=category, brand=brand, min_price=min_price, max_price=max_price,
        in_stock=in_stock, featured=featured, sort_by=sort_by, limit=limit, offset=offset,
    )


@router.get("/featured")
def featured_products(limit: int = Query(8, ge=1, le=50)):
    return product_service.get_featured_products(limit)


@router.get("/search")
def search_products(q: str = Query(..., min_length=1), limit: int = Query(20, ge=1, le=100)):
    return product_service.search_products(q, limit)


@router.get("/{slug}")
def get_product(slug: str):
    product = product_service.get_product_by_slug(slug)
    if not product:
        raise HTTPException(status_code=404, detail="Not found")
    return product


@router.get("/{product_id}/similar")
def similar_products(product_id: str, category_id: str, limit: int = Query(4, ge=1, le=20)):
    return product_service.get_similar_products(product_id, category_id, limit)


@router.delete("/{product_id}")
def delete_product(product_id: str, admin=Depends(get_admin_user)):
    try:
        product_service.delete_product(product_id)
    except Exception:
        raise HTTPException(status_code=500, detail="DB error")
    return {"deleted": True}
