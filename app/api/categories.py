from fastapi import APIRouter, HTTPException

from app.services import category_service

router = APIRouter()


@router.get("/")
def list_categories(with_products: bool = False):
    if with_products:
        return category_service.get_filter_categories()
    return category_service.get_categories()


@router.get("/{slug}")
def get_category(slug: str):
    category = category_service.get_category_by_slug(slug)
    if not category:
        raise HTTPException(status_code=404, detail="Not found")
    return category
