from fastapi import APIRouter
from typing import Optional

from app.services import flash_deal_service

router = APIRouter()


@router.get("/")
def active_flash_deals():
    deals = flash_deal_service.get_active_flash_deals()
    for deal in deals:
        deal["time_remaining"] = flash_deal_service.format_time_remaining(deal["end_time"])
    return deals


@router.get("/products")
def flash_deal_products(flash_deal_id: Optional[str] = None):
    return flash_deal_service.get_flash_deal_products(flash_deal_id)


@router.get("/product-list")
def flash_deal_product_list():
    return flash_deal_service.get_flash_deal_products_list()
