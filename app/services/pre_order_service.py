import logging
from datetime import date, timedelta
from typing import List, Optional

from app.db.supabase import get_client, log_query_error
from app.models.schemas import PreOrderShippingOption
from app.services.price_range_service import attach_price_ranges
from app.services.product_service import RELATED_SELECT, normalize_product

logger = logging.getLogger(__name__)

PRE_ORDER_SHIPPING_OPTIONS = [
    PreOrderShippingOption(
        id="air_cargo",
        name="Air Cargo",
        description="Fast delivery via air freight",
        price=400,
        estimated_days_min=5,
        estimated_days_max=14,
        estimated_weeks_min=1,
        estimated_weeks_max=2,
    ),
    PreOrderShippingOption(
        id="ship_cargo",
        name="Ship Cargo",
        description="Economical delivery via sea freight",
        price=200,
        estimated_days_min=30,
        estimated_days_max=60,
        estimated_weeks_min=4,
        estimated_weeks_max=8,
    ),
]


def get_pre_order_shipping_option(option_id: str) -> Optional[PreOrderShippingOption]:
    for option in PRE_ORDER_SHIPPING_OPTIONS:
        if option.id == option_id:
            return option
    return None


def calculate_estimated_arrival(option: PreOrderShippingOption, today: Optional[date] = None) -> dict:
    """Latest expected arrival: today plus the option's maximum transit days."""
    arrival = (today or date.today()) + timedelta(days=option.estimated_days_max)
    return {"date": arrival.isoformat(), "formatted": f"{arrival:%B} {arrival.day}, {arrival.year}"}


def format_estimated_delivery(option: PreOrderShippingOption) -> str:
    if option.estimated_weeks_min == option.estimated_weeks_max:
        weeks = option.estimated_weeks_min
        return f"{weeks} week{'s' if weeks > 1 else ''}"
    return f"{option.estimated_weeks_min} to {option.estimated_weeks_max} weeks"


def get_pre_order_products() -> List[dict]:
    try:
        res = (get_client().table("products").select(RELATED_SELECT)
               .eq("is_pre_order", True).order("created_at", desc=True).execute())
    except Exception as e:
        log_query_error(logger, "Error fetching pre-order products", e)
        return []
    products = []
    for row in res.data or []:
        product = normalize_product(row)
        product["is_pre_order"] = True
        product["pre_order_available"] = row.get("pre_order_available", True) is not False
        products.append(product)
    return attach_price_ranges(products)
