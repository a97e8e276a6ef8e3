"""Min/max selling price of products whose variant options carry price modifiers."""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List

from app.db.supabase import get_client
from app.models.schemas import PriceRange

logger = logging.getLogger(__name__)


def base_price(product: dict) -> float:
    return float(product.get("discount_price") or product.get("original_price") or 0)


def flat_range(product: dict) -> PriceRange:
    price = base_price(product)
    return PriceRange(min=price, max=price, has_range=False)


def range_from_modifiers(price: float, modifiers_per_attribute: Iterable[List[float]]) -> PriceRange:
    low = high = 0.0
    for modifiers in modifiers_per_attribute:
        if modifiers:
            low += min(modifiers)
            high += max(modifiers)
    return PriceRange(min=price + low, max=price + high, has_range=(low != high and high != 0))


def calculate_price_ranges(products: List[dict]) -> Dict[str, PriceRange]:
    """Price range per product id; products without variants get their base price."""
    if not products:
        return {}
    ranges = {p["id"]: flat_range(p) for p in products}
    try:
        client = get_client()
        mappings = (client.table("product_attribute_mappings").select("product_id, attribute_id")
                    .in_("product_id", list(ranges)).execute()).data or []
        if not mappings:
            return ranges
        attribute_ids = sorted({m["attribute_id"] for m in mappings})
        options = (client.table("product_attribute_options").select("attribute_id, price_modifier")
                   .in_("attribute_id", attribute_ids).eq("is_available", True).execute()).data or []
        if not options:
            return ranges
    except Exception as e:
        logger.error("Error calculating price ranges: %s", e)
        return ranges

    modifiers = defaultdict(list)
    for opt in options:
        modifiers[opt["attribute_id"]].append(float(opt.get("price_modifier") or 0))
    attributes = defaultdict(list)
    for m in mappings:
        attributes[m["product_id"]].append(m["attribute_id"])

    for product in products:
        attrs = attributes.get(product["id"])
        if attrs:
            ranges[product["id"]] = range_from_modifiers(base_price(product), (modifiers[a] for a in attrs))
    return ranges


def attach_price_ranges(products: List[dict]) -> List[dict]:
    ranges = calculate_price_ranges(products)
    for product in products:
        product["price_range"] = (ranges.get(product["id"]) or flat_range(product)).model_dump()
    return products
