import logging
from typing import List, Optional

from app.db.supabase import get_client, first_row
from app.models.schemas import DeliveryOption

logger = logging.getLogger(__name__)

TABLE = "delivery_options"

DEFAULT_DELIVERY_OPTIONS = [
    DeliveryOption(id="standard", name="Standard Delivery", description="5-7 business days", price=0, estimated_days=6),
    DeliveryOption(id="express", name="Express Delivery", description="2-3 business days", price=15, estimated_days=3),
    DeliveryOption(id="overnight", name="Overnight Delivery", description="Next business day", price=30, estimated_days=1),
]


def _price(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def get_active_delivery_options() -> List[DeliveryOption]:
    """Active options for checkout; the built-in defaults when the table can't be read."""
    try:
        res = get_client().table(TABLE).select("*").eq("is_active", True).order("display_order").execute()
    except Exception as e:
        logger.error("Error fetching active delivery options: %s", e)
        return list(DEFAULT_DELIVERY_OPTIONS)
    return [
        DeliveryOption(
            id=str(o["id"]),
            name=o["name"],
            description=o.get("description") or "",
            price=_price(o.get("price")),
            estimated_days=o.get("estimated_days") or None,
        )
        for o in res.data or []
    ]


def get_delivery_option(option_id: str) -> Optional[DeliveryOption]:
    """Active option by id, priced from the database; defaults apply when none are configured."""
    options = get_active_delivery_options() or DEFAULT_DELIVERY_OPTIONS
    for option in options:
        if option.id == str(option_id):
            return option
    return None


def get_all_delivery_options() -> List[dict]:
    try:
        res = get_client().table(TABLE).select("*").order("display_order").execute()
    except Exception as e:
        logger.error("Error fetching delivery options: %s", e)
        raise
    return [
        {
            "id": o["id"],
            "name": o["name"],
            "description": o.get("description") or "",
            "price": _price(o.get("price")),
            "estimated_days": o.get("estimated_days") or None,
            "is_active": o.get("is_active") is not False,
            "display_order": o.get("display_order") or 0,
            "created_at": o.get("created_at"),
            "updated_at": o.get("updated_at"),
        }
        for o in res.data or []
    ]


def create_delivery_option(option: dict) -> Optional[dict]:
    row = {
        "name": option["name"],
        "description": option.get("description") or None,
        "price": option.get("price", 0),
        "estimated_days": option.get("estimated_days") or None,
        "is_active": option.get("is_active") is not False,
        "display_order": option.get("display_order") or 0,
    }
    try:
        return first_row(get_client().table(TABLE).insert(row).execute())
    except Exception as e:
        logger.error("Error creating delivery option: %s", e)
        raise


def update_delivery_option(option_id: str, changes: dict) -> Optional[dict]:
    # only fields the caller actually sent; blank text/days become NULL
    row = {}
    for key, value in changes.items():
        if key in ("description", "estimated_days"):
            row[key] = value or None
        else:
            row[key] = value
    try:
        return first_row(get_client().table(TABLE).update(row).eq("id", option_id).execute())
    except Exception as e:
        logger.error("Error updating delivery option %s: %s", option_id, e)
        raise


def delete_delivery_option(option_id: str):
    try:
        get_client().table(TABLE).delete().eq("id", option_id).execute()
    except Exception as e:
        logger.error("Error deleting delivery option %s: %s", option_id, e)
        raise
