import logging
from datetime import datetime
from typing import List, Optional

from app.db.supabase import get_client, log_query_error
from app.utils.timeutil import utcnow, parse_timestamp

logger = logging.getLogger(__name__)


def get_active_flash_deals(now: Optional[datetime] = None) -> List[dict]:
    """Deals that are switched on and have started but not yet ended."""
    stamp = (now or utcnow()).isoformat()
    try:
        res = (get_client().table("flash_deals").select("*")
               .eq("is_active", True).lte("start_time", stamp).gte("end_time", stamp)
               .order("start_time").execute())
        return res.data or []
    except Exception as e:
        log_query_error(logger, "Error fetching flash deals", e)
        return []


def get_flash_deal_products(flash_deal_id: Optional[str] = None) -> List[dict]:
    try:
        query = get_client().table("flash_deal_products").select("*, product:products(*)")
        if flash_deal_id:
            query = query.eq("flash_deal_id", flash_deal_id)
        return query.order("sort_order").execute().data or []
    except Exception as e:
        log_query_error(logger, "Error fetching flash deal products", e)
        return []


def get_flash_deal_products_list(now: Optional[datetime] = None) -> List[dict]:
    """Products flagged as flash deals whose own deal window is open."""
    stamp = (now or utcnow()).isoformat()
    try:
        res = (get_client().table("products").select("*")
               .eq("is_flash_deal", True).lte("flash_deal_start", stamp).gte("flash_deal_end", stamp)
               .order("created_at", desc=True).execute())
        return res.data or []
    except Exception as e:
        log_query_error(logger, "Error fetching flash deal product list", e)
        return []


def get_time_remaining(end_time, now: Optional[datetime] = None) -> dict:
    seconds_left = int((parse_timestamp(end_time) - (now or utcnow())).total_seconds())
    if seconds_left <= 0:
        return {"hours": 0, "minutes": 0, "seconds": 0}
    hours, rest = divmod(seconds_left, 3600)
    minutes, seconds = divmod(rest, 60)
    return {"hours": hours, "minutes": minutes, "seconds": seconds}


def format_time_remaining(end_time, now: Optional[datetime] = None) -> str:
    left = get_time_remaining(end_time, now)
    return f"{left['hours']:02d}:{left['minutes']:02d}:{left['seconds']:02d}"
