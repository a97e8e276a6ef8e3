import logging
from collections import Counter
from typing import List, Optional

from app.db.supabase import get_client, first_row, log_query_error

logger = logging.getLogger(__name__)


def category_thumbnail(category: dict) -> str:
    return category.get("image_url") or category.get("thumbnail_url") or category.get("thumbnail") or ""


def get_categories() -> List[dict]:
    """All categories in display order, with live product counts."""
    try:
        client = get_client()
        categories = client.table("categories").select("*").order("order").execute().data or []
        if not categories:
            return []
        counts = Counter()
        try:
            rows = (client.table("products").select("category_id")
                    .in_("category_id", [c["id"] for c in categories]).execute()).data or []
            counts.update(r["category_id"] for r in rows if r.get("category_id"))
        except Exception as e:
            logger.warning("Error fetching product counts: %s", e)
        return [
            {**c, "product_count": counts.get(c["id"], 0), "thumbnail": category_thumbnail(c)}
            for c in categories
        ]
    except Exception as e:
        log_query_error(logger, "Error fetching categories", e)
        return []


def get_filter_categories() -> List[dict]:
    return [c for c in get_categories() if c["product_count"] > 0]


def get_category_by_slug(slug: str) -> Optional[dict]:
    if not slug or not slug.strip():
        logger.warning("Blank slug passed to get_category_by_slug")
        return None
    try:
        res = get_client().table("categories").select("*").eq("slug", slug.strip()).maybe_single().execute()
    except Exception as e:
        log_query_error(logger, f"Error fetching category {slug}", e)
        return None
    category = first_row(res)
    if not category:
        return None
    return {**category, "thumbnail": category_thumbnail(category)}
