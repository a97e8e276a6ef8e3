import logging
from typing import List, Optional

from app.db.supabase import get_client, first_row, log_query_error
from app.services.price_range_service import attach_price_ranges

logger = logging.getLogger(__name__)

RELATED_SELECT = "*, categories:category_id(id, name, slug), brands:brand_id(id, name, slug)"

SORTS = {
    "price_asc": ("price", False),
    "price_desc": ("price", True),
    "newest": ("created_at", True),
    "rating": ("rating", True),
}


def normalize_product(row: dict) -> dict:
    """Flatten joined category/brand rows and fill the display fields."""
    category = row.get("categories") or {}
    brand = row.get("brands") or {}
    product = {k: v for k, v in row.items() if k not in ("categories", "brands")}
    product.update({
        "original_price": row.get("price") or row.get("original_price") or 0,
        "discount_price": row.get("discount_price"),
        "category_name": category.get("name") or row.get("category_name"),
        "category_slug": category.get("slug") or row.get("category_slug"),
        "brand": brand.get("name") or row.get("brand") or row.get("brand_name") or "",
        "brand_name": brand.get("name") or row.get("brand_name"),
        "brand_slug": brand.get("slug") or row.get("brand_slug"),
        "featured": bool(row.get("is_featured")),
        "images": row.get("images") or [],
        "thumbnail": row.get("thumbnail") or "",
        "rating": row.get("rating") or 0,
        "review_count": row.get("review_count") or 0,
    })
    return product


def _filtered_query(select: str, category=None, brand=None, min_price=None, max_price=None,
                    in_stock=None, featured=None, sort_by=None, limit=None, offset=None):
    query = get_client().table("products").select(select)
    if category:
        query = query.eq("category_id", category)
    if brand:
        query = query.eq("brand_id", brand)
    if min_price is not None:
        query = query.gte("price", min_price)
    if max_price is not None:
        query = query.lte("price", max_price)
    if in_stock is not None:
        query = query.eq("in_stock", in_stock)
    if featured is not None:
        query = query.eq("is_featured", featured)
    column, desc = SORTS.get(sort_by, SORTS["newest"])
    query = query.order(column, desc=desc)
    if offset:
        query = query.range(offset, offset + (limit or 10) - 1)
    elif limit:
        query = query.limit(limit)
    return query


def get_products(category: Optional[str] = None, brand: Optional[str] = None,
                 min_price: Optional[float] = None, max_price: Optional[float] = None,
                 in_stock: Optional[bool] = None, featured: Optional[bool] = None,
                 sort_by: Optional[str] = None, limit: Optional[int] = None,
                 offset: Optional[int] = None) -> List[dict]:
    filters = dict(category=category, brand=brand, min_price=min_price, max_price=max_price,
                   in_stock=in_stock, featured=featured, sort_by=sort_by, limit=limit, offset=offset)
    try:
        try:
            rows = _filtered_query(RELATED_SELECT, **filters).execute().data or []
        except Exception as e:
            # joins fail when the foreign keys are named differently; retry flat
            logger.warning("Product query with relations failed, retrying without: %s", e)
            rows = _filtered_query("*", **filters).execute().data or []
        return attach_price_ranges([normalize_product(r) for r in rows])
    except Exception as e:
        log_query_error(logger, "Error fetching products", e)
        return []


def get_product_by_slug(slug: str) -> Optional[dict]:
    try:
        client = get_client()
        try:
            row = first_row(client.table("products").select(RELATED_SELECT).eq("slug", slug).maybe_single().execute())
        except Exception as e:
            logger.warning("Product %s query with relations failed, retrying without: %s", slug, e)
            row = first_row(client.table("products").select("*").eq("slug", slug).maybe_single().execute())
            if row and row.get("category_id"):
                row["categories"] = first_row(client.table("categories").select("id, name, slug")
                                              .eq("id", row["category_id"]).maybe_single().execute())
    except Exception as e:
        log_query_error(logger, f"Error fetching product {slug}", e)
        return None
    if not row:
        return None
    product = normalize_product(row)
    product.setdefault("variants", [])
    return attach_price_ranges([product])[0]


def get_featured_products(limit: int = 8) -> List[dict]:
    try:
        res = (get_client().table("products").select(RELATED_SELECT)
               .eq("is_featured", True).eq("in_stock", True).limit(limit).execute())
        return [normalize_product(r) for r in res.data or []]
    except Exception as e:
        log_query_error(logger, "Error fetching featured products", e)
        return []


def get_similar_products(product_id: str, category_id: str, limit: int = 4) -> List[dict]:
    try:
        res = (get_client().table("products").select(RELATED_SELECT)
               .eq("category_id", category_id).neq("id", product_id).eq("in_stock", True)
               .limit(limit).execute())
        return [normalize_product(r) for r in res.data or []]
    except Exception as e:
        log_query_error(logger, "Error fetching similar products", e)
        return []


def search_products(term: str, limit: int = 20) -> List[dict]:
    # commas and parens would break the PostgREST or() filter
    term = "".join(ch for ch in term if ch not in ",()").strip()
    if not term:
        return []
    try:
        res = (get_client().table("products").select(RELATED_SELECT)
               .or_(f"name.ilike.%{term}%,description.ilike.%{term}%")
               .eq("in_stock", True).limit(limit).execute())
        return [normalize_product(r) for r in res.data or []]
    except Exception as e:
        log_query_error(logger, "Error searching products", e)
        return []


def delete_product(product_id: str):
    """Admin delete; errors propagate."""
    try:
        get_client().table("products").delete().eq("id", product_id).execute()
    except Exception as e:
        logger.error("Error deleting product %s: %s", product_id, e)
        raise
