import logging
from typing import List, Optional

from app.models.schemas import CouponValidation
from app.services.backend_api import BackendAPIError, request

logger = logging.getLogger(__name__)


class CouponError(Exception):
    pass


def normalize_code(code: str) -> str:
    return code.strip().upper()


async def validate_coupon(code: str, cart_amount: float = 0, user_id: Optional[str] = None) -> CouponValidation:
    """Ask the backend whether ``code`` applies to a cart; never raises."""
    try:
        result = await request(
            "POST",
            "/api/coupons/validate",
            json={"code": normalize_code(code), "cart_amount": cart_amount, "user_id": user_id or None},
        )
    except BackendAPIError as e:
        logger.error("Error validating coupon %s: %s", code, e.message)
        message = e.message if e.status_code else "Failed to validate coupon. Please try again."
        return CouponValidation(is_valid=False, error_message=message)

    data = result.get("data")
    if result.get("success") and data:
        return CouponValidation(
            is_valid=bool(data.get("is_valid")),
            discount_amount=data.get("discount_amount") or 0,
            error_message=data.get("error_message") or "",
            coupon_id=data.get("coupon_id"),
            coupon_name=data.get("coupon_name"),
            discount_type=data.get("discount_type"),
            applies_to=data.get("applies_to"),
        )
    return CouponValidation(is_valid=False, error_message=result.get("message") or "Invalid coupon code")


async def record_coupon_usage(coupon_id: str, user_id: Optional[str], order_id: str,
                              discount_amount: float, order_total: float) -> bool:
    try:
        result = await request(
            "POST",
            "/api/coupons/record-usage",
            json={
                "coupon_id": coupon_id,
                "user_id": user_id,
                "order_id": order_id,
                "discount_amount": discount_amount,
                "order_total": order_total,
            },
        )
    except BackendAPIError as e:
        logger.error("Failed to record usage of coupon %s: %s", coupon_id, e.message)
        return False
    return bool(result.get("success"))


async def get_all_coupons() -> List[dict]:
    try:
        result = await request("GET", "/api/coupons")
    except BackendAPIError as e:
        logger.error("Error fetching coupons: %s", e.message)
        return []
    return (result.get("data") or []) if result.get("success") else []


async def get_coupon_by_id(coupon_id: str) -> Optional[dict]:
    try:
        result = await request("GET", f"/api/coupons/{coupon_id}")
    except BackendAPIError as e:
        logger.error("Error fetching coupon %s: %s", coupon_id, e.message)
        return None
    return result.get("data") if result.get("success") else None


async def create_coupon(coupon: dict) -> Optional[dict]:
    try:
        result = await request("POST", "/api/coupons", json=coupon)
    except BackendAPIError as e:
        raise CouponError(e.message or "Failed to create coupon") from e
    return result.get("data") if result.get("success") else None


async def update_coupon(coupon_id: str, changes: dict) -> Optional[dict]:
    try:
        result = await request("PATCH", f"/api/coupons/{coupon_id}", json=changes)
    except BackendAPIError as e:
        raise CouponError(e.message or "Failed to update coupon") from e
    return result.get("data") if result.get("success") else None


async def delete_coupon(coupon_id: str) -> bool:
    try:
        result = await request("DELETE", f"/api/coupons/{coupon_id}")
    except BackendAPIError as e:
        logger.error("Error deleting coupon %s: %s", coupon_id, e.message)
        return False
    return bool(result.get("success"))
