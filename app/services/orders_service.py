import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from app.core.config import TAX_RATE, FREE_DELIVERY_THRESHOLD
from app.db.supabase import get_client, first_row, log_query_error
from app.models.schemas import CartItem, CheckoutData, OrderCreated, ORDER_STATUSES, PAYMENT_STATUSES
from app.services.backend_api import BackendAPIError, request
from app.services.coupon_service import record_coupon_usage, validate_coupon
from app.services.delivery_options_service import get_delivery_option
from app.services.discount_service import calculate_discount
from app.utils.timeutil import utcnow

logger = logging.getLogger(__name__)

ORDER_SELECT = "*, items:order_items(*)"


class OrderCreationError(Exception):
    pass


class CheckoutError(ValueError):
    """The checkout cannot be priced (unknown delivery option, rejected coupon)."""


@dataclass
class OrderTotals:
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal


def resolve_delivery_fee(subtotal, option_price, threshold=FREE_DELIVERY_THRESHOLD) -> Decimal:
    """Delivery option price, or 0 once the subtotal reaches the free-delivery threshold."""
    threshold = Decimal(str(threshold or 0))
    if threshold > 0 and Decimal(str(subtotal)) >= threshold:
        return Decimal(0)
    return Decimal(str(option_price or 0))


def compute_order_totals(items: Iterable[CartItem], delivery_fee, discount=0, tax_rate=TAX_RATE) -> OrderTotals:
    subtotal = Decimal(0)
    for it in items:
        subtotal += Decimal(str(it.subtotal))
    delivery = Decimal(str(delivery_fee or 0))
    tax = subtotal * Decimal(str(tax_rate or 0))
    discount = min(Decimal(str(discount or 0)), subtotal)
    total = subtotal + delivery + tax - discount
    return OrderTotals(subtotal=subtotal, delivery_fee=delivery, tax=tax, discount=discount, total=total)


def next_order_sequence() -> int:
    """Order sequence from the database, or the last 3 digits of the clock as a fallback."""
    try:
        res = get_client().rpc("next_order_sequence", {}).execute()
        if res is not None and res.data is not None:
            return int(res.data)
    except Exception as e:
        log_query_error(logger, "next_order_sequence unavailable", e)
    # not coordinated across processes: two orders in the same millisecond window collide
    logger.warning("Using clock-derived order sequence; order numbers are not collision-safe")
    return int(str(int(time.time() * 1000))[-3:])


def generate_order_number(now: Optional[datetime] = None, sequence: Optional[int] = None) -> str:
    """``ORD-`` + 3-digit sequence + ``DDMMYY``, e.g. ``ORD-042041125``."""
    now = now or utcnow()
    if sequence is None:
        sequence = next_order_sequence()
    return f"ORD-{sequence:03d}{now:%d%m%y}"


def order_item_payload(item: CartItem) -> dict:
    return {
        "product_id": item.id,
        "product_name": item.name,
        "product_image": item.thumbnail,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "subtotal": item.subtotal,
        "selected_variants": item.selected_variants,
    }


def _insert_order_direct(checkout: CheckoutData, user_id: Optional[str], order_number: str,
                         totals: OrderTotals, items: List[dict]) -> dict:
    client = get_client()
    try:
        res = client.table("orders").insert({
            "user_id": user_id,
            "order_number": order_number,
            "status": "pending",
            "subtotal": float(totals.subtotal),
            "discount": float(totals.discount),
            "shipping_fee": float(totals.delivery_fee),
            "tax": float(totals.tax),
            "total": float(totals.total),
            "payment_method": checkout.payment_method,
            "payment_status": "pending",
            "payment_reference": checkout.payment_reference,
            "shipping_address": checkout.delivery_address,
            "notes": checkout.notes,
        }).execute()
    except Exception as e:
        logger.error("Database order creation failed for %s: %s", order_number, e)
        raise OrderCreationError(getattr(e, "message", None) or "Failed to create order") from e
    order = first_row(res)
    if not order:
        raise OrderCreationError("Failed to create order")

    rows = []
    for it in items:
        row = {k: v for k, v in it.items() if k != "subtotal"}
        row["order_id"] = order["id"]
        row["total_price"] = it["subtotal"]
        rows.append(row)
    try:
        client.table("order_items").insert(rows).execute()
    except Exception as e:
        logger.error("Database order items creation failed for %s: %s", order_number, e)
        # no order without its items
        try:
            client.table("orders").delete().eq("id", order["id"]).execute()
        except Exception as cleanup_error:
            logger.error("Could not remove order %s after failed items insert: %s", order_number, cleanup_error)
        raise OrderCreationError(getattr(e, "message", None) or "Failed to create order items") from e
    return order


async def _checkout_discount(checkout: CheckoutData, subtotal: Decimal, user_id: Optional[str],
                             now: datetime) -> Tuple[Decimal, Optional[str]]:
    """Discount and coupon id for a checkout, decided here rather than by the client."""
    if checkout.coupon_code or checkout.coupon_id:
        if not checkout.coupon_code:
            raise CheckoutError("A coupon code is required to apply a coupon")
        validation = await validate_coupon(checkout.coupon_code, float(subtotal), user_id)
        if not validation.is_valid:
            raise CheckoutError(validation.error_message or "Invalid coupon code")
        return Decimal(str(validation.discount_amount or 0)), validation.coupon_id or checkout.coupon_id
    amount = await run_in_threadpool(calculate_discount, float(subtotal), "all", now)
    return Decimal(str(amount)), None


def _api_order(data, order_number: str) -> dict:
    """Order record from an accepted backend answer, whatever shape ``data`` came in."""
    if isinstance(data, list) and data and isinstance(data[0], dict):
        data = data[0]
    if isinstance(data, dict):
        return data
    logger.error("Backend accepted order %s but returned unexpected data: %r", order_number, data)
    return {"order_number": order_number}


async def create_order(checkout: CheckoutData, user_id: Optional[str] = None,
                       now: Optional[datetime] = None) -> OrderCreated:
    """Create an order through the backend API, writing it to the database directly if that fails.

    Guest checkout passes ``user_id=None``. The delivery fee comes from the
    stored delivery option and the discount from the coupon (validated by the
    backend) or the active automatic discounts. The direct path cannot trigger
    the backend's confirmation emails and notifications; the result says so.
    """
    now = now or utcnow()
    subtotal = sum(Decimal(str(it.subtotal)) for it in checkout.items)
    option = await run_in_threadpool(get_delivery_option, checkout.delivery_option.id)
    if option is None:
        raise CheckoutError(f"Unknown delivery option: {checkout.delivery_option.id}")
    discount, coupon_id = await _checkout_discount(checkout, subtotal, user_id, now)
    delivery_fee = resolve_delivery_fee(subtotal, option.price)
    totals = compute_order_totals(checkout.items, delivery_fee, discount=discount)
    sequence = await run_in_threadpool(next_order_sequence)
    order_number = generate_order_number(now, sequence)
    items = [order_item_payload(it) for it in checkout.items]

    body = {
        "user_id": user_id,
        "order_number": order_number,
        "subtotal": float(totals.subtotal),
        "discount": float(totals.discount),
        "tax": float(totals.tax),
        "delivery_fee": float(totals.delivery_fee),
        "total": float(totals.total),
        "payment_method": checkout.payment_method,
        "delivery_address": checkout.delivery_address,
        "delivery_option": option.model_dump(),
        "notes": checkout.notes or None,
        "payment_reference": checkout.payment_reference or None,
        "coupon_id": coupon_id,
        "order_items": items,
    }

    accepted = None
    try:
        result = await request("POST", "/api/orders", json=body)
    except BackendAPIError as e:
        logger.warning("Backend order API failed for %s (%s); writing to database", order_number, e.message)
    else:
        if result.get("success") and result.get("data"):
            accepted = _api_order(result["data"], order_number)
        else:
            logger.warning("Backend rejected order %s (%s); writing to database",
                           order_number, result.get("message") or "no data")

    if accepted is not None:
        created = OrderCreated(order=accepted, source="api")
    else:
        order = await run_in_threadpool(_insert_order_direct, checkout, user_id, order_number, totals, items)
        logger.warning("Order %s created directly: confirmation email and notifications were not sent",
                       order_number)
        created = OrderCreated(order=order, source="direct", side_effects_skipped=True)

    if coupon_id and created.order.get("id"):
        await record_coupon_usage(coupon_id, user_id, created.order["id"],
                                  float(totals.discount), float(totals.total))
    return created


def get_user_orders(user_id: str) -> List[dict]:
    try:
        res = (get_client().table("orders").select(ORDER_SELECT)
               .eq("user_id", user_id).order("created_at", desc=True).execute())
        return res.data or []
    except Exception as e:
        log_query_error(logger, f"Error fetching orders of user {user_id}", e)
        return []


def _get_order_by(column: str, value: str) -> Optional[dict]:
    try:
        res = get_client().table("orders").select(ORDER_SELECT).eq(column, value).maybe_single().execute()
        return first_row(res)
    except Exception as e:
        log_query_error(logger, f"Error fetching order {column}={value}", e)
        return None


def get_order_by_id(order_id: str) -> Optional[dict]:
    return _get_order_by("id", order_id)


def get_order_by_number(order_number: str) -> Optional[dict]:
    return _get_order_by("order_number", order_number)


def _update_order(order_id: str, changes: dict) -> Optional[dict]:
    try:
        res = get_client().table("orders").update(changes).eq("id", order_id).execute()
        return first_row(res)
    except Exception as e:
        log_query_error(logger, f"Error updating order {order_id}", e)
        return None


def update_order_status(order_id: str, status: str) -> Optional[dict]:
    if status not in ORDER_STATUSES:
        raise ValueError(f"Unknown order status: {status}")
    return _update_order(order_id, {"status": status})


def update_payment_status(order_id: str, payment_status: str, reference: Optional[str] = None) -> Optional[dict]:
    if payment_status not in PAYMENT_STATUSES:
        raise ValueError(f"Unknown payment status: {payment_status}")
    changes = {"payment_status": payment_status}
    if reference:
        changes["payment_reference"] = reference
    return _update_order(order_id, changes)


def cancel_order(order_id: str) -> Optional[dict]:
    return _update_order(order_id, {"status": "cancelled"})


def get_all_orders(page: int = 1, limit: int = 20) -> dict:
    start = (page - 1) * limit
    end = start + limit - 1
    try:
        res = (get_client().table("orders")
               .select("*, items:order_items(*), user:users(full_name, email)", count="exact")
               .order("created_at", desc=True).range(start, end).execute())
        orders, total = res.data or [], res.count or 0
    except Exception as e:
        log_query_error(logger, "Error fetching all orders", e)
        orders, total = [], 0
    return {
        "orders": orders,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit) if limit else 0,
        },
    }
