"""Automatic (non-coupon) discounts stored in the ``discounts`` table.

Evaluation rules, per active discount whose validity window contains now:

* skipped when the cart amount is below ``minimum_amount``
* skipped when ``usage_limit`` is set and ``used_count`` has reached it
* ``percentage``: value% of the amount, capped at ``maximum_discount``
* ``fixed_amount``: value, capped at the amount
* ``free_shipping``: no effect on the item total (applied to delivery)

The per-discount amounts are summed and the sum is clamped to the amount.
"""
import logging
from decimal import Decimal
from datetime import datetime
from typing import Iterable, List, Optional

from postgrest.exceptions import APIError

from app.db.supabase import get_client, first_row, error_code, log_query_error
from app.utils.timeutil import utcnow, within_window

logger = logging.getLogger(__name__)

TABLE = "discounts"


def _money(value) -> Decimal:
    return Decimal(str(value or 0))


def discount_amount_for(discount: dict, amount: Decimal) -> Decimal:
    """Amount a single discount takes off ``amount``, ignoring eligibility."""
    kind = discount.get("type")
    value = _money(discount.get("value"))
    if kind == "percentage":
        off = amount * value / 100
        cap = discount.get("maximum_discount")
        if cap and off > _money(cap):
            off = _money(cap)
        return off
    if kind == "fixed_amount":
        return min(value, amount)
    # free_shipping is settled against the delivery fee at checkout
    return Decimal(0)


def is_eligible(discount: dict, amount: Decimal, now: datetime) -> bool:
    if not discount.get("is_active", True):
        return False
    if not within_window(now, discount.get("valid_from"), discount.get("valid_until")):
        return False
    if amount < _money(discount.get("minimum_amount")):
        return False
    limit = discount.get("usage_limit")
    if limit and int(discount.get("used_count") or 0) >= int(limit):
        return False
    return True


def evaluate_discounts(amount, discounts: Iterable[dict], now: Optional[datetime] = None) -> Decimal:
    """Total discount the given records grant on ``amount``; never more than ``amount``."""
    amount = _money(amount)
    now = now or utcnow()
    total = Decimal(0)
    for discount in discounts:
        if is_eligible(discount, amount, now):
            total += discount_amount_for(discount, amount)
    return min(total, amount)


def _active_query(client, now: datetime):
    stamp = now.isoformat()
    return (
        client.table(TABLE)
        .select("*")
        .eq("is_active", True)
        .or_(f"valid_from.is.null,valid_from.lte.{stamp}")
        .or_(f"valid_until.is.null,valid_until.gte.{stamp}")
    )


def get_discounts() -> List[dict]:
    try:
        res = get_client().table(TABLE).select("*").order("created_at", desc=True).execute()
        return res.data or []
    except Exception as e:
        log_query_error(logger, "Error fetching discounts", e)
        return []


def get_active_discounts(now: Optional[datetime] = None) -> List[dict]:
    try:
        res = _active_query(get_client(), now or utcnow()).order("created_at", desc=True).execute()
        return res.data or []
    except Exception as e:
        log_query_error(logger, "Error fetching active discounts", e)
        return []


def create_discount(payload: dict) -> Optional[dict]:
    try:
        res = get_client().table(TABLE).insert({**payload, "used_count": 0}).execute()
        return first_row(res)
    except Exception as e:
        logger.error("Error creating discount: %s", e)
        return None


def update_discount(discount_id: str, changes: dict) -> Optional[dict]:
    try:
        res = get_client().table(TABLE).update(changes).eq("id", discount_id).execute()
        return first_row(res)
    except Exception as e:
        logger.error("Error updating discount %s: %s", discount_id, e)
        return None


def delete_discount(discount_id: str) -> bool:
    try:
        get_client().table(TABLE).delete().eq("id", discount_id).execute()
        return True
    except Exception as e:
        logger.error("Error deleting discount %s: %s", discount_id, e)
        return False


def increment_usage(discount_id: str) -> bool:
    try:
        client = get_client()
        current = first_row(client.table(TABLE).select("used_count").eq("id", discount_id).maybe_single().execute())
        used = int((current or {}).get("used_count") or 0)
        client.table(TABLE).update({"used_count": used + 1}).eq("id", discount_id).execute()
        return True
    except Exception as e:
        logger.error("Error incrementing usage of discount %s: %s", discount_id, e)
        return False


def calculate_discount(amount, applies_to: str = "all", now: Optional[datetime] = None) -> float:
    """Discount applicable to ``amount``.

    Uses the ``calculate_discount`` database function when it exists and
    evaluates the active discounts locally otherwise. Errors yield 0.
    """
    now = now or utcnow()
    try:
        client = get_client()
        try:
            res = client.rpc("calculate_discount", {"amount": float(amount), "discount_type": applies_to}).execute()
            if res is not None and res.data is not None:
                return float(res.data or 0)
        except APIError as e:
            # PGRST202: function not deployed, which is the common case
            if error_code(e) != "PGRST202":
                logger.debug("RPC calculate_discount failed, evaluating locally: %s", e.message)

        res = _active_query(client, now).in_("applies_to", [applies_to, "all"]).execute()
        discounts = res.data or []
        if not discounts:
            return 0.0
        return float(evaluate_discounts(amount, discounts, now))
    except Exception as e:
        log_query_error(logger, "Error calculating discount", e)
        return 0.0
