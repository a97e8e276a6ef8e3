from datetime import timedelta
from decimal import Decimal

from app.services import discount_service
from app.services.discount_service import evaluate_discounts, calculate_discount
from tests.conftest import NOW

YESTERDAY = (NOW - timedelta(days=1)).isoformat()
TOMORROW = (NOW + timedelta(days=1)).isoformat()


def discount(**overrides):
    base = {
        "id": "d1",
        "name": "Launch",
        "type": "percentage",
        "value": 10,
        "minimum_amount": 0,
        "maximum_discount": None,
        "is_active": True,
        "valid_from": YESTERDAY,
        "valid_until": TOMORROW,
        "usage_limit": None,
        "used_count": 0,
        "applies_to": "all",
    }
    base.update(overrides)
    return base


def test_below_minimum_amount_gives_nothing():
    assert evaluate_discounts(99, [discount(minimum_amount=100)], NOW) == 0


def test_percentage_is_capped_by_maximum_discount():
    d = discount(value=50, maximum_discount=30)
    assert evaluate_discounts(200, [d], NOW) == Decimal("30")
    assert evaluate_discounts(40, [d], NOW) == Decimal("20")


def test_fixed_amount_never_exceeds_cart():
    assert evaluate_discounts(25, [discount(type="fixed_amount", value=40)], NOW) == Decimal("25")


def test_free_shipping_does_not_touch_item_total():
    assert evaluate_discounts(100, [discount(type="free_shipping", value=15)], NOW) == 0


def test_sum_is_clamped_to_cart_amount():
    stack = [
        discount(id="a", type="fixed_amount", value=60),
        discount(id="b", type="percentage", value=80),
    ]
    assert evaluate_discounts(100, stack, NOW) == Decimal("100")


def test_exhausted_usage_limit_is_skipped():
    assert evaluate_discounts(100, [discount(usage_limit=5, used_count=5)], NOW) == 0
    assert evaluate_discounts(100, [discount(usage_limit=5, used_count=4)], NOW) == Decimal("10")


def test_window_outside_now_is_skipped():
    expired = discount(valid_from=(NOW - timedelta(days=3)).isoformat(), valid_until=YESTERDAY)
    upcoming = discount(valid_from=TOMORROW, valid_until=None)
    assert evaluate_discounts(100, [expired, upcoming], NOW) == 0


def test_active_discounts_exclude_expired_and_future(db):
    db.tables["discounts"] = [
        discount(id="live"),
        discount(id="open-ended", valid_until=None),
        discount(id="expired", valid_from=(NOW - timedelta(days=5)).isoformat(), valid_until=YESTERDAY),
        discount(id="future", valid_from=TOMORROW),
        discount(id="off", is_active=False),
    ]
    ids = {d["id"] for d in discount_service.get_active_discounts(NOW)}
    assert ids == {"live", "open-ended"}


def test_calculate_discount_prefers_rpc(db):
    db.functions["calculate_discount"] = lambda amount, discount_type: 12.5
    db.tables["discounts"] = [discount(value=50)]
    assert calculate_discount(100, now=NOW) == 12.5
    assert db.count("discounts") == 0


def test_calculate_discount_falls_back_to_table(db):
    db.tables["discounts"] = [
        discount(id="all", value=10),
        discount(id="ship", type="fixed_amount", value=5, applies_to="shipping"),
        discount(id="products", type="fixed_amount", value=7, applies_to="products"),
    ]
    assert calculate_discount(200, "products", now=NOW) == 27.0
    assert calculate_discount(200, now=NOW) == 20.0


def test_calculate_discount_degrades_to_zero_when_table_missing(db):
    db.missing_table("discounts")
    assert calculate_discount(100, now=NOW) == 0


def test_create_and_increment_usage(db):
    created = discount_service.create_discount({"name": "Promo", "type": "fixed_amount", "value": 5})
    assert created["used_count"] == 0
    assert discount_service.increment_usage(created["id"])
    assert discount_service.increment_usage(created["id"])
    assert db.tables["discounts"][0]["used_count"] == 2


def test_admin_operations_degrade_on_errors(db):
    db.missing_table("discounts")
    assert discount_service.get_discounts() == []
    assert discount_service.update_discount("x", {"value": 1}) is None
    assert discount_service.delete_discount("x") is False


def test_discount_without_start_date_is_active(db):
    db.tables["discounts"] = [discount(id="no-start", valid_from=None, valid_until=None, value=5)]
    assert [d["id"] for d in discount_service.get_active_discounts(NOW)] == ["no-start"]
    assert calculate_discount(100, now=NOW) == 5.0
