from datetime import date, timedelta

from app.services import (
    category_service, delivery_options_service, flash_deal_service, pre_order_service,
    price_range_service, product_service,
)
from tests.conftest import NOW


def test_categories_get_counts_and_thumbnail_fallback(db):
    db.tables["categories"] = [
        {"id": "c2", "name": "Audio", "slug": "audio", "order": 2, "thumbnail_url": "audio.png"},
        {"id": "c1", "name": "Phones", "slug": "phones", "order": 1, "image_url": "phones.png", "thumbnail": "old.png"},
        {"id": "c3", "name": "Empty", "slug": "empty", "order": 3},
    ]
    db.tables["products"] = [{"id": "p1", "category_id": "c1"}, {"id": "p2", "category_id": "c1"},
                             {"id": "p3", "category_id": "c2"}]

    categories = category_service.get_categories()
    assert [(c["id"], c["product_count"], c["thumbnail"]) for c in categories] == [
        ("c1", 2, "phones.png"), ("c2", 1, "audio.png"), ("c3", 0, ""),
    ]
    assert [c["id"] for c in category_service.get_filter_categories()] == ["c1", "c2"]


def test_category_by_slug(db):
    db.tables["categories"] = [{"id": "c1", "slug": "phones", "thumbnail": "t.png"}]
    assert category_service.get_category_by_slug(" phones ")["thumbnail"] == "t.png"
    assert category_service.get_category_by_slug("nope") is None
    assert category_service.get_category_by_slug("  ") is None
    db.missing_table("categories")
    assert category_service.get_categories() == []


def test_price_range_from_variant_modifiers(db):
    db.tables["product_attribute_mappings"] = [
        {"product_id": "p1", "attribute_id": "storage"},
        {"product_id": "p1", "attribute_id": "color"},
    ]
    db.tables["product_attribute_options"] = [
        {"attribute_id": "storage", "price_modifier": 0, "is_available": True},
        {"attribute_id": "storage", "price_modifier": 300, "is_available": True},
        {"attribute_id": "storage", "price_modifier": 900, "is_available": False},
        {"attribute_id": "color", "price_modifier": 0, "is_available": True},
        {"attribute_id": "color", "price_modifier": 50, "is_available": True},
    ]
    ranges = price_range_service.calculate_price_ranges([
        {"id": "p1", "original_price": 1000, "discount_price": 900},
        {"id": "p2", "original_price": 200},
    ])
    assert ranges["p1"].model_dump() == {"min": 900, "max": 1250, "has_range": True}
    assert ranges["p2"].model_dump() == {"min": 200, "max": 200, "has_range": False}


def test_products_are_filtered_sorted_and_flattened(db):
    db.tables["products"] = [
        {"id": "p1", "name": "Cheap", "price": 10, "in_stock": True, "created_at": "2026-01-01T00:00:00+00:00",
         "categories": {"name": "Phones", "slug": "phones"}},
        {"id": "p2", "name": "Mid", "price": 50, "in_stock": True, "created_at": "2026-01-02T00:00:00+00:00"},
        {"id": "p3", "name": "Dear", "price": 90, "in_stock": False, "is_featured": True,
         "created_at": "2026-01-03T00:00:00+00:00"},
    ]
    products = product_service.get_products(min_price=10, max_price=60, sort_by="price_desc")
    assert [p["id"] for p in products] == ["p2", "p1"]
    cheap = products[1]
    assert cheap["original_price"] == 10 and cheap["category_name"] == "Phones"
    assert cheap["price_range"] == {"min": 10, "max": 10, "has_range": False}

    assert [p["id"] for p in product_service.get_products(limit=1)] == ["p3"]
    assert [p["id"] for p in product_service.search_products("mi")] == ["p2"]
    assert product_service.get_product_by_slug("missing") is None


def test_pre_order_helpers(db):
    air = pre_order_service.get_pre_order_shipping_option("air_cargo")
    ship = pre_order_service.get_pre_order_shipping_option("ship_cargo")
    assert pre_order_service.format_estimated_delivery(air) == "1 to 2 weeks"
    assert pre_order_service.format_estimated_delivery(ship) == "4 to 8 weeks"
    assert pre_order_service.format_estimated_delivery(air.model_copy(update={"estimated_weeks_max": 1})) == "1 week"
    arrival = pre_order_service.calculate_estimated_arrival(air, today=date(2026, 1, 1))
    assert arrival == {"date": "2026-01-15", "formatted": "January 15, 2026"}
    assert pre_order_service.get_pre_order_shipping_option("rocket") is None

    db.tables["products"] = [{"id": "p1", "price": 500, "is_pre_order": True, "created_at": "2026-01-01"},
                             {"id": "p2", "price": 100, "is_pre_order": False, "created_at": "2026-01-01"}]
    products = pre_order_service.get_pre_order_products()
    assert [p["id"] for p in products] == ["p1"]
    assert products[0]["pre_order_available"] is True


def test_active_flash_deals_respect_window(db):
    db.tables["flash_deals"] = [
        {"id": "live", "is_active": True, "start_time": (NOW - timedelta(hours=1)).isoformat(),
         "end_time": (NOW + timedelta(hours=1)).isoformat()},
        {"id": "ended", "is_active": True, "start_time": (NOW - timedelta(hours=3)).isoformat(),
         "end_time": (NOW - timedelta(hours=2)).isoformat()},
        {"id": "later", "is_active": True, "start_time": (NOW + timedelta(hours=2)).isoformat(),
         "end_time": (NOW + timedelta(hours=3)).isoformat()},
        {"id": "off", "is_active": False, "start_time": (NOW - timedelta(hours=1)).isoformat(),
         "end_time": (NOW + timedelta(hours=1)).isoformat()},
    ]
    assert [d["id"] for d in flash_deal_service.get_active_flash_deals(NOW)] == ["live"]

    db.missing_table("flash_deals")
    assert flash_deal_service.get_active_flash_deals(NOW) == []


def test_flash_deal_time_remaining():
    end = (NOW + timedelta(hours=5, minutes=3, seconds=9)).isoformat()
    assert flash_deal_service.format_time_remaining(end, NOW) == "05:03:09"
    assert flash_deal_service.get_time_remaining(NOW - timedelta(seconds=1), NOW) == {"hours": 0, "minutes": 0, "seconds": 0}


def test_delivery_options_fall_back_to_defaults(db):
    db.tables["delivery_options"] = [
        {"id": 2, "name": "Pickup", "price": "0", "is_active": True, "display_order": 2},
        {"id": 1, "name": "Courier", "price": "25.50", "is_active": True, "display_order": 1, "estimated_days": 2},
        {"id": 3, "name": "Retired", "price": "5", "is_active": False, "display_order": 0},
    ]
    options = delivery_options_service.get_active_delivery_options()
    assert [(o.id, o.price) for o in options] == [("1", 25.5), ("2", 0.0)]

    db.missing_table("delivery_options")
    assert [o.id for o in delivery_options_service.get_active_delivery_options()] == ["standard", "express", "overnight"]


def test_delivery_option_admin_writes(db):
    created = delivery_options_service.create_delivery_option({"name": "Same day", "price": 40, "description": ""})
    assert created["description"] is None and created["is_active"] is True
    updated = delivery_options_service.update_delivery_option(created["id"], {"price": 35, "estimated_days": 0})
    assert updated["price"] == 35 and updated["estimated_days"] is None
    delivery_options_service.delete_delivery_option(created["id"])
    assert db.tables["delivery_options"] == []
