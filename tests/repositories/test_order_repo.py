from datetime import datetime, timedelta, timezone

import pytest

from golden_store.core.errors import (
    DuplicateNameError,
    DuplicateOrderError,
    ErrorKind,
    NotFoundError,
    StoreValidationError,
)
from golden_store.models.order import VatMode
from golden_store.schemas.order import OrderLineIn


@pytest.fixture
def category(orders):
    return orders.add_category("drinks")


@pytest.fixture
def templates(orders, category):
    return {
        "beer": orders.add_item_template(category.id, "beer", 100),
        "water": orders.add_item_template(category.id, "water", 20, vat_mode=VatMode.NIL),
        "juice": orders.add_item_template(category.id, "juice", 50, vat_mode=VatMode.INCLUDED),
    }


def jan(day, hour=9):
    return datetime(2024, 1, day, hour, tzinfo=timezone.utc)


def test_add_category_defaults(orders):
    category = orders.add_category("  fresh  produce ")

    assert category.name == "Fresh Produce"
    assert category.vat_percentage == 15


def test_add_category_rejects_duplicate_and_bad_vat(orders):
    orders.add_category("Drinks")

    with pytest.raises(DuplicateNameError):
        orders.add_category("DRINKS")
    with pytest.raises(StoreValidationError):
        orders.add_category("Snacks", vat_percentage=120)


def test_template_inherits_category_vat(orders):
    category = orders.add_category("Imports", vat_percentage=10)

    template = orders.add_item_template(category.id, "cheese", 80)

    assert template.vat_percentage == 10
    assert template.vat_mode == VatMode.STANDARD


def test_template_name_unique_within_category(orders, category, templates):
    other = orders.add_category("Snacks")

    with pytest.raises(DuplicateNameError):
        orders.add_item_template(category.id, "BEER", 90)
    assert orders.add_item_template(other.id, "beer", 90).name == "Beer"


def test_nil_template_forces_zero_vat(templates):
    water = templates["water"]

    assert water.is_vat_nil is True
    assert water.is_vat_included is False
    assert water.vat_percentage == 0


def test_update_template_switches_vat_mode(orders, templates):
    water = orders.update_item_template(templates["water"].id, vat_mode=VatMode.INCLUDED)

    assert water.is_vat_nil is False
    assert water.is_vat_included is True
    assert water.vat_percentage == 15

    beer = orders.update_item_template(templates["beer"].id, vat_mode=VatMode.NIL)
    assert beer.is_vat_nil is True
    assert beer.vat_percentage == 0


def test_add_order_prices_lines(orders, category, templates):
    order = orders.add_order(category.id, jan(10), [
        OrderLineIn(template_id=templates["beer"].id, quantity=2),
        OrderLineIn(template_id=templates["water"].id, quantity=5),
        OrderLineIn(template_id=templates["juice"].id, quantity=1, is_available=False),
    ])

    beer, water, juice = order.items
    assert beer.vat_amount == pytest.approx(30)
    assert beer.total_price == pytest.approx(230)
    assert water.vat_amount == 0
    assert water.total_price == 100
    assert juice.total_price == 50
    assert order.total_cost == pytest.approx(330)


def test_duplicate_order_same_day(orders, category, templates):
    lines = [OrderLineIn(template_id=templates["beer"].id, quantity=1)]
    orders.add_order(category.id, jan(10, hour=8), lines)

    with pytest.raises(DuplicateOrderError) as exc_info:
        orders.add_order(category.id, jan(10, hour=18), lines)

    assert exc_info.value.kind == ErrorKind.DUPLICATE_ORDER
    assert exc_info.value.message == 'An order for "Drinks" already exists for 10 Jan 2024'
    assert exc_info.value.category_name == "Drinks"
    # Another day is fine
    assert orders.add_order(category.id, jan(11), lines).total_cost == pytest.approx(115)


def test_duplicate_order_compares_utc_day(orders, category, templates):
    lines = [OrderLineIn(template_id=templates["beer"].id, quantity=1)]
    # 22:00 at UTC-5 is 03:00 UTC on the 11th
    first = orders.add_order(
        category.id, datetime(2024, 1, 10, 22, tzinfo=timezone(timedelta(hours=-5))), lines
    )
    assert first.order_date == datetime(2024, 1, 11, 3, tzinfo=timezone.utc)

    with pytest.raises(DuplicateOrderError):
        orders.add_order(category.id, datetime(2024, 1, 11, 1, tzinfo=timezone.utc), lines)


def test_add_order_rejects_zero_total(orders, category, templates):
    with pytest.raises(StoreValidationError):
        orders.add_order(category.id, jan(10), [
            OrderLineIn(template_id=templates["beer"].id, quantity=1, is_available=False),
        ])
    assert orders.get_orders_by_category(category.id) == []


def test_add_order_rejects_foreign_template(orders, category, templates):
    other = orders.add_category("Snacks")

    with pytest.raises(StoreValidationError):
        orders.add_order(other.id, jan(10), [OrderLineIn(template_id=templates["beer"].id, quantity=1)])


def test_add_order_unknown_category(orders):
    with pytest.raises(NotFoundError):
        orders.add_order("missing", jan(10), [])


def test_update_order_skips_duplicate_check(orders, category, templates):
    lines = [OrderLineIn(template_id=templates["beer"].id, quantity=1)]
    orders.add_order(category.id, jan(10), lines)
    second = orders.add_order(category.id, jan(11), lines)

    updated = orders.update_order(second.id, jan(10), [
        OrderLineIn(template_id=templates["beer"].id, quantity=3),
    ])

    assert updated.total_cost == pytest.approx(345)
    assert updated.last_edited_at is not None
    assert updated.order_date.day == 10


def test_set_item_availability_retotals(orders, category, templates):
    order = orders.add_order(category.id, jan(10), [
        OrderLineIn(template_id=templates["beer"].id, quantity=1),
        OrderLineIn(template_id=templates["water"].id, quantity=1),
    ])

    updated = orders.set_item_availability(order.id, order.items[0].id, False)

    assert updated.total_cost == 20
    assert len(updated.items) == 2


def test_delete_template_strips_lines_and_retotals(orders, category, templates):
    order = orders.add_order(category.id, jan(10), [
        OrderLineIn(template_id=templates["beer"].id, quantity=1),
        OrderLineIn(template_id=templates["water"].id, quantity=2),
    ])

    orders.delete_item_template(templates["beer"].id)

    stored = orders.get_order(order.id)
    assert [i.template_id for i in stored.items] == [templates["water"].id]
    assert stored.total_cost == 40


def test_delete_category_cascades(orders, category, templates):
    orders.add_order(category.id, jan(10), [OrderLineIn(template_id=templates["beer"].id, quantity=1)])
    other = orders.add_category("Snacks")
    orders.add_item_template(other.id, "chips", 10)

    orders.delete_category(category.id)

    assert [c.id for c in orders.list_categories()] == [other.id]
    assert all(t.category_id == other.id for t in orders.store.item_templates)
    assert orders.store.orders == []


def test_orders_listed_newest_first(orders, category, templates):
    lines = [OrderLineIn(template_id=templates["beer"].id, quantity=1)]
    for day in (3, 12, 7):
        orders.add_order(category.id, jan(day), lines)

    assert [o.order_date.day for o in orders.get_orders_by_category(category.id)] == [12, 7, 3]


def test_search_categories(orders):
    orders.add_category("Drinks")
    orders.add_category("Dry Goods")
    orders.add_category("Snacks")

    assert [c.name for c in orders.search_categories("dr")] == ["Drinks", "Dry Goods"]
