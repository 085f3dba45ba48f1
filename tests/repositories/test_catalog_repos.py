from datetime import datetime, timedelta, timezone

import pytest

from golden_store.core.errors import DuplicateNameError, NotFoundError, StoreValidationError
from golden_store.models.catalog import PriceItem, SortOption
from golden_store.repositories.over_repo import OverRepository
from golden_store.repositories.price_list_repo import PriceListRepository


@pytest.fixture
def price_list(store):
    return PriceListRepository(store)


@pytest.fixture
def over(store):
    return OverRepository(store)


def test_add_price_item_keeps_user_casing(price_list):
    item = price_list.add_item("coca  colA 1.5L", 75)

    assert item.name == "Coca ColA 1.5L"
    assert item.gross_price == 0


@pytest.mark.parametrize("price", [0, -5, float("nan")])
def test_add_price_item_rejects_bad_price(price_list, price):
    with pytest.raises(StoreValidationError):
        price_list.add_item("Rice", price)


def test_update_price_item_only_stamps_real_changes(price_list):
    item = price_list.add_item("Rice", 50, gross_price=40)

    unchanged = price_list.update_item(item.id, name="Rice", price=50)
    assert unchanged.last_edited_at is None

    changed = price_list.update_item(item.id, price=55)
    assert changed.price == 55
    assert changed.gross_price == 40
    assert changed.last_edited_at is not None


def test_price_list_sorting(price_list):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    price_list.import_items([
        PriceItem(id="a", name="Oil", price=120, created_at=base),
        PriceItem(id="b", name="bread", price=30, created_at=base + timedelta(days=2)),
        PriceItem(id="c", name="Milk", price=45, created_at=base + timedelta(days=1)),
    ])

    assert [i.id for i in price_list.search_items()] == ["b", "c", "a"]
    assert [i.id for i in price_list.search_items(sort=SortOption.NAME_ASC)] == ["b", "c", "a"]
    assert [i.id for i in price_list.search_items(sort=SortOption.PRICE_DESC)] == ["a", "c", "b"]
    assert [i.id for i in price_list.search_items(sort=SortOption.DATE_ASC)] == ["a", "c", "b"]
    assert [i.id for i in price_list.search_items("il", SortOption.NAME_DESC)] == ["a", "c"]


def test_import_merges_by_id(price_list):
    price_list.import_items([PriceItem(id="a", name="Oil", price=120)])
    price_list.add_item("Rice", 50)

    count = price_list.import_items([PriceItem(id="a", name="Oil", price=130)])

    assert count == 1
    assert len(price_list.search_items()) == 2
    assert price_list.get_item("a").price == 130


def test_delete_price_item(price_list):
    item = price_list.add_item("Rice", 50)

    price_list.delete_item(item.id)

    with pytest.raises(NotFoundError):
        price_list.get_item(item.id)


def test_over_duplicates_only_among_incomplete(over):
    item = over.add_item("sugar")

    with pytest.raises(DuplicateNameError):
        over.add_item("SUGAR")

    over.toggle_item(item.id)
    assert over.add_item("sugar").name == "Sugar"


def test_over_toggle_sets_and_clears_completed_at(over):
    item = over.add_item("Flour")

    done = over.toggle_item(item.id)
    assert done.is_completed is True
    assert done.completed_at is not None

    undone = over.toggle_item(item.id)
    assert undone.is_completed is False
    assert undone.completed_at is None


def test_over_search_incomplete_first(over):
    first = over.add_item("Salt")
    second = over.add_item("Sugar")
    third = over.add_item("Soap")
    over.toggle_item(third.id)

    assert [i.id for i in over.search_items()][-1] == third.id
    assert {i.id for i in over.search_items()[:2]} == {first.id, second.id}
    assert [i.id for i in over.search_items("su")] == [second.id]


def test_over_edit_and_delete(over):
    item = over.add_item("salt")

    assert over.edit_item(item.id, "sea salt").name == "Sea Salt"
    over.delete_item(item.id)
    assert over.search_items() == []
