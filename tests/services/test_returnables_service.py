from datetime import datetime, timedelta, timezone

from golden_store.models.client import CreditTransaction
from golden_store.services.returnables_service import ReturnablesService


def tx(description, amount=10.0, date=None):
    return CreditTransaction(
        client_id="G001",
        description=description,
        amount=amount,
        date=date or datetime(2024, 1, 10, tzinfo=timezone.utc),
    )


def test_chopine_with_brand():
    result = ReturnablesService.outstanding_returnables([tx("2 Chopine Beer")])

    assert result == {"Chopine Beer": 2}


def test_sized_bouteille_with_brand():
    result = ReturnablesService.outstanding_returnables([tx("3 1.5L Bouteille Green")])

    assert result == {"1.5L Bouteille Green": 3}


def test_several_containers_in_one_description():
    result = ReturnablesService.outstanding_returnables(
        [tx("2 Chopine Beer, 1 1.5L Bouteille Green")]
    )

    assert result == {"Chopine Beer": 2, "1.5L Bouteille Green": 1}


def test_each_container_counted_once():
    result = ReturnablesService.outstanding_returnables([tx("1 chopine, 2 chopines coca")])

    assert result == {"Chopine": 1, "Chopine Coca": 2}


def test_brand_stops_at_hyphen_and_parenthesis():
    result = ReturnablesService.outstanding_returnables(
        [tx("2 bouteille vin - rouge"), tx("1 chopine malta (cold)")]
    )

    assert result == {"Bouteille Vin": 2, "Chopine Malta": 1}


def test_size_without_brand_and_bare_bouteille():
    result = ReturnablesService.outstanding_returnables(
        [tx("4 1l bouteilles"), tx("2 bouteilles")]
    )

    assert result == {"1L Bouteille": 4, "Bouteille": 2}


def test_mention_without_quantity_counts_one():
    result = ReturnablesService.outstanding_returnables([tx("Chopine beer")])

    assert result == {"Chopine Beer": 1}


def test_returned_quantities_are_subtracted():
    result = ReturnablesService.outstanding_returnables([
        tx("3 Chopine Beer"),
        tx("Returned: 2 Chopine Beer - 12/01/2024", amount=0),
    ])

    assert result == {"Chopine Beer": 1}


def test_fully_returned_key_is_omitted():
    result = ReturnablesService.outstanding_returnables([
        tx("2 Chopine Beer"),
        tx("1 1.5L Bouteille Green"),
        tx("Returned: 5 Chopine Beer - 12/01/2024", amount=0),
    ])

    assert result == {"1.5L Bouteille Green": 1}


def test_descriptions_without_containers_are_ignored():
    assert ReturnablesService.outstanding_returnables([tx("Bread and butter")]) == {}


def test_is_return_related():
    assert ReturnablesService.is_return_related("Returned: 1 Chopine", 0)
    assert ReturnablesService.is_return_related("2 bouteille coca", 50)
    assert ReturnablesService.is_return_related("Anything", 0)
    assert not ReturnablesService.is_return_related("Rice 5kg", 120)


def test_overdue_after_21_days():
    now = datetime(2024, 2, 1, tzinfo=timezone.utc)
    old = tx("2 Chopine Beer", date=now - timedelta(days=21))
    recent = tx("2 Chopine Beer", date=now - timedelta(days=3))

    assert ReturnablesService.has_overdue_returnables([old], now=now)
    assert not ReturnablesService.has_overdue_returnables([recent], now=now)


def test_returned_transactions_are_never_overdue():
    now = datetime(2024, 2, 1, tzinfo=timezone.utc)
    returned = tx("Returned: 2 Chopine Beer", amount=0, date=now - timedelta(days=40))

    assert not ReturnablesService.has_overdue_returnables([returned], now=now)


def test_overdue_with_custom_window():
    now = datetime(2024, 2, 1, tzinfo=timezone.utc)
    item = tx("1 bouteille", date=now - timedelta(days=8))

    assert ReturnablesService.has_overdue_returnables([item], now=now, days=7)
