import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from golden_store.core.errors import NotFoundError, StoreValidationError
from golden_store.db.store import DataStore
from golden_store.models.catalog import PriceItem, SortOption
from golden_store.utils.text import capitalize_words, is_finite_number

logger = logging.getLogger(__name__)

SORT_KEYS = {
    SortOption.NAME_ASC: (lambda i: i.name.lower(), False),
    SortOption.NAME_DESC: (lambda i: i.name.lower(), True),
    SortOption.PRICE_ASC: (lambda i: i.price, False),
    SortOption.PRICE_DESC: (lambda i: i.price, True),
    SortOption.DATE_ASC: (lambda i: i.created_at, False),
    SortOption.DATE_DESC: (lambda i: i.created_at, True),
}


def _check_price(price: float) -> float:
    if not is_finite_number(price) or price <= 0:
        raise StoreValidationError("Valid price is required")
    return float(price)


def _check_gross_price(gross_price: Optional[float]) -> float:
    if gross_price is None:
        return 0.0
    if not is_finite_number(gross_price) or gross_price < 0:
        raise StoreValidationError("Gross price must be a non-negative number")
    return float(gross_price)


def _clean_name(name: str) -> str:
    clean = capitalize_words(name or "")
    if not clean:
        raise StoreValidationError("Item name is required")
    return clean


class PriceListRepository:
    """Repository for the shop price list."""

    def __init__(self, store: DataStore):
        self.store = store

    def _get_or_404(self, item_id: str) -> PriceItem:
        item = next((i for i in self.store.price_items if i.id == item_id), None)
        if not item:
            raise NotFoundError("Price item", item_id)
        return item

    def add_item(self, name: str, price: float, gross_price: Optional[float] = None) -> PriceItem:
        item = PriceItem(
            name=_clean_name(name),
            price=_check_price(price),
            gross_price=_check_gross_price(gross_price),
        )
        with self.store.writing():
            self.store.price_items.append(item)
        return item

    def update_item(
        self,
        item_id: str,
        name: Optional[str] = None,
        price: Optional[float] = None,
        gross_price: Optional[float] = None,
    ) -> PriceItem:
        """Update an item; last_edited_at only moves when something changed."""
        with self.store.writing():
            item = self._get_or_404(item_id)
            changes = {}
            if name is not None:
                changes["name"] = _clean_name(name)
            if price is not None:
                changes["price"] = _check_price(price)
            if gross_price is not None:
                changes["gross_price"] = _check_gross_price(gross_price)

            changed = {k: v for k, v in changes.items() if getattr(item, k) != v}
            for field, value in changed.items():
                setattr(item, field, value)
            if changed:
                item.last_edited_at = datetime.now(timezone.utc)
        return item

    def delete_item(self, item_id: str) -> None:
        with self.store.writing():
            self._get_or_404(item_id)
            self.store.price_items = [i for i in self.store.price_items if i.id != item_id]

    def import_items(self, items: Iterable[PriceItem]) -> int:
        """Merge items by id; an imported item replaces the stored one."""
        incoming = list(items)
        for item in incoming:
            _check_price(item.price)
            _check_gross_price(item.gross_price)

        with self.store.writing():
            by_id = {i.id: i for i in self.store.price_items}
            for item in incoming:
                by_id[item.id] = item
            self.store.price_items = list(by_id.values())
        logger.info("Imported %d price items", len(incoming))
        return len(incoming)

    def get_item(self, item_id: str) -> PriceItem:
        return self._get_or_404(item_id)

    def list_items(self, sort: SortOption = SortOption.DATE_DESC) -> List[PriceItem]:
        key, reverse = SORT_KEYS[SortOption(sort)]
        return sorted(self.store.price_items, key=key, reverse=reverse)

    def search_items(self, query: str = "", sort: SortOption = SortOption.DATE_DESC) -> List[PriceItem]:
        items = self.list_items(sort)
        query = (query or "").strip().lower()
        if not query:
            return items
        return [i for i in items if query in i.name.lower()]
