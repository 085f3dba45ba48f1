from datetime import datetime, timezone
from typing import List, Optional

from golden_store.core.errors import DuplicateNameError, NotFoundError, StoreValidationError
from golden_store.db.store import DataStore
from golden_store.models.catalog import OverItem
from golden_store.utils.text import title_case


class OverRepository:
    """Repository for the list of items that ran out."""

    def __init__(self, store: DataStore):
        self.store = store

    def _get_or_404(self, item_id: str) -> OverItem:
        item = next((i for i in self.store.over_items if i.id == item_id), None)
        if not item:
            raise NotFoundError("Over item", item_id)
        return item

    def _clean_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        clean = title_case(name or "")
        if not clean:
            raise StoreValidationError("Item name is required")
        for item in self.store.over_items:
            if item.id != exclude_id and not item.is_completed and item.name == clean:
                raise DuplicateNameError(f'"{clean}" is already in the list')
        return clean

    def add_item(self, name: str) -> OverItem:
        with self.store.writing():
            item = OverItem(name=self._clean_name(name))
            self.store.over_items.append(item)
        return item

    def edit_item(self, item_id: str, name: str) -> OverItem:
        with self.store.writing():
            item = self._get_or_404(item_id)
            item.name = self._clean_name(name, exclude_id=item_id)
        return item

    def toggle_item(self, item_id: str) -> OverItem:
        with self.store.writing():
            item = self._get_or_404(item_id)
            item.is_completed = not item.is_completed
            item.completed_at = datetime.now(timezone.utc) if item.is_completed else None
        return item

    def delete_item(self, item_id: str) -> None:
        with self.store.writing():
            self._get_or_404(item_id)
            self.store.over_items = [i for i in self.store.over_items if i.id != item_id]

    def search_items(self, query: str = "") -> List[OverItem]:
        """Matching items, incomplete first, newest first within each group."""
        query = (query or "").strip().lower()
        items = [i for i in self.store.over_items if query in i.name.lower()]
        items.sort(key=lambda i: i.created_at, reverse=True)
        items.sort(key=lambda i: i.is_completed)
        return items
