import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Type

from pydantic import ValidationError

from golden_store.core.errors import PersistenceError
from golden_store.db.backends import PersistenceBackend, Snapshot
from golden_store.models.base import StoreModel
from golden_store.models.catalog import OverItem, PriceItem
from golden_store.models.client import Client, CreditTransaction, PaymentRecord
from golden_store.models.order import Order, OrderCategory, OrderItemTemplate

logger = logging.getLogger(__name__)

# attribute -> (snapshot key, record model)
TABLES: Dict[str, tuple[str, Type[StoreModel]]] = {
    "clients": ("clients", Client),
    "transactions": ("transactions", CreditTransaction),
    "payments": ("payments", PaymentRecord),
    "categories": ("categories", OrderCategory),
    "item_templates": ("itemTemplates", OrderItemTemplate),
    "orders": ("orders", Order),
    "price_items": ("priceItems", PriceItem),
    "over_items": ("overItems", OverItem),
}


class DataStore:
    """
    In-memory tables plus the backend they are persisted through.

    Mutations run inside ``writing()``: the block holds the store lock and a
    snapshot is saved when the outermost block exits normally. A failed save
    raises PersistenceError; the in-memory change is kept.
    """

    def __init__(self, backend: PersistenceBackend, default_vat_percentage: float = 15.0):
        self.backend = backend
        self.default_vat_percentage = default_vat_percentage
        self.clients: List[Client] = []
        self.transactions: List[CreditTransaction] = []
        self.payments: List[PaymentRecord] = []
        self.categories: List[OrderCategory] = []
        self.item_templates: List[OrderItemTemplate] = []
        self.orders: List[Order] = []
        self.price_items: List[PriceItem] = []
        self.over_items: List[OverItem] = []
        self._lock = threading.RLock()
        self._depth = 0

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def load(self) -> None:
        """Replace every table with the backend's snapshot (empty when none)."""
        snapshot = self.backend.load()
        with self._lock:
            self.replace_tables(snapshot or {}, only_present=False)
        logger.info(
            "Loaded store from %s backend: %d clients, %d orders, %d price items",
            self.backend.name, len(self.clients), len(self.orders), len(self.price_items),
        )

    def replace_tables(self, snapshot: Dict[str, Any], only_present: bool = True) -> Dict[str, int]:
        """
        Parse snapshot records into the tables.

        With only_present, tables whose key is absent are left untouched.
        Records that fail validation are skipped with a warning.
        Returns the number of records kept per snapshot key.
        """
        counts: Dict[str, int] = {}
        with self._lock:
            for attr, (key, model) in TABLES.items():
                if key not in snapshot:
                    if not only_present:
                        setattr(self, attr, [])
                    continue
                records = []
                for raw in snapshot.get(key) or []:
                    try:
                        records.append(model.model_validate(raw))
                    except ValidationError as exc:
                        logger.warning("Skipping invalid %s record: %s", key, exc.errors()[0]["msg"])
                setattr(self, attr, records)
                counts[key] = len(records)
        return counts

    def snapshot(self) -> Snapshot:
        with self._lock:
            return {
                key: [record.to_document() for record in getattr(self, attr)]
                for attr, (key, _) in TABLES.items()
            }

    def save(self) -> None:
        snapshot = self.snapshot()
        try:
            self.backend.save(snapshot)
        except PersistenceError as exc:
            logger.error("Saving store through %s backend failed: %s", self.backend.name, exc)
            raise
        logger.debug("Store saved through %s backend", self.backend.name)

    @contextmanager
    def writing(self) -> Iterator["DataStore"]:
        with self._lock:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            if self._depth == 0:
                self.save()

    def next_recency_rank(self) -> int:
        return max((c.recency_rank for c in self.clients), default=0) + 1

    # Lookups shared by the repositories

    def find_client(self, client_id: str) -> Optional[Client]:
        return next((c for c in self.clients if c.id == client_id), None)

    def find_category(self, category_id: str) -> Optional[OrderCategory]:
        return next((c for c in self.categories if c.id == category_id), None)

    def find_template(self, template_id: str) -> Optional[OrderItemTemplate]:
        return next((t for t in self.item_templates if t.id == template_id), None)

    def find_order(self, order_id: str) -> Optional[Order]:
        return next((o for o in self.orders if o.id == order_id), None)
