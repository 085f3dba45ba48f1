"""
Persistence backends for the data store.

A backend loads and saves a whole snapshot: a dict mapping table keys
(``clients``, ``transactions``, ``itemTemplates``...) to lists of records.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Set, Type

import requests
from pydantic import ValidationError

from golden_store.core.config import Settings
from golden_store.core.errors import PersistenceError
from golden_store.models.base import StoreModel
from golden_store.models.catalog import OverItem, PriceItem
from golden_store.models.client import Client, CreditTransaction, PaymentRecord
from golden_store.models.order import Order, OrderCategory, OrderItemTemplate

logger = logging.getLogger(__name__)

Snapshot = Dict[str, List[Dict[str, Any]]]

# snapshot key -> (remote table, record model)
REMOTE_TABLES: Dict[str, tuple[str, Type[StoreModel]]] = {
    "priceItems": ("price_items", PriceItem),
    "clients": ("clients", Client),
    "transactions": ("credit_transactions", CreditTransaction),
    "payments": ("payment_records", PaymentRecord),
    "overItems": ("over_items", OverItem),
    "categories": ("order_categories", OrderCategory),
    "itemTemplates": ("order_item_templates", OrderItemTemplate),
    "orders": ("orders", Order),
}
ORDER_ITEMS_TABLE = "order_items"
# ids per DELETE request, keeps the query string short
DELETE_BATCH_SIZE = 100


class PersistenceBackend(Protocol):
    name: str

    def load(self) -> Optional[Snapshot]:
        ...

    def save(self, snapshot: Snapshot) -> None:
        ...


class JsonFileBackend:
    """Snapshot in a single JSON file, written atomically."""

    name = "file"

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def load(self) -> Optional[Snapshot]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError:
            # Keep the broken file aside and start from an empty store
            corrupt = self.path.with_suffix(".corrupt.json")
            try:
                shutil.copy2(self.path, corrupt)
            except OSError as exc:
                raise PersistenceError(f"Cannot back up corrupt data file {self.path}: {exc}") from exc
            logger.error("Data file %s is not valid JSON, moved to %s", self.path, corrupt)
            return None
        except OSError as exc:
            raise PersistenceError(f"Cannot read data file {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            logger.error("Data file %s does not hold a snapshot object, ignoring it", self.path)
            return None
        return data

    def save(self, snapshot: Snapshot) -> None:
        dump = json.dumps(snapshot, ensure_ascii=False, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.path.exists() and self.path.read_text(encoding="utf-8") == dump:
                return
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        except OSError as exc:
            raise PersistenceError(f"Cannot write data file {self.path}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(dump)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise PersistenceError(f"Cannot write data file {self.path}: {exc}") from exc


class RemoteTableBackend:
    """
    Snapshot mirrored to a PostgREST-style table store.

    Rows use the snake_case field names (``total_debt``, ``template_id``...);
    load turns them back into camelCase documents. Save upserts every row and
    then deletes only the ids that were in the remote table and are gone from
    the snapshot. Order lines live in their own table keyed by ``order_id``.
    No retries: a failed call raises PersistenceError.
    """

    name = "remote"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise PersistenceError("REMOTE_URL is not configured")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["apikey"] = api_key
            self.headers["Authorization"] = f"Bearer {api_key}"
        # table -> ids last seen in the remote table
        self._remote_ids: Dict[str, Set[str]] = {}

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _request(self, method: str, table: str, **kwargs) -> requests.Response:
        headers = {**self.headers, **kwargs.pop("headers", {})}
        try:
            resp = self.session.request(
                method, self._url(table), headers=headers, timeout=self.timeout, **kwargs
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise PersistenceError(f"Remote {method} {table} failed: {exc}") from exc
        return resp

    def _select(self, table: str, columns: str = "*") -> List[Dict[str, Any]]:
        rows = self._request("GET", table, params={"select": columns}).json()
        if not isinstance(rows, list):
            raise PersistenceError(f"Remote table {table} returned an unexpected payload")
        return rows

    @staticmethod
    def _to_document(model: Type[StoreModel], row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return model.model_validate(row).to_document()
        except ValidationError:
            # Left as is; the store skips it with a warning
            return row

    def load(self) -> Optional[Snapshot]:
        lines_by_order: Dict[str, List[Dict[str, Any]]] = {}
        line_rows = self._select(ORDER_ITEMS_TABLE)
        for line in line_rows:
            lines_by_order.setdefault(line.get("order_id"), []).append(line)
        self._remote_ids[ORDER_ITEMS_TABLE] = {row.get("id") for row in line_rows}

        snapshot: Snapshot = {}
        for key, (table, model) in REMOTE_TABLES.items():
            rows = self._select(table)
            self._remote_ids[table] = {row.get("id") for row in rows}
            if key == "orders":
                rows = [{**row, "items": lines_by_order.get(row.get("id"), [])} for row in rows]
            snapshot[key] = [self._to_document(model, row) for row in rows]

        if not any(snapshot.values()):
            return None
        return snapshot

    def _known_ids(self, table: str) -> Set[str]:
        if table not in self._remote_ids:
            self._remote_ids[table] = {row.get("id") for row in self._select(table, "id")}
        return self._remote_ids[table]

    def _replace_rows(self, table: str, rows: List[Dict[str, Any]]) -> None:
        if rows:
            self._request(
                "POST", table, json=rows,
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            )
        current = {row["id"] for row in rows}
        stale = sorted(self._known_ids(table) - current)
        for start in range(0, len(stale), DELETE_BATCH_SIZE):
            ids = ",".join(f'"{row_id}"' for row_id in stale[start:start + DELETE_BATCH_SIZE])
            self._request("DELETE", table, params={"id": f"in.({ids})"})
        self._remote_ids[table] = current

    def save(self, snapshot: Snapshot) -> None:
        order_lines: List[Dict[str, Any]] = []
        for key, (table, model) in REMOTE_TABLES.items():
            rows = []
            for record in snapshot.get(key, []):
                row = model.model_validate(record).to_row()
                if key == "orders":
                    for line in row.pop("items", []):
                        order_lines.append({**line, "order_id": row["id"]})
                rows.append(row)
            self._replace_rows(table, rows)
        self._replace_rows(ORDER_ITEMS_TABLE, order_lines)


class MirroredBackend:
    """
    Local file as the authoritative copy, remote store as a mirror.

    Reads prefer the remote and fall back to the local file when it fails;
    writes go to the local file first and only warn when the remote fails.
    """

    name = "mirrored"

    def __init__(self, local: JsonFileBackend, remote: RemoteTableBackend):
        self.local = local
        self.remote = remote

    def load(self) -> Optional[Snapshot]:
        try:
            snapshot = self.remote.load()
        except PersistenceError as exc:
            logger.warning("Remote load failed, using local data: %s", exc)
            return self.local.load()
        if snapshot is None:
            return self.local.load()
        self.local.save(snapshot)
        return snapshot

    def save(self, snapshot: Snapshot) -> None:
        self.local.save(snapshot)
        try:
            self.remote.save(snapshot)
        except PersistenceError as exc:
            logger.warning("Remote save failed, local copy kept: %s", exc)


def build_backend(settings: Settings) -> PersistenceBackend:
    """Pick the persistence backend named by STORAGE_BACKEND."""
    if settings.STORAGE_BACKEND == "file":
        return JsonFileBackend(settings.DATA_FILE)

    remote = RemoteTableBackend(
        settings.REMOTE_URL,
        api_key=settings.REMOTE_API_KEY,
        timeout=settings.REMOTE_TIMEOUT_SECONDS,
    )
    if settings.STORAGE_BACKEND == "remote":
        return remote
    return MirroredBackend(JsonFileBackend(settings.DATA_FILE), remote)
