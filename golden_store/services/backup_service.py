"""
Whole-database export and import.

Bundle layout:

    {
      "version": "2.0",
      "appName": "Golden Store",
      "exportDate": "...",
      "priceList": {"items": [...]},
      "creditManagement": {"clients": [...], "transactions": [...], "payments": [...]},
      "overManagement": {"items": [...]},
      "orderManagement": {"categories": [...], "itemTemplates": [...], "orders": [...]}
    }
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import ValidationError

from golden_store.core.config import Settings, settings as default_settings
from golden_store.core.errors import PersistenceError, StoreValidationError
from golden_store.db.backends import PersistenceBackend
from golden_store.db.store import TABLES, DataStore

logger = logging.getLogger(__name__)

INVALID_BUNDLE = "Invalid Golden Store database file format"

# bundle module -> {bundle key: snapshot key}
BUNDLE_MODULES = {
    "priceList": {"items": "priceItems"},
    "creditManagement": {
        "clients": "clients",
        "transactions": "transactions",
        "payments": "payments",
    },
    "overManagement": {"items": "overItems"},
    "orderManagement": {
        "categories": "categories",
        "itemTemplates": "itemTemplates",
        "orders": "orders",
    },
}

MODELS_BY_KEY = {key: model for key, model in TABLES.values()}


class BackupService:
    @staticmethod
    def export_bundle(store: DataStore, settings: Settings = default_settings) -> Dict[str, Any]:
        snapshot = store.snapshot()
        bundle: Dict[str, Any] = {
            "version": settings.EXPORT_VERSION,
            "appName": settings.APP_NAME,
            "exportDate": datetime.now(timezone.utc).isoformat(),
        }
        for module, keys in BUNDLE_MODULES.items():
            bundle[module] = {bundle_key: snapshot[key] for bundle_key, key in keys.items()}
        return bundle

    @staticmethod
    def _bundle_to_snapshot(data: Any) -> Dict[str, list]:
        if not isinstance(data, dict) or not data.get("version"):
            raise StoreValidationError(INVALID_BUNDLE)
        if not any(data.get(module) for module in BUNDLE_MODULES):
            raise StoreValidationError(INVALID_BUNDLE)

        snapshot: Dict[str, list] = {}
        for module, keys in BUNDLE_MODULES.items():
            section = data.get(module)
            if not section:
                continue
            if not isinstance(section, dict):
                raise StoreValidationError(INVALID_BUNDLE)
            for bundle_key, key in keys.items():
                records = section.get(bundle_key)
                if records is None:
                    continue
                if not isinstance(records, list):
                    raise StoreValidationError(f"{module}.{bundle_key} must be a list")
                model = MODELS_BY_KEY[key]
                try:
                    parsed = [model.model_validate(record) for record in records]
                except ValidationError as exc:
                    raise StoreValidationError(
                        f"Invalid record in {module}.{bundle_key}: {exc.errors()[0]['msg']}"
                    ) from exc
                snapshot[key] = [record.to_document() for record in parsed]
        return snapshot

    @staticmethod
    def import_bundle(store: DataStore, data: Any) -> Dict[str, int]:
        """
        Replace the tables present in the bundle and persist.

        Tables the bundle does not carry are left as they are.
        Returns the number of records imported per table.
        """
        snapshot = BackupService._bundle_to_snapshot(data)
        with store.writing():
            counts = store.replace_tables(snapshot)
        logger.info("Imported bundle version %s: %s", data.get("version"), counts)
        return counts

    @staticmethod
    def restore_from_backend(store: DataStore, backend: PersistenceBackend) -> Dict[str, int]:
        """Replace every table with the snapshot held by another backend."""
        snapshot = backend.load()
        if not snapshot:
            raise PersistenceError(f"No data found in the {backend.name} backend")
        with store.writing():
            counts = store.replace_tables(snapshot, only_present=False)
        logger.info("Restored store from %s backend: %s", backend.name, counts)
        return counts
