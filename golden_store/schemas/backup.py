from typing import Dict

from golden_store.schemas.base import CamelModel


class ImportResult(CamelModel):
    """Records imported per table, keyed like the store snapshot."""
    imported: Dict[str, int]

