from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from golden_store.models.base import StoreModel, _utcnow, gen_id


class SortOption(str, Enum):
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    DATE_ASC = "date-asc"
    DATE_DESC = "date-desc"


class PriceItem(StoreModel):
    """A price list entry: selling price plus the gross (cost) price."""
    id: str = Field(default_factory=gen_id)
    name: str
    price: float
    gross_price: float = 0.0
    created_at: datetime = Field(default_factory=_utcnow)
    last_edited_at: Optional[datetime] = None


class OverItem(StoreModel):
    """An item that ran out and has to be bought again."""
    id: str = Field(default_factory=gen_id)
    name: str
    created_at: datetime = Field(default_factory=_utcnow)
    is_completed: bool = False
    completed_at: Optional[datetime] = None
