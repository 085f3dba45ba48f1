from typing import List, Optional

from golden_store.models.catalog import PriceItem
from golden_store.schemas.base import CamelModel


class PriceItemCreate(CamelModel):
    name: str
    price: float
    gross_price: Optional[float] = None


class PriceItemUpdate(CamelModel):
    name: Optional[str] = None
    price: Optional[float] = None
    gross_price: Optional[float] = None


class PriceItemImport(CamelModel):
    items: List[PriceItem]


class OverItemCreate(CamelModel):
    name: str


class OverItemUpdate(CamelModel):
    name: str
