"""
Order management records.

Invariants:
- is_vat_nil and is_vat_included are never both set
- is_vat_nil forces vat_percentage to 0
- at most one Order per (category_id, order_date day)
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from golden_store.models.base import StoreModel, _utcnow, gen_id


class VatMode(str, Enum):
    STANDARD = "standard"
    NIL = "nil"
    INCLUDED = "included"


def vat_flags(mode: VatMode) -> tuple[bool, bool]:
    """(is_vat_nil, is_vat_included) for a VAT mode."""
    return mode == VatMode.NIL, mode == VatMode.INCLUDED


class OrderCategory(StoreModel):
    id: str = Field(default_factory=gen_id)
    name: str
    vat_percentage: float = Field(default=15.0, ge=0, le=100)
    created_at: datetime = Field(default_factory=_utcnow)


class OrderItemTemplate(StoreModel):
    id: str = Field(default_factory=gen_id)
    category_id: str
    name: str
    unit_price: float = Field(ge=0)
    is_vat_nil: bool = False
    is_vat_included: bool = False
    vat_percentage: float = Field(default=15.0, ge=0, le=100)
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _exclusive_vat_flags(self):
        if self.is_vat_nil and self.is_vat_included:
            raise ValueError("is_vat_nil and is_vat_included are mutually exclusive")
        if self.is_vat_nil:
            self.vat_percentage = 0.0
        return self

    @property
    def vat_mode(self) -> VatMode:
        if self.is_vat_nil:
            return VatMode.NIL
        if self.is_vat_included:
            return VatMode.INCLUDED
        return VatMode.STANDARD


class OrderItem(StoreModel):
    id: str = Field(default_factory=gen_id)
    template_id: str
    quantity: float
    unit_price: float
    is_vat_nil: bool = False
    is_vat_included: bool = False
    vat_percentage: float = 15.0
    vat_amount: float = 0.0
    total_price: float = 0.0
    is_available: bool = True


class Order(StoreModel):
    id: str = Field(default_factory=gen_id)
    category_id: str
    order_date: datetime
    items: List[OrderItem] = Field(default_factory=list)
    total_cost: float = 0.0
    created_at: datetime = Field(default_factory=_utcnow)
    last_edited_at: Optional[datetime] = None

    @field_validator("order_date")
    @classmethod
    def _aware_order_date(cls, value: datetime) -> datetime:
        return value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)
