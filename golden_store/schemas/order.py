from datetime import datetime
from typing import List, Optional

from pydantic import Field

from golden_store.models.order import Order, OrderCategory, OrderItemTemplate, VatMode
from golden_store.schemas.base import CamelModel


class CategoryCreate(CamelModel):
    name: str
    vat_percentage: Optional[float] = Field(default=None, ge=0, le=100)


class CategoryUpdate(CamelModel):
    name: Optional[str] = None
    vat_percentage: Optional[float] = Field(default=None, ge=0, le=100)


class ItemTemplateCreate(CamelModel):
    name: str
    unit_price: float = Field(ge=0)
    vat_mode: VatMode = VatMode.STANDARD
    vat_percentage: Optional[float] = Field(default=None, ge=0, le=100)


class ItemTemplateUpdate(CamelModel):
    name: Optional[str] = None
    unit_price: Optional[float] = Field(default=None, ge=0)
    vat_mode: Optional[VatMode] = None
    vat_percentage: Optional[float] = Field(default=None, ge=0, le=100)


class OrderLineIn(CamelModel):
    """One line of an order as entered: a template and a quantity."""
    template_id: str
    quantity: float
    is_available: bool = True
    id: Optional[str] = None


class OrderCreate(CamelModel):
    category_id: str
    order_date: datetime
    items: List[OrderLineIn]


class OrderUpdate(CamelModel):
    order_date: datetime
    items: List[OrderLineIn]


class AvailabilityUpdate(CamelModel):
    is_available: bool


class LinePriceRequest(CamelModel):
    """Quick-add calculator input."""
    quantity: float
    unit_price: float
    vat_mode: VatMode = VatMode.STANDARD
    vat_percentage: float = Field(default=15.0, ge=0, le=100)
    is_available: bool = True


class LinePriceResponse(CamelModel):
    subtotal: float
    vat_amount: float
    total_price: float


class CategoryDetail(CamelModel):
    category: OrderCategory
    item_templates: List[OrderItemTemplate]
    orders: List[Order]
