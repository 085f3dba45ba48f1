"""
Order line pricing.

One function prices every line in the application: template previews, new
order lines, edited lines and the quick-add calculator.

Rules:
- subtotal = quantity * unit_price
- VAT included or VAT nil: no VAT on top, total = subtotal
- otherwise VAT = subtotal * vat_percentage / 100, total = subtotal + VAT
- an unavailable line prices to zero for aggregation
"""

from typing import Iterable, NamedTuple, Optional

from golden_store.core.errors import StoreValidationError
from golden_store.models.order import OrderItem, OrderItemTemplate
from golden_store.utils.text import is_finite_number


class LinePrice(NamedTuple):
    subtotal: float
    vat_amount: float
    total_price: float


class PricingService:
    @staticmethod
    def price_line(
        quantity: float,
        unit_price: float,
        is_vat_nil: bool,
        is_vat_included: bool,
        vat_percentage: float,
        is_available: bool = True,
    ) -> LinePrice:
        subtotal = quantity * unit_price
        if not is_available:
            return LinePrice(subtotal, 0.0, 0.0)

        if is_vat_included or is_vat_nil:
            vat_amount = 0.0
        else:
            vat_amount = subtotal * vat_percentage / 100
        return LinePrice(subtotal, vat_amount, subtotal + vat_amount)

    @staticmethod
    def order_total(items: Iterable[OrderItem]) -> float:
        """Sum of total_price over available lines only."""
        return sum(item.total_price for item in items if item.is_available)

    @staticmethod
    def build_line(
        template: OrderItemTemplate,
        quantity: float,
        is_available: bool = True,
        line_id: Optional[str] = None,
    ) -> OrderItem:
        """
        Price a line from its template.

        Stored vat_amount/total_price are computed as though the line is
        available; availability only matters to order_total.
        """
        if not is_finite_number(quantity) or quantity <= 0:
            raise StoreValidationError(f"Quantity for '{template.name}' must be a positive number")

        price = PricingService.price_line(
            quantity,
            template.unit_price,
            template.is_vat_nil,
            template.is_vat_included,
            template.vat_percentage,
        )
        fields = dict(
            template_id=template.id,
            quantity=quantity,
            unit_price=template.unit_price,
            is_vat_nil=template.is_vat_nil,
            is_vat_included=template.is_vat_included,
            vat_percentage=template.vat_percentage,
            vat_amount=price.vat_amount,
            total_price=price.total_price,
            is_available=is_available,
        )
        if line_id:
            fields["id"] = line_id
        return OrderItem(**fields)

