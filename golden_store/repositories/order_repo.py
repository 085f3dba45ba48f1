"""
OrderRepository - order categories, item templates and orders.

Cascades:
- deleting a category deletes its templates and orders
- deleting a template strips its lines from every order and re-totals them
"""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

from golden_store.core.errors import (
    DuplicateNameError,
    DuplicateOrderError,
    NotFoundError,
    StoreValidationError,
)
from golden_store.db.store import DataStore
from golden_store.models.order import (
    Order,
    OrderCategory,
    OrderItem,
    OrderItemTemplate,
    VatMode,
    vat_flags,
)
from golden_store.schemas.order import OrderLineIn
from golden_store.services.pricing_service import PricingService
from golden_store.utils.text import is_finite_number, title_case

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if isinstance(value, datetime):
        return value.astimezone(timezone.utc) if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    raise StoreValidationError("Order date is required")


def _check_vat_percentage(value: float) -> float:
    if not is_finite_number(value) or not 0 <= value <= 100:
        raise StoreValidationError("VAT percentage must be between 0 and 100")
    return float(value)


class OrderRepository:
    """Repository for categories, item templates and orders."""

    def __init__(self, store: DataStore):
        self.store = store

    # Categories

    def _category_or_404(self, category_id: str) -> OrderCategory:
        category = self.store.find_category(category_id)
        if not category:
            raise NotFoundError("Category", category_id)
        return category

    def _clean_category_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        clean = title_case(name or "")
        if not clean:
            raise StoreValidationError("Category name is required")
        for category in self.store.categories:
            if category.id != exclude_id and category.name.lower() == clean.lower():
                raise DuplicateNameError(f'Category "{clean}" already exists')
        return clean

    def add_category(self, name: str, vat_percentage: Optional[float] = None) -> OrderCategory:
        if vat_percentage is None:
            vat_percentage = self.store.default_vat_percentage
        vat_percentage = _check_vat_percentage(vat_percentage)

        with self.store.writing():
            category = OrderCategory(
                name=self._clean_category_name(name),
                vat_percentage=vat_percentage,
            )
            self.store.categories.append(category)
        logger.info("Added order category %s", category.name)
        return category

    def update_category(
        self,
        category_id: str,
        name: Optional[str] = None,
        vat_percentage: Optional[float] = None,
    ) -> OrderCategory:
        with self.store.writing():
            category = self._category_or_404(category_id)
            if name is not None:
                category.name = self._clean_category_name(name, exclude_id=category_id)
            if vat_percentage is not None:
                category.vat_percentage = _check_vat_percentage(vat_percentage)
        return category

    def delete_category(self, category_id: str) -> None:
        with self.store.writing():
            self._category_or_404(category_id)
            self.store.categories = [c for c in self.store.categories if c.id != category_id]
            self.store.item_templates = [
                t for t in self.store.item_templates if t.category_id != category_id
            ]
            self.store.orders = [o for o in self.store.orders if o.category_id != category_id]
        logger.info("Deleted category %s with its templates and orders", category_id)

    def get_category(self, category_id: str) -> OrderCategory:
        return self._category_or_404(category_id)

    def list_categories(self) -> List[OrderCategory]:
        return list(self.store.categories)

    def search_categories(self, query: str) -> List[OrderCategory]:
        query = (query or "").strip().lower()
        if not query:
            return self.list_categories()
        return [c for c in self.store.categories if query in c.name.lower()]

    # Item templates

    def _template_or_404(self, template_id: str) -> OrderItemTemplate:
        template = self.store.find_template(template_id)
        if not template:
            raise NotFoundError("Item template", template_id)
        return template

    def _clean_template_name(self, category_id: str, name: str, exclude_id: Optional[str] = None) -> str:
        clean = title_case(name or "")
        if not clean:
            raise StoreValidationError("Item name is required")
        for template in self.store.item_templates:
            if (
                template.category_id == category_id
                and template.id != exclude_id
                and template.name.lower() == clean.lower()
            ):
                raise DuplicateNameError(f'Item "{clean}" already exists in this category')
        return clean

    @staticmethod
    def _check_unit_price(unit_price: float) -> float:
        if not is_finite_number(unit_price) or unit_price < 0:
            raise StoreValidationError("Unit price must be a non-negative number")
        return float(unit_price)

    def add_item_template(
        self,
        category_id: str,
        name: str,
        unit_price: float,
        vat_mode: VatMode = VatMode.STANDARD,
        vat_percentage: Optional[float] = None,
    ) -> OrderItemTemplate:
        unit_price = self._check_unit_price(unit_price)

        with self.store.writing():
            category = self._category_or_404(category_id)
            if vat_percentage is None:
                vat_percentage = category.vat_percentage
            is_vat_nil, is_vat_included = vat_flags(VatMode(vat_mode))
            template = OrderItemTemplate(
                category_id=category_id,
                name=self._clean_template_name(category_id, name),
                unit_price=unit_price,
                is_vat_nil=is_vat_nil,
                is_vat_included=is_vat_included,
                vat_percentage=_check_vat_percentage(vat_percentage),
            )
            self.store.item_templates.append(template)
        return template

    def update_item_template(
        self,
        template_id: str,
        name: Optional[str] = None,
        unit_price: Optional[float] = None,
        vat_mode: Optional[VatMode] = None,
        vat_percentage: Optional[float] = None,
    ) -> OrderItemTemplate:
        """Update a template; choosing a VAT mode clears the other flag."""
        with self.store.writing():
            template = self._template_or_404(template_id)
            changes = {}
            if name is not None:
                changes["name"] = self._clean_template_name(template.category_id, name, exclude_id=template_id)
            if unit_price is not None:
                changes["unit_price"] = self._check_unit_price(unit_price)
            if vat_mode is not None:
                changes["is_vat_nil"], changes["is_vat_included"] = vat_flags(VatMode(vat_mode))
                if template.is_vat_nil and vat_mode != VatMode.NIL and vat_percentage is None:
                    vat_percentage = self._category_or_404(template.category_id).vat_percentage
            if vat_percentage is not None:
                changes["vat_percentage"] = _check_vat_percentage(vat_percentage)

            # Re-validate so the nil/included rules apply to the merged record
            updated = OrderItemTemplate.model_validate({**template.model_dump(), **changes})
            index = self.store.item_templates.index(template)
            self.store.item_templates[index] = updated
        return updated

    def delete_item_template(self, template_id: str) -> None:
        with self.store.writing():
            self._template_or_404(template_id)
            self.store.item_templates = [t for t in self.store.item_templates if t.id != template_id]
            for order in self.store.orders:
                kept = [item for item in order.items if item.template_id != template_id]
                if len(kept) != len(order.items):
                    order.items = kept
                    order.total_cost = PricingService.order_total(kept)
        logger.info("Deleted item template %s", template_id)

    def get_item_template(self, template_id: str) -> OrderItemTemplate:
        return self._template_or_404(template_id)

    def get_item_templates_by_category(self, category_id: str) -> List[OrderItemTemplate]:
        return [t for t in self.store.item_templates if t.category_id == category_id]

    # Orders

    def _order_or_404(self, order_id: str) -> Order:
        order = self.store.find_order(order_id)
        if not order:
            raise NotFoundError("Order", order_id)
        return order

    def _build_items(self, category_id: str, lines: Sequence[OrderLineIn]) -> List[OrderItem]:
        items = []
        for line in lines:
            template = self.store.find_template(line.template_id)
            if not template or template.category_id != category_id:
                raise StoreValidationError(
                    f"Item template {line.template_id} does not belong to this category"
                )
            items.append(
                PricingService.build_line(template, line.quantity, line.is_available, line_id=line.id)
            )
        return items

    def _find_same_day_order(self, category_id: str, order_date: datetime) -> Optional[Order]:
        day = order_date.date()
        return next(
            (o for o in self.store.orders if o.category_id == category_id and o.order_date.date() == day),
            None,
        )

    def add_order(self, category_id: str, order_date: datetime, lines: Sequence[OrderLineIn]) -> Order:
        """
        Create an order for a category and day.

        Raises DuplicateOrderError when the category already has an order
        that day, and StoreValidationError when the order totals zero.
        """
        order_date = _as_utc(order_date)

        with self.store.writing():
            category = self._category_or_404(category_id)
            items = self._build_items(category_id, lines)
            if self._find_same_day_order(category_id, order_date):
                raise DuplicateOrderError(category.name, order_date)

            total_cost = PricingService.order_total(items)
            if total_cost == 0:
                raise StoreValidationError("Order total must be greater than zero")

            order = Order(category_id=category_id, order_date=order_date, items=items, total_cost=total_cost)
            self.store.orders.append(order)
        logger.info("Added order %s for %s (%.2f)", order.id, category.name, total_cost)
        return order

    def update_order(self, order_id: str, order_date: datetime, lines: Sequence[OrderLineIn]) -> Order:
        order_date = _as_utc(order_date)

        with self.store.writing():
            order = self._order_or_404(order_id)
            items = self._build_items(order.category_id, lines)
            order.order_date = order_date
            order.items = items
            order.total_cost = PricingService.order_total(items)
            order.last_edited_at = datetime.now(timezone.utc)
        return order

    def set_item_availability(self, order_id: str, item_id: str, available: bool) -> Order:
        with self.store.writing():
            order = self._order_or_404(order_id)
            item = next((i for i in order.items if i.id == item_id), None)
            if not item:
                raise NotFoundError("Order item", item_id)
            item.is_available = available
            order.total_cost = PricingService.order_total(order.items)
            order.last_edited_at = datetime.now(timezone.utc)
        return order

    def delete_order(self, order_id: str) -> None:
        with self.store.writing():
            self._order_or_404(order_id)
            self.store.orders = [o for o in self.store.orders if o.id != order_id]

    def get_order(self, order_id: str) -> Order:
        return self._order_or_404(order_id)

    def get_orders_by_category(self, category_id: str) -> List[Order]:
        """Orders of a category, newest order date first."""
        orders = [o for o in self.store.orders if o.category_id == category_id]
        return sorted(orders, key=lambda o: o.order_date, reverse=True)
