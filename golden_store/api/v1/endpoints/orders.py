from typing import List

from fastapi import APIRouter, Depends, status

from golden_store.db.session import get_store
from golden_store.db.store import DataStore
from golden_store.models.order import Order, OrderCategory, OrderItemTemplate, vat_flags
from golden_store.repositories.order_repo import OrderRepository
from golden_store.schemas.order import (
    AvailabilityUpdate,
    CategoryCreate,
    CategoryDetail,
    CategoryUpdate,
    ItemTemplateCreate,
    ItemTemplateUpdate,
    LinePriceRequest,
    LinePriceResponse,
    OrderCreate,
    OrderUpdate,
)
from golden_store.services.pricing_service import PricingService

router = APIRouter()


def get_order_repo(store: DataStore = Depends(get_store)) -> OrderRepository:
    return OrderRepository(store)


# Categories

@router.get("/categories", response_model=List[OrderCategory])
def list_categories(q: str = "", repo: OrderRepository = Depends(get_order_repo)):
    return repo.search_categories(q)


@router.post("/categories", response_model=OrderCategory, status_code=status.HTTP_201_CREATED)
def create_category(body: CategoryCreate, repo: OrderRepository = Depends(get_order_repo)):
    return repo.add_category(body.name, body.vat_percentage)


@router.get("/categories/{category_id}", response_model=CategoryDetail)
def get_category(category_id: str, repo: OrderRepository = Depends(get_order_repo)):
    """Category with its item templates and orders, newest first"""
    return CategoryDetail(
        category=repo.get_category(category_id),
        item_templates=repo.get_item_templates_by_category(category_id),
        orders=repo.get_orders_by_category(category_id),
    )


@router.patch("/categories/{category_id}", response_model=OrderCategory)
def update_category(category_id: str, body: CategoryUpdate, repo: OrderRepository = Depends(get_order_repo)):
    return repo.update_category(category_id, body.name, body.vat_percentage)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: str, repo: OrderRepository = Depends(get_order_repo)):
    """Delete a category with its item templates and orders"""
    repo.delete_category(category_id)


# Item templates

@router.get("/categories/{category_id}/templates", response_model=List[OrderItemTemplate])
def list_item_templates(category_id: str, repo: OrderRepository = Depends(get_order_repo)):
    repo.get_category(category_id)
    return repo.get_item_templates_by_category(category_id)


@router.post(
    "/categories/{category_id}/templates",
    response_model=OrderItemTemplate,
    status_code=status.HTTP_201_CREATED,
)
def create_item_template(
    category_id: str,
    body: ItemTemplateCreate,
    repo: OrderRepository = Depends(get_order_repo),
):
    return repo.add_item_template(
        category_id, body.name, body.unit_price, body.vat_mode, body.vat_percentage
    )


@router.patch("/templates/{template_id}", response_model=OrderItemTemplate)
def update_item_template(
    template_id: str,
    body: ItemTemplateUpdate,
    repo: OrderRepository = Depends(get_order_repo),
):
    return repo.update_item_template(
        template_id, body.name, body.unit_price, body.vat_mode, body.vat_percentage
    )


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item_template(template_id: str, repo: OrderRepository = Depends(get_order_repo)):
    """Delete a template and strip its lines from every order"""
    repo.delete_item_template(template_id)


# Orders

@router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
def create_order(body: OrderCreate, repo: OrderRepository = Depends(get_order_repo)):
    return repo.add_order(body.category_id, body.order_date, body.items)


@router.get("/categories/{category_id}/orders", response_model=List[Order])
def list_orders(category_id: str, repo: OrderRepository = Depends(get_order_repo)):
    repo.get_category(category_id)
    return repo.get_orders_by_category(category_id)


@router.get("/{order_id}", response_model=Order)
def get_order(order_id: str, repo: OrderRepository = Depends(get_order_repo)):
    return repo.get_order(order_id)


@router.put("/{order_id}", response_model=Order)
def update_order(order_id: str, body: OrderUpdate, repo: OrderRepository = Depends(get_order_repo)):
    return repo.update_order(order_id, body.order_date, body.items)


@router.patch("/{order_id}/items/{item_id}", response_model=Order)
def set_item_availability(
    order_id: str,
    item_id: str,
    body: AvailabilityUpdate,
    repo: OrderRepository = Depends(get_order_repo),
):
    return repo.set_item_availability(order_id, item_id, body.is_available)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(order_id: str, repo: OrderRepository = Depends(get_order_repo)):
    repo.delete_order(order_id)


@router.post("/price-line", response_model=LinePriceResponse)
def price_line(body: LinePriceRequest):
    """Quick-add calculator"""
    is_vat_nil, is_vat_included = vat_flags(body.vat_mode)
    price = PricingService.price_line(
        body.quantity,
        body.unit_price,
        is_vat_nil,
        is_vat_included,
        body.vat_percentage,
        body.is_available,
    )
    return LinePriceResponse(**price._asdict())
