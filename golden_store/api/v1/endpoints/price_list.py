from typing import List

from fastapi import APIRouter, Depends, status

from golden_store.db.session import get_store
from golden_store.db.store import DataStore
from golden_store.models.catalog import PriceItem, SortOption
from golden_store.repositories.price_list_repo import PriceListRepository
from golden_store.schemas.catalog import PriceItemCreate, PriceItemImport, PriceItemUpdate

router = APIRouter()


def get_price_list_repo(store: DataStore = Depends(get_store)) -> PriceListRepository:
    return PriceListRepository(store)


@router.get("", response_model=List[PriceItem])
def search_items(
    q: str = "",
    sort: SortOption = SortOption.DATE_DESC,
    repo: PriceListRepository = Depends(get_price_list_repo),
):
    return repo.search_items(q, sort)


@router.post("", response_model=PriceItem, status_code=status.HTTP_201_CREATED)
def create_item(body: PriceItemCreate, repo: PriceListRepository = Depends(get_price_list_repo)):
    return repo.add_item(body.name, body.price, body.gross_price)


@router.post("/import")
def import_items(body: PriceItemImport, repo: PriceListRepository = Depends(get_price_list_repo)):
    """Merge items into the price list by id"""
    return {"imported": repo.import_items(body.items)}


@router.get("/{item_id}", response_model=PriceItem)
def get_item(item_id: str, repo: PriceListRepository = Depends(get_price_list_repo)):
    return repo.get_item(item_id)


@router.patch("/{item_id}", response_model=PriceItem)
def update_item(item_id: str, body: PriceItemUpdate, repo: PriceListRepository = Depends(get_price_list_repo)):
    return repo.update_item(item_id, body.name, body.price, body.gross_price)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(item_id: str, repo: PriceListRepository = Depends(get_price_list_repo)):
    repo.delete_item(item_id)
