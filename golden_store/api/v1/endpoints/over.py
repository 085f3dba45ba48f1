from typing import List

from fastapi import APIRouter, Depends, status

from golden_store.db.session import get_store
from golden_store.db.store import DataStore
from golden_store.models.catalog import OverItem
from golden_store.repositories.over_repo import OverRepository
from golden_store.schemas.catalog import OverItemCreate, OverItemUpdate

router = APIRouter()


def get_over_repo(store: DataStore = Depends(get_store)) -> OverRepository:
    return OverRepository(store)


@router.get("", response_model=List[OverItem])
def search_items(q: str = "", repo: OverRepository = Depends(get_over_repo)):
    """Items to restock, incomplete first"""
    return repo.search_items(q)


@router.post("", response_model=OverItem, status_code=status.HTTP_201_CREATED)
def create_item(body: OverItemCreate, repo: OverRepository = Depends(get_over_repo)):
    return repo.add_item(body.name)


@router.patch("/{item_id}", response_model=OverItem)
def edit_item(item_id: str, body: OverItemUpdate, repo: OverRepository = Depends(get_over_repo)):
    return repo.edit_item(item_id, body.name)


@router.post("/{item_id}/toggle", response_model=OverItem)
def toggle_item(item_id: str, repo: OverRepository = Depends(get_over_repo)):
    return repo.toggle_item(item_id)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(item_id: str, repo: OverRepository = Depends(get_over_repo)):
    repo.delete_item(item_id)
