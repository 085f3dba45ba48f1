from typing import Dict, List

from fastapi import APIRouter, Depends, Request, status

from golden_store.db.session import get_store
from golden_store.db.store import DataStore
from golden_store.models.client import BottlesOwed, Client, CreditTransaction, PaymentRecord
from golden_store.repositories.ledger_repo import LedgerRepository
from golden_store.schemas.client import (
    BottleReturn,
    ClientCreate,
    ClientDetail,
    ClientUpdate,
    LedgerSummary,
    PaymentCreate,
    ReturnCreate,
    SettlementResponse,
    TransactionCreate,
)
from golden_store.services.returnables_service import ReturnablesService

router = APIRouter()


def get_ledger_repo(store: DataStore = Depends(get_store)) -> LedgerRepository:
    return LedgerRepository(store)


@router.get("", response_model=List[Client])
def list_clients(q: str = "", active: bool = False, repo: LedgerRepository = Depends(get_ledger_repo)):
    """List clients, most recently active last"""
    if active:
        return repo.list_active_clients()
    return repo.search_clients(q)


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
def create_client(body: ClientCreate, repo: LedgerRepository = Depends(get_ledger_repo)):
    return repo.add_client(body.name)


@router.get("/summary", response_model=LedgerSummary)
def ledger_summary(repo: LedgerRepository = Depends(get_ledger_repo)):
    """Totals across the whole ledger"""
    return LedgerSummary(
        client_count=len(repo.list_clients()),
        active_client_count=len(repo.list_active_clients()),
        total_outstanding=repo.total_outstanding(),
    )


@router.get("/{client_id}", response_model=ClientDetail)
def get_client(client_id: str, request: Request, repo: LedgerRepository = Depends(get_ledger_repo)):
    """Client with transactions, payments and containers still out"""
    client = repo.get_client(client_id)
    transactions = repo.get_client_transactions(client_id)
    return ClientDetail(
        client=client,
        transactions=transactions,
        payments=repo.get_client_payments(client_id),
        returnables=ReturnablesService.outstanding_returnables(transactions),
        has_overdue_returnables=ReturnablesService.has_overdue_returnables(
            transactions, days=request.app.state.settings.RETURNABLE_OVERDUE_DAYS
        ),
    )


@router.patch("/{client_id}", response_model=Client)
def rename_client(client_id: str, body: ClientUpdate, repo: LedgerRepository = Depends(get_ledger_repo)):
    return repo.update_client(client_id, body.name)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(client_id: str, repo: LedgerRepository = Depends(get_ledger_repo)):
    """Delete a client with its transactions and payments"""
    repo.delete_client(client_id)


@router.post("/{client_id}/front", response_model=Client)
def move_client_to_front(client_id: str, repo: LedgerRepository = Depends(get_ledger_repo)):
    return repo.move_client_to_front(client_id)


@router.post("/{client_id}/transactions", response_model=CreditTransaction, status_code=status.HTTP_201_CREATED)
def add_transaction(client_id: str, body: TransactionCreate, repo: LedgerRepository = Depends(get_ledger_repo)):
    return repo.add_transaction(client_id, body.description, body.amount)


@router.post("/{client_id}/payments", response_model=PaymentRecord, status_code=status.HTTP_201_CREATED)
def add_partial_payment(client_id: str, body: PaymentCreate, repo: LedgerRepository = Depends(get_ledger_repo)):
    return repo.add_partial_payment(client_id, body.amount)


@router.post("/{client_id}/settle", response_model=SettlementResponse)
def settle_client(client_id: str, full_clear: bool = False, repo: LedgerRepository = Depends(get_ledger_repo)):
    """
    Settle a client's debt.

    By default returnable history and bottles owed are kept; with
    full_clear=true every transaction is deleted and bottles are zeroed.
    """
    if full_clear:
        payment = repo.settle_client_with_full_clear(client_id)
    else:
        payment = repo.settle_client(client_id)
    return SettlementResponse(
        client=repo.get_client(client_id),
        payment=payment,
        mode="full-clear" if full_clear else "amount-only",
    )


@router.get("/{client_id}/returnables", response_model=Dict[str, int])
def get_returnables(client_id: str, repo: LedgerRepository = Depends(get_ledger_repo)):
    repo.get_client(client_id)
    return repo.get_client_returnables(client_id)


@router.post("/{client_id}/returns", response_model=CreditTransaction, status_code=status.HTTP_201_CREATED)
def record_return(client_id: str, body: ReturnCreate, repo: LedgerRepository = Depends(get_ledger_repo)):
    """Record containers brought back"""
    return repo.record_return(client_id, body.item_key, body.quantity)


@router.post("/{client_id}/bottles/return", response_model=BottlesOwed)
def return_bottles(client_id: str, body: BottleReturn, repo: LedgerRepository = Depends(get_ledger_repo)):
    return repo.return_bottles(client_id, **body.model_dump())
