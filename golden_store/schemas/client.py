from typing import Dict, List, Literal

from pydantic import Field

from golden_store.models.client import Client, CreditTransaction, PaymentRecord
from golden_store.schemas.base import CamelModel


class ClientCreate(CamelModel):
    name: str


class ClientUpdate(CamelModel):
    name: str


class TransactionCreate(CamelModel):
    description: str
    amount: float


class PaymentCreate(CamelModel):
    amount: float


class BottleReturn(CamelModel):
    beer: int = Field(default=0, ge=0)
    guinness: int = Field(default=0, ge=0)
    malta: int = Field(default=0, ge=0)
    coca: int = Field(default=0, ge=0)
    chopines: int = Field(default=0, ge=0)


class ReturnCreate(CamelModel):
    """Return of a returnable key such as "Chopine Beer" or "1.5L Bouteille"."""
    item_key: str
    quantity: int = Field(gt=0)


class ClientDetail(CamelModel):
    client: Client
    transactions: List[CreditTransaction]
    payments: List[PaymentRecord]
    returnables: Dict[str, int]
    has_overdue_returnables: bool


class SettlementResponse(CamelModel):
    client: Client
    payment: PaymentRecord
    mode: Literal["amount-only", "full-clear"]


class LedgerSummary(CamelModel):
    client_count: int
    active_client_count: int
    total_outstanding: float

