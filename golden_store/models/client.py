"""
Credit ledger records.

- Client ids are "G###", sequential, with freed numbers reused
- total_debt is derived and kept in step by every ledger mutation
- recency_rank orders the client list (highest = most recently active)
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from golden_store.models.base import StoreModel, _utcnow, gen_id

BOTTLE_KINDS = ("beer", "guinness", "malta", "coca", "chopines")


class BottlesOwed(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    beer: int = 0
    guinness: int = 0
    malta: int = 0
    coca: int = 0
    chopines: int = 0


class Client(StoreModel):
    id: str
    name: str
    total_debt: float = 0.0
    created_at: datetime = Field(default_factory=_utcnow)
    last_transaction_at: datetime = Field(default_factory=_utcnow)
    bottles_owed: BottlesOwed = Field(default_factory=BottlesOwed)
    recency_rank: int = 0


class CreditTransaction(StoreModel):
    id: str = Field(default_factory=gen_id)
    client_id: str
    description: str
    amount: float
    date: datetime = Field(default_factory=_utcnow)
    type: Literal["debt"] = "debt"


class PaymentRecord(StoreModel):
    id: str = Field(default_factory=gen_id)
    client_id: str
    amount: float
    date: datetime = Field(default_factory=_utcnow)
    type: Literal["partial", "full"] = "partial"
