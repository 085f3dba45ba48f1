"""
LedgerRepository - client credit ledger.

Balances:
1. add_transaction adds its amount to the client's total_debt
2. a partial payment lowers total_debt, never below zero
3. settle_client pays the whole debt and keeps returnable history
4. settle_client_with_full_clear pays the whole debt and wipes history
"""

import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from golden_store.core.errors import DuplicateNameError, NotFoundError, StoreValidationError
from golden_store.db.store import DataStore
from golden_store.models.client import BOTTLE_KINDS, BottlesOwed, Client, CreditTransaction, PaymentRecord
from golden_store.services.returnables_service import ReturnablesService
from golden_store.utils.text import is_finite_number, normalize_search, title_case

logger = logging.getLogger(__name__)

CLIENT_ID_RE = re.compile(r"^G(\d+)$")


class LedgerRepository:
    """Repository for clients, their debt transactions and payments."""

    def __init__(self, store: DataStore):
        self.store = store

    def _get_or_404(self, client_id: str) -> Client:
        client = self.store.find_client(client_id)
        if not client:
            raise NotFoundError("Client", client_id)
        return client

    def _next_client_id(self) -> str:
        """Lowest free G### number, reusing gaps left by deleted clients."""
        taken = set()
        for client in self.store.clients:
            match = CLIENT_ID_RE.match(client.id)
            if match:
                taken.add(int(match.group(1)))
        number = 1
        while number in taken:
            number += 1
        return f"G{number:03d}"

    def _clean_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        clean = title_case(name or "")
        if not clean:
            raise StoreValidationError("Client name is required")
        for client in self.store.clients:
            if client.id != exclude_id and client.name.lower() == clean.lower():
                raise DuplicateNameError(f'A client named "{clean}" already exists')
        return clean

    # Clients

    def add_client(self, name: str) -> Client:
        with self.store.writing():
            clean = self._clean_name(name)
            client = Client(
                id=self._next_client_id(),
                name=clean,
                recency_rank=self.store.next_recency_rank(),
            )
            self.store.clients.append(client)
        logger.info("Added client %s (%s)", client.id, client.name)
        return client

    def update_client(self, client_id: str, name: str) -> Client:
        """Rename a client; the client moves to the front of the list."""
        with self.store.writing():
            client = self._get_or_404(client_id)
            client.name = self._clean_name(name, exclude_id=client_id)
            client.recency_rank = self.store.next_recency_rank()
        return client

    def delete_client(self, client_id: str) -> None:
        with self.store.writing():
            self._get_or_404(client_id)
            self.store.clients = [c for c in self.store.clients if c.id != client_id]
            self.store.transactions = [t for t in self.store.transactions if t.client_id != client_id]
            self.store.payments = [p for p in self.store.payments if p.client_id != client_id]
        logger.info("Deleted client %s with its transactions and payments", client_id)

    def move_client_to_front(self, client_id: str) -> Client:
        with self.store.writing():
            client = self._get_or_404(client_id)
            client.recency_rank = self.store.next_recency_rank()
        return client

    # Transactions and payments

    def add_transaction(self, client_id: str, description: str, amount: float) -> CreditTransaction:
        if not is_finite_number(amount) or amount < 0:
            raise StoreValidationError("Amount must be a non-negative number")
        description = (description or "").strip()
        if not description:
            raise StoreValidationError("Description is required")

        with self.store.writing():
            client = self._get_or_404(client_id)
            tx = CreditTransaction(client_id=client_id, description=description, amount=amount)
            self.store.transactions.append(tx)
            client.total_debt += amount
            client.last_transaction_at = tx.date
            client.recency_rank = self.store.next_recency_rank()
        return tx

    def add_partial_payment(self, client_id: str, amount: float) -> PaymentRecord:
        if not is_finite_number(amount) or amount <= 0:
            raise StoreValidationError("Payment amount must be a positive number")

        with self.store.writing():
            client = self._get_or_404(client_id)
            payment = PaymentRecord(client_id=client_id, amount=amount, type="partial")
            self.store.payments.append(payment)
            client.total_debt = max(0.0, client.total_debt - amount)
            client.last_transaction_at = payment.date
        return payment

    def _record_full_payment(self, client: Client) -> PaymentRecord:
        self.store.payments = [
            p for p in self.store.payments
            if not (p.client_id == client.id and p.type == "full")
        ]
        payment = PaymentRecord(client_id=client.id, amount=client.total_debt, type="full")
        self.store.payments.append(payment)
        client.total_debt = 0.0
        client.last_transaction_at = payment.date
        return payment

    def settle_client(self, client_id: str) -> PaymentRecord:
        """Pay off the debt; returnable history and bottles owed survive."""
        with self.store.writing():
            client = self._get_or_404(client_id)
            payment = self._record_full_payment(client)
            self.store.transactions = [
                t for t in self.store.transactions
                if t.client_id != client_id
                or ReturnablesService.is_return_related(t.description, t.amount)
            ]
        logger.info("Settled client %s for %.2f", client_id, payment.amount)
        return payment

    def settle_client_with_full_clear(self, client_id: str) -> PaymentRecord:
        """Pay off the debt and delete every transaction and bottle count."""
        with self.store.writing():
            client = self._get_or_404(client_id)
            payment = self._record_full_payment(client)
            self.store.transactions = [t for t in self.store.transactions if t.client_id != client_id]
            client.bottles_owed = BottlesOwed()
        logger.info("Settled and cleared client %s for %.2f", client_id, payment.amount)
        return payment

    # Returnables

    def return_bottles(self, client_id: str, **returned: int) -> BottlesOwed:
        unknown = set(returned) - set(BOTTLE_KINDS)
        if unknown:
            raise StoreValidationError(f"Unknown bottle kind: {', '.join(sorted(unknown))}")
        for kind, count in returned.items():
            if not isinstance(count, int) or count < 0:
                raise StoreValidationError(f"Returned {kind} must be a non-negative whole number")

        with self.store.writing():
            client = self._get_or_404(client_id)
            owed = client.bottles_owed
            for kind, count in returned.items():
                setattr(owed, kind, max(0, getattr(owed, kind) - count))
            client.last_transaction_at = datetime.now(timezone.utc)
        return owed

    def record_return(self, client_id: str, item_key: str, quantity: int) -> CreditTransaction:
        """Log a zero-amount 'Returned: ...' transaction for a returnable key."""
        if not isinstance(quantity, int) or quantity <= 0:
            raise StoreValidationError("Returned quantity must be a positive whole number")
        item_key = (item_key or "").strip()
        if not item_key:
            raise StoreValidationError("Returned item is required")

        today = datetime.now(timezone.utc).strftime("%d/%m/%Y")
        return self.add_transaction(client_id, f"Returned: {quantity} {item_key} - {today}", 0)

    def get_client_returnables(self, client_id: str) -> Dict[str, int]:
        return ReturnablesService.outstanding_returnables(self.get_client_transactions(client_id))

    # Readers

    def get_client(self, client_id: str) -> Client:
        return self._get_or_404(client_id)

    def list_clients(self) -> List[Client]:
        """Clients ordered by recency, most recently active last."""
        return sorted(self.store.clients, key=lambda c: c.recency_rank)

    def list_active_clients(self) -> List[Client]:
        """Clients with debt or with containers still out."""
        return [
            c for c in self.list_clients()
            if c.total_debt > 0 or ReturnablesService.has_returnables(self.get_client_transactions(c.id))
        ]

    def get_client_total_debt(self, client_id: str) -> float:
        return self._get_or_404(client_id).total_debt

    def get_client_bottles_owed(self, client_id: str) -> BottlesOwed:
        return self._get_or_404(client_id).bottles_owed

    def get_client_transactions(self, client_id: str) -> List[CreditTransaction]:
        return [t for t in self.store.transactions if t.client_id == client_id]

    def get_client_payments(self, client_id: str) -> List[PaymentRecord]:
        return [p for p in self.store.payments if p.client_id == client_id]

    def total_outstanding(self) -> float:
        return sum(c.total_debt for c in self.store.clients)

    def search_clients(self, query: str) -> List[Client]:
        """
        Search by client number or name.

        "7" or "007" finds G007 exactly; anything else matches names ignoring
        case, accents and punctuation, or an exact id.
        """
        clients = self.list_clients()
        query = (query or "").strip()
        if not query:
            return clients

        if query.isdigit():
            client_id = f"G{query.zfill(3)}"
            return [c for c in clients if c.id == client_id]

        needle = normalize_search(query)
        return [
            c for c in clients
            if (needle and needle in normalize_search(c.name)) or c.id.lower() == query.lower()
        ]
