"""
Returnable containers lent to clients, derived from transaction text.

Descriptions such as "2 Chopine Beer, 3 1.5L Bouteille Green" issue
containers; descriptions containing "returned" (e.g. "Returned: 2 Chopine
Beer - 10/01/2024") give them back. Keys:

    Chopine, Chopine <Brand>, <Size> Bouteille, <Size> Bouteille <Brand>,
    Bouteille <Brand>, Bouteille

Each pattern is scanned once, left to right, without overlapping matches.
A container mentioned without a quantity counts as one.
"""

import re
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional

from golden_store.models.client import CreditTransaction
from golden_store.utils.text import title_case

RETURN_MARKER = "returned"
CONTAINER_WORDS = ("chopine", "bouteille")

# Brand: words that do not start with a digit, up to , ; . ( ) or -
_BRAND = r"(?P<brand>(?:[ \t]+[^\s\d,;.()\-][^\s,;.()\-]*)*)"

CHOPINE_RE = re.compile(r"(?:(?P<qty>\d+)\s+)?\bchopines?\b" + _BRAND)
BOUTEILLE_RE = re.compile(
    r"(?:(?P<qty>\d+)\s+)?"
    r"(?:(?P<size>\d+(?:\.\d+)?)\s*l\s+)?"
    r"\bbouteilles?\b"
    r"(?:\s+(?P<size_after>\d+(?:\.\d+)?)\s*l\b)?"
    + _BRAND
)


def _size_label(size: str) -> str:
    return f"{size}L"


class ReturnablesService:
    @staticmethod
    def parse_containers(description: str) -> Counter:
        """Tally container keys mentioned in one piece of text."""
        text = description.lower()
        found: Counter = Counter()

        for match in CHOPINE_RE.finditer(text):
            brand = title_case(match.group("brand"))
            key = f"Chopine {brand}" if brand else "Chopine"
            found[key] += int(match.group("qty") or 1)

        for match in BOUTEILLE_RE.finditer(text):
            brand = title_case(match.group("brand"))
            size = match.group("size") or match.group("size_after")
            key = "Bouteille"
            if size:
                key = f"{_size_label(size)} {key}"
            if brand:
                key = f"{key} {brand}"
            found[key] += int(match.group("qty") or 1)

        return found

    @staticmethod
    def is_return(description: str) -> bool:
        return RETURN_MARKER in description.lower()

    @staticmethod
    def mentions_container(description: str) -> bool:
        text = description.lower()
        return any(word in text for word in CONTAINER_WORDS)

    @staticmethod
    def is_return_related(description: str, amount: float) -> bool:
        """Transactions that settle_client keeps: returns, containers and zero amounts."""
        return (
            amount == 0
            or ReturnablesService.is_return(description)
            or ReturnablesService.mentions_container(description)
        )

    @staticmethod
    def _returned_part(description: str) -> str:
        text = description.lower()
        index = text.find(RETURN_MARKER)
        rest = text[index + len(RETURN_MARKER):]
        return rest[1:] if rest.startswith(":") else rest

    @staticmethod
    def outstanding_returnables(transactions: Iterable[CreditTransaction]) -> Dict[str, int]:
        """
        Outstanding container count per key for one client's transactions.

        Issued minus returned, clamped at zero; keys with nothing left are
        omitted.
        """
        issued: Counter = Counter()
        returned: Counter = Counter()

        for tx in transactions:
            description = tx.description or ""
            if ReturnablesService.is_return(description):
                returned.update(ReturnablesService.parse_containers(
                    ReturnablesService._returned_part(description)
                ))
            elif ReturnablesService.mentions_container(description):
                issued.update(ReturnablesService.parse_containers(description))

        remaining = {key: count - returned.get(key, 0) for key, count in issued.items()}
        return {key: count for key, count in remaining.items() if count > 0}

    @staticmethod
    def has_returnables(transactions: Iterable[CreditTransaction]) -> bool:
        return bool(ReturnablesService.outstanding_returnables(transactions))

    @staticmethod
    def has_overdue_returnables(
        transactions: Iterable[CreditTransaction],
        now: Optional[datetime] = None,
        days: int = 21,
    ) -> bool:
        """True when a container was issued at least `days` days ago."""
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        threshold = timedelta(days=days)

        for tx in transactions:
            if ReturnablesService.is_return(tx.description):
                continue
            if not ReturnablesService.mentions_container(tx.description):
                continue
            issued_at = tx.date if tx.date.tzinfo else tx.date.replace(tzinfo=timezone.utc)
            if now - issued_at >= threshold:
                return True
        return False
