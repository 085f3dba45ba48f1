"""Domain errors raised by the store, repositories and services."""
from datetime import date
from enum import Enum


class ErrorKind(str, Enum):
    DUPLICATE_NAME = "duplicate_name"
    DUPLICATE_ORDER = "duplicate_order"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERSISTENCE = "persistence"


class StoreError(Exception):
    """Base class for every error the store reports to its callers."""
    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateNameError(StoreError):
    """A client, category or item template name is already taken."""
    kind = ErrorKind.DUPLICATE_NAME


# Older name kept for client collisions.
DuplicateClientError = DuplicateNameError


def format_order_date(value: date) -> str:
    """Human date used in duplicate-order messages, e.g. ``10 Jan 2024``."""
    return value.strftime("%d %b %Y")


class DuplicateOrderError(StoreError):
    """An order already exists for the same category and calendar day."""
    kind = ErrorKind.DUPLICATE_ORDER

    def __init__(self, category_name: str, order_date: date):
        self.category_name = category_name
        self.order_date = order_date
        super().__init__(
            f'An order for "{category_name}" already exists for {format_order_date(order_date)}'
        )


class StoreValidationError(StoreError):
    """Missing or invalid input (amount, name, description, VAT percentage...)."""
    kind = ErrorKind.VALIDATION


class NotFoundError(StoreError):
    """Operation on an id that does not exist."""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class PersistenceError(StoreError):
    """Local or remote read/write failure."""
    kind = ErrorKind.PERSISTENCE
