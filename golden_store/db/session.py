from fastapi import Request

from golden_store.db.store import DataStore


def get_store(request: Request) -> DataStore:
    """Return the store built at application startup."""
    return request.app.state.store
