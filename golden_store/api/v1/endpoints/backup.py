from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request

from golden_store.db.backends import RemoteTableBackend
from golden_store.db.session import get_store
from golden_store.db.store import DataStore
from golden_store.schemas.backup import ImportResult
from golden_store.services.backup_service import BackupService

router = APIRouter()


@router.get("/export")
def export_bundle(request: Request, store: DataStore = Depends(get_store)):
    """Full database export"""
    return BackupService.export_bundle(store, request.app.state.settings)


@router.post("/import", response_model=ImportResult)
def import_bundle(data: Dict[str, Any] = Body(...), store: DataStore = Depends(get_store)):
    """Replace the modules present in an exported bundle"""
    return ImportResult(imported=BackupService.import_bundle(store, data))


@router.post("/restore", response_model=ImportResult)
def restore_from_remote(request: Request, store: DataStore = Depends(get_store)):
    """Reload every table from the remote table store"""
    settings = request.app.state.settings
    remote = RemoteTableBackend(
        settings.REMOTE_URL,
        api_key=settings.REMOTE_API_KEY,
        timeout=settings.REMOTE_TIMEOUT_SECONDS,
    )
    return ImportResult(imported=BackupService.restore_from_backend(store, remote))
