from urllib.parse import quote

from fastapi import APIRouter, Depends, UploadFile, File, HTTPException, Query, Response

from apu_estimator.core.deps import get_editor, get_store
from apu_estimator.core.logging import logger
from apu_estimator.schemas.imports import ImportResultOut
from apu_estimator.services.editor import ApuEditor
from apu_estimator.services.exports.exporter import backup_filename, dump_backup
from apu_estimator.services.imports.importer import import_payload, restore_backup
from apu_estimator.services.imports.validators import ReconcileError, RestoreNotConfirmed
from apu_estimator.services.store import ProjectStore

router = APIRouter()


async def _read_upload(file: UploadFile) -> bytes:
    if file.filename and not file.filename.lower().endswith(".json"):
        raise HTTPException(status_code=400, detail="Only .json supported")
    # the whole file is read before anything is reconciled
    return await file.read()


@router.post("/upload", response_model=ImportResultOut)
async def upload_project(
    file: UploadFile = File(...),
    confirm_restore: bool = Query(False, description="Allow a full backup to replace every project"),
    store: ProjectStore = Depends(get_store),
    editor: ApuEditor = Depends(get_editor),
):
    raw = await _read_upload(file)
    try:
        result = import_payload(store, raw, confirm_restore=confirm_restore)
    except RestoreNotConfirmed as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ReconcileError as e:
        logger.warning("import_rejected", file_name=file.filename, error=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    if result.replaced:
        editor.discard()
    return result


@router.post("/restore", response_model=ImportResultOut)
async def restore(
    file: UploadFile = File(...),
    confirm: bool = Query(False, description="Restoring replaces every project and cannot be undone"),
    store: ProjectStore = Depends(get_store),
    editor: ApuEditor = Depends(get_editor),
):
    if not confirm:
        raise HTTPException(status_code=409, detail="Restore replaces all projects; repeat with confirm=true")
    raw = await _read_upload(file)
    try:
        result = restore_backup(store, raw)
    except ReconcileError as e:
        logger.warning("restore_rejected", file_name=file.filename, error=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    editor.discard()
    return result


@router.get("/backup")
async def download_backup(store: ProjectStore = Depends(get_store)):
    filename = backup_filename()
    return Response(
        content=dump_backup(store.list_projects()),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename*=utf-8''{quote(filename)}"},
    )
