import re
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import FileResponse

from apu_estimator.core.deps import get_editor, get_store, project_or_404
from apu_estimator.core.logging import logger
from apu_estimator.schemas.project import Project, ProjectCreate
from apu_estimator.schemas.reports import ProjectStats, ProjectSummaryOut
from apu_estimator.services.costing.engine import aggregate
from apu_estimator.services.editor import ApuEditor
from apu_estimator.services.exports.exporter import (
    default_export_path,
    dump_project,
    export_budget_pdf,
    export_budget_xlsx,
    project_export_filename,
)
from apu_estimator.services.store import ProjectNotFound, ProjectStore

router = APIRouter()

# Handlers stay `async def`: store mutations must run on the event loop, never in the threadpool.

def _summary(p: Project) -> ProjectSummaryOut:
    return ProjectSummaryOut(
        id=p.id,
        name=p.name,
        last_modified=p.last_modified,
        location=p.location,
        client=p.client,
        apu_count=len(p.apus),
        stats=aggregate(p.apus),
    )


@router.get("", response_model=list[ProjectSummaryOut])
async def get_projects(store: ProjectStore = Depends(get_store)):
    return [_summary(p) for p in store.list_projects()]


@router.post("", response_model=Project)
async def post_project(data: ProjectCreate, store: ProjectStore = Depends(get_store)):
    try:
        return store.create(data.name, location=data.location, client=data.client)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/active", response_model=Project | None)
async def get_active_project(store: ProjectStore = Depends(get_store)):
    return store.active


@router.post("/close")
async def close_project(store: ProjectStore = Depends(get_store), editor: ApuEditor = Depends(get_editor)):
    store.close()
    editor.discard()
    return {"status": "ok"}


@router.get("/{project_id}", response_model=Project)
async def get_project(project_id: str, store: ProjectStore = Depends(get_store)):
    return project_or_404(store, project_id)


@router.delete("/{project_id}")
async def delete_project(project_id: str, store: ProjectStore = Depends(get_store),
                         editor: ApuEditor = Depends(get_editor)):
    try:
        store.delete(project_id)
    except ProjectNotFound:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    if editor.project_id == project_id:
        editor.discard()
    return {"status": "ok"}


@router.post("/{project_id}/open", response_model=Project)
async def open_project(project_id: str, store: ProjectStore = Depends(get_store),
                       editor: ApuEditor = Depends(get_editor)):
    try:
        project = store.open(project_id)
    except ProjectNotFound:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    editor.discard()
    return project


@router.get("/{project_id}/stats", response_model=ProjectStats)
async def get_project_stats(project_id: str, store: ProjectStore = Depends(get_store)):
    return aggregate(project_or_404(store, project_id).apus)


@router.get("/{project_id}/export")
async def export_project_json(project_id: str, store: ProjectStore = Depends(get_store)):
    p = project_or_404(store, project_id)
    filename = project_export_filename(p)
    return Response(
        content=dump_project(p),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename*=utf-8''{quote(filename)}"},
    )


def _export_prefix(p: Project) -> str:
    return re.sub(r"[^\w.-]+", "_", p.name).strip("._") or "project"


@router.get("/{project_id}/export/xlsx")
async def export_project_xlsx(project_id: str, store: ProjectStore = Depends(get_store)):
    p = project_or_404(store, project_id)
    out = export_budget_xlsx(p, default_export_path(_export_prefix(p), "xlsx"))
    logger.info("budget_exported", project_id=project_id, fmt="xlsx", path=str(out))
    return FileResponse(
        str(out),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=out.name,
    )


@router.get("/{project_id}/export/pdf")
async def export_project_pdf(project_id: str, store: ProjectStore = Depends(get_store)):
    p = project_or_404(store, project_id)
    out = export_budget_pdf(p, default_export_path(_export_prefix(p), "pdf"))
    logger.info("budget_exported", project_id=project_id, fmt="pdf", path=str(out))
    return FileResponse(str(out), media_type="application/pdf", filename=out.name)
