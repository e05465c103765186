from fastapi import APIRouter, Depends, HTTPException

from apu_estimator.core.deps import get_editor, get_generator, get_store, project_or_404
from apu_estimator.schemas.editor import GenerateIn
from apu_estimator.schemas.project import Apu
from apu_estimator.schemas.reports import ApuCostOut
from apu_estimator.services.costing.engine import apu_breakdown
from apu_estimator.services.editor import ApuEditor
from apu_estimator.services.generation import ApuGenerator
from apu_estimator.services.store import ApuNotFound, ProjectNotFound, ProjectStore

router = APIRouter()


@router.get("", response_model=list[Apu])
async def get_apus(project_id: str, store: ProjectStore = Depends(get_store)):
    return project_or_404(store, project_id).apus


@router.get("/costs", response_model=list[ApuCostOut])
async def get_apu_costs(project_id: str, store: ProjectStore = Depends(get_store)):
    return [apu_breakdown(a) for a in project_or_404(store, project_id).apus]


@router.post("", response_model=Apu)
async def post_apu(project_id: str, store: ProjectStore = Depends(get_store)):
    project_or_404(store, project_id)
    return store.add_apu(project_id)


@router.post("/generate", response_model=Apu | None)
async def post_generated_apu(
    project_id: str,
    data: GenerateIn,
    store: ProjectStore = Depends(get_store),
    generator: ApuGenerator = Depends(get_generator),
):
    project_or_404(store, project_id)
    generated = await generator.generate(data.prompt)
    if generated is None:
        return None
    try:
        return store.add_generated_apu(project_id, generated)
    except ProjectNotFound:
        # the project was deleted while the service was answering
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")


@router.delete("/{apu_id}")
async def delete_apu(
    project_id: str,
    apu_id: str,
    store: ProjectStore = Depends(get_store),
    editor: ApuEditor = Depends(get_editor),
):
    project_or_404(store, project_id)
    try:
        store.delete_apu(project_id, apu_id)
    except ApuNotFound:
        raise HTTPException(status_code=404, detail=f"APU {apu_id} not found")
    editor.discard_if(project_id, apu_id)
    return {"status": "ok"}
