from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from apu_estimator.core.deps import active_project_or_409, get_editor, get_generator, get_store
from apu_estimator.schemas.editor import ApuDraftUpdate, GenerateIn, ResourceIn
from apu_estimator.schemas.project import Apu, Resource
from apu_estimator.schemas.reports import ApuCostOut
from apu_estimator.services.costing.engine import apu_breakdown
from apu_estimator.services.editor import ApuEditor, NoDraft
from apu_estimator.services.generation import ApuGenerator
from apu_estimator.services.store import ApuNotFound, ProjectStore

router = APIRouter()


def _draft_or_409(editor: ApuEditor) -> Apu:
    if editor.draft is None:
        raise HTTPException(status_code=409, detail="No APU is being edited")
    return editor.draft


@router.post("/begin/{apu_id}", response_model=Apu)
async def begin_edit(apu_id: str, store: ProjectStore = Depends(get_store), editor: ApuEditor = Depends(get_editor)):
    project = active_project_or_409(store)
    try:
        return editor.begin(project, apu_id)
    except ApuNotFound:
        raise HTTPException(status_code=404, detail=f"APU {apu_id} not found")


@router.get("", response_model=Apu)
async def get_draft(editor: ApuEditor = Depends(get_editor)):
    return _draft_or_409(editor)


@router.get("/costs", response_model=ApuCostOut)
async def get_draft_costs(editor: ApuEditor = Depends(get_editor)):
    return apu_breakdown(_draft_or_409(editor))


@router.patch("", response_model=Apu)
async def patch_draft(data: ApuDraftUpdate, editor: ApuEditor = Depends(get_editor)):
    _draft_or_409(editor)
    return editor.update(data)


@router.put("/resources", response_model=Apu)
async def put_resources(data: list[ResourceIn], editor: ApuEditor = Depends(get_editor)):
    _draft_or_409(editor)
    try:
        return editor.set_resources(data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid resources: {e.error_count()} error(s)")


@router.post("/resources", response_model=Resource)
async def post_resource(data: ResourceIn, editor: ApuEditor = Depends(get_editor)):
    _draft_or_409(editor)
    try:
        return editor.add_resource(data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid resource: {e.error_count()} error(s)")


@router.delete("/resources/{resource_id}")
async def delete_resource(resource_id: str, editor: ApuEditor = Depends(get_editor)):
    _draft_or_409(editor)
    if not editor.remove_resource(resource_id):
        raise HTTPException(status_code=404, detail=f"Resource {resource_id} not found")
    return {"status": "ok"}


@router.post("/generate", response_model=Apu)
async def generate_into_draft(
    data: GenerateIn,
    editor: ApuEditor = Depends(get_editor),
    generator: ApuGenerator = Depends(get_generator),
):
    _draft_or_409(editor)
    generated = await generator.generate(data.prompt)
    # the editor may have been closed while the service was answering
    if generated is None or editor.draft is None:
        return _draft_or_409(editor)
    return editor.apply_generation(generated)


@router.post("/commit")
async def commit_draft(store: ProjectStore = Depends(get_store), editor: ApuEditor = Depends(get_editor)):
    try:
        saved = editor.commit(store)
    except NoDraft:
        raise HTTPException(status_code=409, detail="No APU is being edited")
    return {"status": "ok", "saved": saved}


@router.delete("")
async def discard_draft(editor: ApuEditor = Depends(get_editor)):
    editor.discard()
    return {"status": "ok"}
