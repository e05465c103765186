from fastapi import APIRouter
from apu_estimator.api.routers import projects, apus, editor, imports

api_router = APIRouter()
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(apus.router, prefix="/projects/{project_id}/apus", tags=["apus"])
api_router.include_router(editor.router, prefix="/editor", tags=["editor"])
api_router.include_router(imports.router, prefix="/imports", tags=["imports"])
