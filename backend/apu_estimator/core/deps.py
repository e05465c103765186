from fastapi import HTTPException, status

from apu_estimator.schemas.project import Project
from apu_estimator.services.editor import ApuEditor, get_editor
from apu_estimator.services.generation import ApuGenerator, get_generator
from apu_estimator.services.store import ProjectNotFound, ProjectStore, get_store

__all__ = ["get_store", "get_editor", "get_generator", "ApuEditor", "ApuGenerator", "ProjectStore",
           "project_or_404", "active_project_or_409"]

def project_or_404(store: ProjectStore, project_id: str) -> Project:
    try:
        return store.get(project_id)
    except ProjectNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Project {project_id} not found")

def active_project_or_409(store: ProjectStore) -> Project:
    project = store.active
    if project is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No project is open")
    return project
