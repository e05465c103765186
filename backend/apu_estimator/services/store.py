"""Project store: the single owner of the project collection.

Every mutation builds the new collection, writes it to storage as one
document and only then swaps it in memory, so a failed write leaves both
sides untouched.
Each write is O(total stored data).

Lifecycle: ``init_store()`` once at startup (loads the persisted document),
``get_store()`` everywhere else, ``reset_store()`` on shutdown and in tests.
Mutations are expected to be called from a single task (the event loop),
one at a time; the store itself takes no locks.
"""
from pydantic import TypeAdapter, ValidationError

from apu_estimator.core.config import settings
from apu_estimator.core.ids import new_id, now_ms
from apu_estimator.core.logging import logger
from apu_estimator.schemas.editor import GeneratedApu
from apu_estimator.schemas.project import Apu, Project, ensure_unique_ids
from apu_estimator.services.storage import DocumentStorage

_PROJECTS = TypeAdapter(list[Project])


class ProjectNotFound(LookupError):
    pass


class ApuNotFound(LookupError):
    pass


def dump_projects(projects: list[Project], indent: int | None = None) -> str:
    return _PROJECTS.dump_json(projects, by_alias=True, exclude_none=True, indent=indent).decode("utf-8")


class ProjectStore:
    def __init__(self, storage: DocumentStorage, key: str | None = None):
        self._storage = storage
        self.key = key or settings.STORAGE_KEY
        self._projects: list[Project] = []
        self._active_id: str | None = None

    # -----------------------------
    # persistence
    # -----------------------------
    def load(self) -> int:
        """(Re)read the persisted document. Corrupt data leaves the store empty."""
        self._active_id = None
        raw = self._storage.load(self.key)
        if raw is None:
            self._projects = []
            return 0
        try:
            projects = _PROJECTS.validate_json(raw)
            ensure_unique_ids(projects, "project")
            self._projects = projects
        except ValidationError as e:
            logger.warning("store_load_failed", key=self.key, errors=e.error_count())
            self._projects = []
        except ValueError as e:
            logger.warning("store_load_failed", key=self.key, error=str(e))
            self._projects = []
        logger.info("store_loaded", key=self.key, projects=len(self._projects))
        return len(self._projects)

    def _commit(self, projects: list[Project]) -> None:
        self._storage.save(self.key, dump_projects(projects))
        self._projects = projects
        if self._active_id is not None and self._index(self._active_id) is None:
            self._active_id = None

    # -----------------------------
    # lookup
    # -----------------------------
    def _index(self, project_id: str) -> int | None:
        for i, p in enumerate(self._projects):
            if p.id == project_id:
                return i
        return None

    def _get(self, project_id: str) -> Project:
        i = self._index(project_id)
        if i is None:
            raise ProjectNotFound(project_id)
        return self._projects[i]

    def get(self, project_id: str) -> Project:
        """Return a copy; edits to it never reach the store."""
        return self._get(project_id).model_copy(deep=True)

    def list_projects(self) -> list[Project]:
        return [p.model_copy(deep=True) for p in self._projects]

    def __len__(self) -> int:
        return len(self._projects)

    # -----------------------------
    # active project pointer
    # -----------------------------
    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def active(self) -> Project | None:
        if self._active_id is None:
            return None
        return self.get(self._active_id)

    def open(self, project_id: str) -> Project:
        project = self.get(project_id)
        self._active_id = project_id
        return project

    def close(self) -> None:
        self._active_id = None

    # -----------------------------
    # mutations
    # -----------------------------
    def create(self, name: str, location: str | None = None, client: str | None = None) -> Project:
        if not name or not name.strip():
            raise ValueError("Project name is required")
        project = Project(id=new_id(), name=name, last_modified=now_ms(), apus=[],
                          location=location, client=client)
        self._commit([*self._projects, project])
        logger.info("project_created", project_id=project.id, name=name)
        return project.model_copy(deep=True)

    def replace_apus(self, project_id: str, apus: list[Apu]) -> Project:
        """Authoritative mutation point for every APU add/edit/delete."""
        i = self._index(project_id)
        if i is None:
            raise ProjectNotFound(project_id)
        current = self._projects[i]
        data = current.model_dump()
        data["apus"] = [a.model_dump() for a in apus]
        data["last_modified"] = now_ms()
        updated = Project.model_validate(data)

        projects = list(self._projects)
        projects[i] = updated
        self._commit(projects)
        logger.info("project_apus_replaced", project_id=project_id, apus=len(apus))
        return updated.model_copy(deep=True)

    def delete(self, project_id: str) -> None:
        """Irreversible; only a previously exported backup brings it back."""
        if self._index(project_id) is None:
            raise ProjectNotFound(project_id)
        self._commit([p for p in self._projects if p.id != project_id])
        logger.info("project_deleted", project_id=project_id)

    def add_apu(self, project_id: str) -> Apu:
        project = self._get(project_id)
        apu = Apu(id=new_id(), code=f"CON-{len(project.apus) + 1}")
        self.replace_apus(project_id, [*project.apus, apu])
        return apu

    def add_generated_apu(self, project_id: str, generated: GeneratedApu) -> Apu:
        project = self._get(project_id)
        # generated APUs keep the template code
        apu = Apu(
            id=new_id(),
            description=generated.description or "",
            unit=generated.unit or "unid",
            resources=generated.resources or [],
        )
        self.replace_apus(project_id, [*project.apus, apu])
        return apu

    def delete_apu(self, project_id: str, apu_id: str) -> None:
        project = self._get(project_id)
        if project.find_apu(apu_id) is None:
            raise ApuNotFound(apu_id)
        self.replace_apus(project_id, [a for a in project.apus if a.id != apu_id])

    def append(self, project: Project) -> Project:
        self._commit([*self._projects, project])
        return project.model_copy(deep=True)

    def replace_all(self, projects: list[Project]) -> int:
        """Swap the whole collection. No merge, no undo. Project ids must be unique."""
        ensure_unique_ids(projects, "project")
        self._commit(list(projects))
        self._active_id = None
        logger.warning("store_replaced", key=self.key, projects=len(projects))
        return len(projects)


_store: ProjectStore | None = None


def init_store(storage: DocumentStorage, key: str | None = None) -> ProjectStore:
    global _store
    _store = ProjectStore(storage, key)
    _store.load()
    return _store


def get_store() -> ProjectStore:
    if _store is None:
        raise RuntimeError("project store is not initialised; call init_store() first")
    return _store


def reset_store() -> None:
    global _store
    _store = None
