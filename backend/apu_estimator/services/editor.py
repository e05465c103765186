"""APU editor: edits happen on a detached copy and reach the store on commit."""
from apu_estimator.core.logging import logger
from apu_estimator.schemas.editor import ApuDraftUpdate, GeneratedApu, ResourceIn
from apu_estimator.schemas.project import Apu, Project, Resource
from apu_estimator.services.store import ApuNotFound, ProjectNotFound, ProjectStore


class NoDraft(RuntimeError):
    pass


class ApuEditor:
    def __init__(self):
        self.project_id: str | None = None
        self.draft: Apu | None = None

    @property
    def editing(self) -> bool:
        return self.draft is not None

    def _require(self) -> Apu:
        if self.draft is None:
            raise NoDraft("no APU is being edited")
        return self.draft

    def begin(self, project: Project, apu_id: str) -> Apu:
        apu = project.find_apu(apu_id)
        if apu is None:
            raise ApuNotFound(apu_id)
        self.project_id = project.id
        self.draft = apu.model_copy(deep=True)
        return self.draft

    def update(self, changes: ApuDraftUpdate) -> Apu:
        draft = self._require()
        for field, value in changes.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(draft, field, value)
        return draft

    def set_resources(self, resources: list[ResourceIn]) -> Apu:
        draft = self._require()
        new = [r.to_resource() for r in resources]
        # validate id uniqueness the same way stored APUs are checked
        self.draft = Apu.model_validate({**draft.model_dump(), "resources": [r.model_dump() for r in new]})
        return self.draft

    def add_resource(self, resource: ResourceIn) -> Resource:
        draft = self._require()
        new = resource.to_resource()
        self.draft = Apu.model_validate({**draft.model_dump(), "resources": [*(r.model_dump() for r in draft.resources), new.model_dump()]})
        return new

    def remove_resource(self, resource_id: str) -> bool:
        draft = self._require()
        kept = [r for r in draft.resources if r.id != resource_id]
        removed = len(kept) != len(draft.resources)
        draft.resources = kept
        return removed

    def apply_generation(self, generated: GeneratedApu) -> Apu:
        """Generated resources replace the draft's resources wholesale."""
        data = self._require().model_dump()
        if generated.description:
            data["description"] = generated.description
        if generated.unit:
            data["unit"] = generated.unit
        data["resources"] = [r.model_dump() for r in (generated.resources or [])]
        self.draft = Apu.model_validate(data)
        return self.draft

    def commit(self, store: ProjectStore) -> bool:
        """Write the draft back by id. A draft whose APU is gone is dropped.

        A failed write propagates and leaves the draft in place.
        """
        draft = self._require()
        project_id = self.project_id

        try:
            project = store.get(project_id)
        except ProjectNotFound:
            project = None
        if project is None or project.find_apu(draft.id) is None:
            self.discard()
            logger.debug("draft_discarded", project_id=project_id, apu_id=draft.id)
            return False
        apus = [draft if a.id == draft.id else a for a in project.apus]
        store.replace_apus(project_id, apus)
        self.discard()
        return True

    def discard(self) -> None:
        self.project_id = None
        self.draft = None

    def discard_if(self, project_id: str, apu_id: str) -> None:
        if self.draft is not None and self.project_id == project_id and self.draft.id == apu_id:
            self.discard()


_editor = ApuEditor()


def get_editor() -> ApuEditor:
    return _editor
