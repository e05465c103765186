import pytest

from apu_estimator.schemas.editor import ApuDraftUpdate, GeneratedApu, ResourceIn
from apu_estimator.schemas.project import Resource, ResourceType
from apu_estimator.services.editor import ApuEditor, NoDraft
from apu_estimator.services.store import ApuNotFound, ProjectStore


@pytest.fixture
def project(store):
    p = store.create("Edificio")
    store.add_apu(p.id)
    store.add_apu(p.id)
    return store.open(p.id)


def test_draft_is_isolated_until_commit(store, project):
    ed = ApuEditor()
    apu_id = project.apus[0].id
    ed.begin(project, apu_id)
    ed.update(ApuDraftUpdate(description="Block wall", quantity=40))
    ed.add_resource(ResourceIn(name="block", unit="pza", price=1.2, quantity=12.5))
    assert ed.draft.description == "Block wall"
    assert store.get(project.id).apus[0].description == ""

    assert ed.commit(store) is True
    assert not ed.editing
    saved = store.get(project.id).apus[0]
    assert saved.id == apu_id
    assert saved.description == "Block wall"
    assert saved.quantity == 40
    assert [r.name for r in saved.resources] == ["block"]
    # order of APUs is kept
    assert [a.id for a in store.get(project.id).apus] == [a.id for a in project.apus]


def test_commit_after_apu_deleted_is_dropped(store, project):
    ed = ApuEditor()
    victim = project.apus[0]
    ed.begin(project, victim.id)
    ed.update(ApuDraftUpdate(description="edited"))
    store.delete_apu(project.id, victim.id)
    before = store.get(project.id).apus

    assert ed.commit(store) is False
    after = store.get(project.id).apus
    assert after == before
    assert victim.id not in [a.id for a in after]


def test_commit_after_project_deleted_is_dropped(store, project):
    ed = ApuEditor()
    ed.begin(project, project.apus[1].id)
    store.delete(project.id)
    assert ed.commit(store) is False
    assert len(store) == 0


def test_begin_unknown_apu(project):
    with pytest.raises(ApuNotFound):
        ApuEditor().begin(project, "missing")


def test_operations_need_a_draft(store):
    ed = ApuEditor()
    with pytest.raises(NoDraft):
        ed.update(ApuDraftUpdate(code="X"))
    with pytest.raises(NoDraft):
        ed.commit(store)


def test_update_ignores_unset_fields(project):
    ed = ApuEditor()
    ed.begin(project, project.apus[0].id)
    ed.update(ApuDraftUpdate(category="Walls"))
    assert ed.draft.category == "Walls"
    assert ed.draft.code == "CON-1"
    assert ed.draft.indirects_percentage == 15


def test_edit_boundary_rejects_negative_values():
    with pytest.raises(ValueError):
        ResourceIn(name="x", price=-1)
    with pytest.raises(ValueError):
        ApuDraftUpdate(profit_percentage=-5)


def test_set_resources_rejects_duplicate_ids(project):
    ed = ApuEditor()
    ed.begin(project, project.apus[0].id)
    with pytest.raises(ValueError):
        ed.set_resources([ResourceIn(id="1", name="a"), ResourceIn(id="1", name="b")])
    assert ed.draft.resources == []


def test_remove_resource(project):
    ed = ApuEditor()
    ed.begin(project, project.apus[0].id)
    r = ed.add_resource(ResourceIn(name="sand", price=3, quantity=1))
    assert ed.remove_resource(r.id) is True
    assert ed.remove_resource(r.id) is False
    assert ed.draft.resources == []


def test_generation_replaces_resources_wholesale(project):
    ed = ApuEditor()
    ed.begin(project, project.apus[0].id)
    ed.update(ApuDraftUpdate(description="old", unit="m2"))
    ed.add_resource(ResourceIn(name="old resource", price=1, quantity=1))

    ed.apply_generation(GeneratedApu(resources=[
        Resource(name="rebar", unit="kg", price=1.5, quantity=8),
        Resource(name="welder", unit="h", price=20, quantity=0.1, type=ResourceType.EQUIPMENT),
    ]))
    assert ed.draft.description == "old"
    assert ed.draft.unit == "m2"
    assert [r.name for r in ed.draft.resources] == ["rebar", "welder"]

    ed.apply_generation(GeneratedApu(description="new"))
    assert ed.draft.description == "new"
    assert ed.draft.resources == []


def test_discard_if(project):
    ed = ApuEditor()
    ed.begin(project, project.apus[0].id)
    ed.discard_if(project.id, project.apus[1].id)
    assert ed.editing
    ed.discard_if(project.id, project.apus[0].id)
    assert not ed.editing


def test_generation_with_repeated_ids_still_commits(store, project):
    ed = ApuEditor()
    ed.begin(project, project.apus[0].id)
    ed.apply_generation(GeneratedApu.model_validate({"resources": [
        {"id": "r1", "name": "rebar", "price": 1.5, "quantity": 8},
        {"id": "r1", "name": "wire", "price": 2, "quantity": 0.1},
    ]}))
    ids = [r.id for r in ed.draft.resources]
    assert len(set(ids)) == 2

    assert ed.commit(store) is True
    saved = store.get(project.id).apus[0]
    assert [r.name for r in saved.resources] == ["rebar", "wire"]


class _BrokenStorage:
    def __init__(self, inner):
        self.inner = inner
        self.broken = False

    def load(self, key):
        return self.inner.load(key)

    def save(self, key, payload):
        if self.broken:
            raise OSError("database is locked")
        self.inner.save(key, payload)


def test_failed_commit_keeps_the_draft(storage):
    broken = _BrokenStorage(storage)
    s = ProjectStore(broken, key="test-projects")
    p = s.create("Edificio")
    apu = s.add_apu(p.id)

    ed = ApuEditor()
    ed.begin(s.open(p.id), apu.id)
    ed.update(ApuDraftUpdate(description="Losa"))
    broken.broken = True
    with pytest.raises(OSError):
        ed.commit(s)
    assert ed.editing
    assert ed.draft.description == "Losa"
    assert s.get(p.id).apus[0].description == ""

    broken.broken = False
    assert ed.commit(s) is True
    assert s.get(p.id).apus[0].description == "Losa"
