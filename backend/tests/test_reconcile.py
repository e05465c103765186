import json

import pytest

from apu_estimator.core.config import settings
from apu_estimator.services.imports.importer import ImportShape, classify, import_payload, restore_backup
from apu_estimator.services.imports.validators import ImportFormatError, ImportParseError, RestoreNotConfirmed


def _project(name="Obra", apus=None, pid="1700000000000"):
    return {"id": pid, "name": name, "lastModified": 1700000000000, "apus": apus or []}


def _apu(aid="a1", price=100, qty=2):
    return {
        "id": aid, "code": "CON-1", "description": "Wall", "unit": "m2", "quantity": 10,
        "resources": [{"id": "r1", "name": "brick", "unit": "pza", "price": price, "quantity": qty, "type": "Material"}],
        "indirectsPercentage": 15, "profitPercentage": 10, "category": "Walls",
    }


@pytest.mark.parametrize("value,shape", [
    ([_project("a"), _project("b")], ImportShape.FULL_BACKUP),
    (_project(), ImportShape.SINGLE_PROJECT),
    ([_apu()], ImportShape.LEGACY_APU_LIST),
    ([], ImportShape.LEGACY_APU_LIST),
    ([_project(), _apu()], ImportShape.LEGACY_APU_LIST),
    ({"name": "no apus"}, ImportShape.UNRECOGNIZED),
    ({"name": "", "apus": []}, ImportShape.UNRECOGNIZED),
    ({"name": "   ", "apus": []}, ImportShape.UNRECOGNIZED),
    ({"name": None, "apus": []}, ImportShape.UNRECOGNIZED),
    (42, ImportShape.UNRECOGNIZED),
    ("text", ImportShape.UNRECOGNIZED),
    (None, ImportShape.UNRECOGNIZED),
])
def test_classify(value, shape):
    assert classify(value) is shape


def test_single_project_gets_fresh_id(store):
    existing = store.create("Existing")
    payload = json.dumps(_project("Existing", [_apu()], pid=existing.id))
    r = import_payload(store, payload)
    assert r.shape == "single_project"
    assert r.projects_added == 1
    assert len(store) == 2
    new_id = r.project_ids[0]
    assert new_id != existing.id
    imported = store.get(new_id)
    assert imported.name == "Existing"
    assert imported.apus[0].resources[0].price == 100
    # the original project is untouched
    assert store.get(existing.id).apus == []


def test_same_project_twice_appends_twice(store):
    payload = json.dumps(_project("Twin", [_apu()]))
    first = import_payload(store, payload)
    second = import_payload(store, payload)
    assert len(store) == 2
    assert first.project_ids != second.project_ids


def test_legacy_apu_list_is_wrapped(store):
    r = import_payload(store, json.dumps([_apu("a1"), _apu("a2")]).encode("utf-8"))
    assert r.shape == "legacy_apu_list"
    p = store.get(r.project_ids[0])
    assert p.name == settings.IMPORTED_PROJECT_NAME
    assert [a.id for a in p.apus] == ["a1", "a2"]
    assert p.last_modified > 1700000000000


def test_legacy_apus_get_template_defaults(store):
    r = import_payload(store, json.dumps([{"id": "x", "description": "bare"}]))
    apu = store.get(r.project_ids[0]).apus[0]
    assert apu.unit == "unid"
    assert apu.indirects_percentage == 15
    assert apu.resources == []


def test_full_backup_needs_confirmation(store):
    store.create("keep me")
    payload = json.dumps([_project("a", pid="1"), _project("b", pid="2")])
    with pytest.raises(RestoreNotConfirmed):
        import_payload(store, payload)
    assert [p.name for p in store.list_projects()] == ["keep me"]

    r = import_payload(store, payload, confirm_restore=True)
    assert r.replaced
    assert [p.id for p in store.list_projects()] == ["1", "2"]


def test_restore_is_idempotent(store, storage):
    store.create("old 1")
    store.create("old 2")
    store.create("old 3")
    payload = json.dumps([_project("a", [_apu()], pid="10"), _project("b", pid="20")])

    restore_backup(store, payload)
    restore_backup(store, payload)
    assert len(store) == 2
    assert [p.id for p in store.list_projects()] == ["10", "20"]
    assert len(json.loads(storage.load(store.key))) == 2


def test_restore_clears_active_project(store):
    p = store.create("open one")
    store.open(p.id)
    restore_backup(store, json.dumps([_project("a", pid="1")]))
    assert store.active is None


def test_restore_empty_backup(store):
    store.create("x")
    r = restore_backup(store, "[]")
    assert r.projects_total == 0
    assert len(store) == 0


@pytest.mark.parametrize("payload", [json.dumps(_project()), json.dumps([_apu()]), "5"])
def test_restore_rejects_non_backups(store, payload):
    store.create("x")
    with pytest.raises(ImportFormatError):
        restore_backup(store, payload)
    assert len(store) == 1


@pytest.mark.parametrize("payload", ["42", '"just a string"', "null", '{"foo": 1}'])
def test_unrecognized_shape_leaves_store_alone(store, storage, payload):
    store.create("x")
    before = storage.load(store.key)
    with pytest.raises(ImportFormatError):
        import_payload(store, payload)
    assert storage.load(store.key) == before
    assert len(store) == 1


@pytest.mark.parametrize("payload", ["{not json", b"\xff\xfe\x00garbage", ""])
def test_malformed_json_is_a_parse_error(store, payload):
    with pytest.raises(ImportParseError):
        import_payload(store, payload)
    assert len(store) == 0


def test_invalid_records_abort_before_writing(store, storage):
    store.create("x")
    before = storage.load(store.key)
    bad_backup = [_project("a", pid="1"), _project("b", [{"id": "a", "quantity": "lots"}], pid="2")]
    with pytest.raises(ImportParseError):
        import_payload(store, json.dumps(bad_backup), confirm_restore=True)
    with pytest.raises(ImportParseError):
        import_payload(store, json.dumps([1, 2, 3]))
    assert storage.load(store.key) == before
    assert [p.name for p in store.list_projects()] == ["x"]


def test_duplicate_resource_ids_rejected(store):
    apu = _apu()
    apu["resources"].append(dict(apu["resources"][0]))
    with pytest.raises(ImportParseError):
        import_payload(store, json.dumps(_project(apus=[apu])))
    assert len(store) == 0


def test_restore_rejects_repeated_project_ids(store, storage):
    store.create("x")
    before = storage.load(store.key)
    backup = [_project("a", pid="1"), _project("b", pid="1")]
    with pytest.raises(ImportParseError):
        restore_backup(store, json.dumps(backup))
    with pytest.raises(ImportParseError):
        import_payload(store, json.dumps(backup), confirm_restore=True)
    assert storage.load(store.key) == before
    assert [p.name for p in store.list_projects()] == ["x"]


def test_blank_named_project_is_not_imported(store):
    with pytest.raises(ImportFormatError):
        import_payload(store, json.dumps(_project(name="")))
    assert len(store) == 0
