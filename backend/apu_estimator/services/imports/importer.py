"""Reconcile uploaded project files against the store.

An upload is parsed completely, classified by shape and validated before
anything is written:

* full backup (list of project records)  -> replaces the whole store
* single project (record with apus/name) -> appended under a fresh id
* legacy list of APUs                    -> wrapped in a new project, appended
* anything else                          -> rejected

Appends never touch existing projects and are not deduplicated: the same
file imported twice gives two projects. Restoring a backup is destructive
and cannot be undone; callers must obtain confirmation first.
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import TypeAdapter, ValidationError

from apu_estimator.core.config import settings
from apu_estimator.core.ids import new_id, now_ms
from apu_estimator.core.logging import logger
from apu_estimator.schemas.imports import ImportResultOut
from apu_estimator.schemas.project import Apu, Project, ensure_unique_ids
from apu_estimator.services.imports.validators import (
    ImportFormatError,
    ImportParseError,
    RestoreNotConfirmed,
    is_backup_shaped,
    is_project_shaped,
)
from apu_estimator.services.store import ProjectStore

_PROJECTS = TypeAdapter(list[Project])
_APUS = TypeAdapter(list[Apu])


class ImportShape(str, Enum):
    FULL_BACKUP = "full_backup"
    SINGLE_PROJECT = "single_project"
    LEGACY_APU_LIST = "legacy_apu_list"
    UNRECOGNIZED = "unrecognized"


def parse_payload(raw: bytes | str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as e:  # JSONDecodeError and UnicodeDecodeError
        raise ImportParseError(f"File could not be read as JSON: {e}") from e


def classify(value: Any) -> ImportShape:
    if is_backup_shaped(value):
        return ImportShape.FULL_BACKUP
    if is_project_shaped(value):
        return ImportShape.SINGLE_PROJECT
    if isinstance(value, list):
        return ImportShape.LEGACY_APU_LIST
    return ImportShape.UNRECOGNIZED


def _validated(adapter_or_model, value: Any, what: str):
    try:
        if isinstance(adapter_or_model, TypeAdapter):
            return adapter_or_model.validate_python(value)
        return adapter_or_model.model_validate(value)
    except ValidationError as e:
        raise ImportParseError(f"Invalid {what}: {e.error_count()} field error(s)") from e


def build_project(value: Any, shape: ImportShape) -> Project:
    """Turn a single-project or legacy payload into a new project with a fresh id."""
    if shape is ImportShape.SINGLE_PROJECT:
        project = _validated(Project, value, "project")
        return project.model_copy(update={"id": new_id()})
    if shape is ImportShape.LEGACY_APU_LIST:
        apus = _validated(_APUS, value, "APU list")
        return _validated(
            Project,
            {"id": new_id(), "name": settings.IMPORTED_PROJECT_NAME, "last_modified": now_ms(),
             "apus": [a.model_dump() for a in apus]},
            "APU list",
        )
    raise ImportFormatError(f"Cannot build a project from a {shape.value} payload")


def _restore(store: ProjectStore, value: list) -> ImportResultOut:
    projects = _validated(_PROJECTS, value, "backup")
    try:
        ensure_unique_ids(projects, "project")
    except ValueError as e:
        raise ImportParseError(f"Invalid backup: {e}") from e
    total = store.replace_all(projects)
    logger.warning("backup_restored", projects=total)
    return ImportResultOut(
        shape=ImportShape.FULL_BACKUP.value,
        projects_added=total,
        projects_total=total,
        project_ids=[p.id for p in projects],
        replaced=True,
    )


def import_payload(store: ProjectStore, raw: bytes | str, *, confirm_restore: bool = False) -> ImportResultOut:
    value = parse_payload(raw)
    shape = classify(value)
    logger.info("import_classified", shape=shape.value)

    if shape is ImportShape.UNRECOGNIZED:
        raise ImportFormatError("Unrecognized file format")
    if shape is ImportShape.FULL_BACKUP:
        if not confirm_restore:
            raise RestoreNotConfirmed("File is a full backup; restoring replaces all projects and needs confirmation")
        return _restore(store, value)

    project = build_project(value, shape)
    store.append(project)
    logger.info("project_imported", project_id=project.id, shape=shape.value, apus=len(project.apus))
    return ImportResultOut(
        shape=shape.value,
        projects_added=1,
        projects_total=len(store),
        project_ids=[project.id],
    )


def restore_backup(store: ProjectStore, raw: bytes | str) -> ImportResultOut:
    """Replace every stored project with the backup's. No undo."""
    value = parse_payload(raw)
    if value != [] and classify(value) is not ImportShape.FULL_BACKUP:
        raise ImportFormatError("File is not a valid backup")
    return _restore(store, value)
