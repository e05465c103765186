from typing import Any


class ReconcileError(Exception):
    """Import or restore rejected; nothing was written."""


class ImportParseError(ReconcileError):
    pass


class ImportFormatError(ReconcileError):
    pass


class RestoreNotConfirmed(ReconcileError):
    pass


def is_project_shaped(v: Any) -> bool:
    name = v.get("name") if isinstance(v, dict) else None
    return isinstance(name, str) and bool(name.strip()) and isinstance(v.get("apus"), list)

def is_backup_shaped(v: Any) -> bool:
    return isinstance(v, list) and len(v) > 0 and all(is_project_shaped(x) for x in v)
