from apu_estimator.schemas.base import CamelModel


class ImportResultOut(CamelModel):
    shape: str
    projects_added: int = 0
    projects_total: int
    project_ids: list[str] = []
    replaced: bool = False
