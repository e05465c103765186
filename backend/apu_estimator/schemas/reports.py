from apu_estimator.schemas.base import CamelModel


class ProjectStats(CamelModel):
    total_direct_cost: float = 0.0
    total_price: float = 0.0
    material_cost: float = 0.0
    labor_cost: float = 0.0
    equipment_cost: float = 0.0
    transport_cost: float = 0.0


class ApuCostOut(CamelModel):
    id: str
    code: str
    description: str
    unit: str
    category: str
    quantity: float
    direct_cost: float
    indirects: float
    profit: float
    unit_price: float
    total: float


class ProjectSummaryOut(CamelModel):
    id: str
    name: str
    last_modified: int
    location: str | None = None
    client: str | None = None
    apu_count: int
    stats: ProjectStats
