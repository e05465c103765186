from enum import Enum
from typing import Iterable

from pydantic import Field, field_validator

from apu_estimator.core.ids import new_id, now_ms
from apu_estimator.schemas.base import CamelModel


class ResourceType(str, Enum):
    MATERIAL = "Material"
    LABOR = "Mano de Obra"
    EQUIPMENT = "Equipo/Herramienta"
    TRANSPORT = "Transporte/Fletes"


def ensure_unique_ids(items: Iterable, what: str) -> None:
    seen = set()
    for it in items:
        if it.id in seen:
            raise ValueError(f"duplicate {what} id {it.id!r}")
        seen.add(it.id)


class Resource(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str = ""
    unit: str = ""
    price: float = 0.0  # unit cost of the resource
    quantity: float = 0.0  # consumption per unit of the APU
    type: ResourceType = ResourceType.MATERIAL


class Apu(CamelModel):
    id: str = Field(default_factory=new_id)
    code: str = "NEW-001"
    description: str = ""
    unit: str = "unid"
    quantity: float = 1.0  # project-wide quantity of this unit of work
    resources: list[Resource] = Field(default_factory=list)
    indirects_percentage: float = 15.0
    profit_percentage: float = 10.0
    category: str = "General"

    @field_validator("resources")
    @classmethod
    def _unique_resources(cls, v: list[Resource]) -> list[Resource]:
        ensure_unique_ids(v, "resource")
        return v


class Project(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    last_modified: int = Field(default_factory=now_ms)  # epoch ms
    apus: list[Apu] = Field(default_factory=list)
    location: str | None = None
    client: str | None = None

    @field_validator("apus")
    @classmethod
    def _unique_apus(cls, v: list[Apu]) -> list[Apu]:
        ensure_unique_ids(v, "APU")
        return v

    def find_apu(self, apu_id: str) -> Apu | None:
        for a in self.apus:
            if a.id == apu_id:
                return a
        return None


class ProjectCreate(CamelModel):
    name: str = Field(min_length=1)
    location: str | None = None
    client: str | None = None
